"""Shared fixtures for CLI tests."""

from pathlib import Path

import pytest
import yaml


@pytest.fixture
def tmp_config_path(tmp_path: Path) -> Path:
    """Config file pointing the model store at a temporary directory."""
    config_path = tmp_path / "trustscore.yaml"
    config_path.write_text(
        yaml.safe_dump(
            {
                "model": {"n_estimators": 10},
                "store": {"model_dir": str(tmp_path / "models")},
                "training": {"samples": 150},
                "evaluation": {"samples": 60, "folds": 3},
                "logging": {"level": "WARNING"},
            }
        )
    )
    return config_path


@pytest.fixture
def trained_config_path(tmp_config_path: Path) -> Path:
    """Config whose store already holds a trained model."""
    from trustscore.cli.model_cmd import train_command

    train_command(config_path=str(tmp_config_path))
    return tmp_config_path
