"""Pytest configuration and shared fixtures."""

from datetime import datetime, timezone

import pytest

from trustscore.config.schema import TrustScoreConfig
from trustscore.ml.store import ModelStore
from trustscore.ml.synthetic import generate
from trustscore.ml.trust_model import RandomForestTrustModel

FIXED_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    """Fixed reference time."""
    return FIXED_NOW


@pytest.fixture
def clock(now):
    """Clock that always returns the fixed reference time."""
    return lambda: now


@pytest.fixture
def default_config() -> TrustScoreConfig:
    """Provide a default configuration for tests."""
    return TrustScoreConfig()


@pytest.fixture
def small_config(tmp_path) -> TrustScoreConfig:
    """Configuration with a temporary model directory and a fast model."""
    config = TrustScoreConfig()
    config.model.n_estimators = 20
    config.store.model_dir = str(tmp_path / "models")
    config.training.samples = 300
    return config


@pytest.fixture
def model_store(tmp_path) -> ModelStore:
    """Model store in a temporary directory."""
    return ModelStore(model_dir=tmp_path / "models")


@pytest.fixture(scope="session")
def trained_model() -> RandomForestTrustModel:
    """Random forest trained on 3000 seeded samples, shared across the session.

    Tests must not retrain or restore this instance.
    """
    model = RandomForestTrustModel()
    model.train(generate(3000, seed=42))
    return model
