"""Reading and writing trustscore.yaml."""

from pathlib import Path

import yaml
from pydantic import ValidationError

from trustscore.config.schema import TrustScoreConfig
from trustscore.scoring.errors import TrustScoreError

DEFAULT_CONFIG_PATH = Path.home() / ".trustscore" / "trustscore.yaml"


class ConfigError(TrustScoreError):
    """The config file exists but cannot be used."""


def _resolve(path: Path | str | None) -> Path:
    return DEFAULT_CONFIG_PATH if path is None else Path(path).expanduser()


def load_config(path: Path | str | None = None) -> TrustScoreConfig:
    """Load the configuration, falling back to defaults.

    A missing or empty file yields the default configuration, so the CLI
    works before ``trustscore init`` has been run.

    Args:
        path: Config file (default: ~/.trustscore/trustscore.yaml)

    Returns:
        Validated configuration

    Raises:
        ConfigError: If the file cannot be read, is not YAML, or fails validation
    """
    path = _resolve(path)
    if not path.exists():
        return TrustScoreConfig()

    try:
        data = yaml.safe_load(path.read_text())
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return TrustScoreConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration validation failed: {path} must contain a mapping")

    try:
        return TrustScoreConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Configuration validation failed: {e}") from e


def save_config(config: TrustScoreConfig, path: Path | str | None = None) -> Path:
    """Write the configuration as YAML, creating parent directories."""
    path = _resolve(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(config.model_dump(), default_flow_style=False, sort_keys=False))
    return path
