"""YAML configuration with pydantic validation."""

from trustscore.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config, save_config
from trustscore.config.schema import TrustScoreConfig

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "ConfigError",
    "TrustScoreConfig",
    "load_config",
    "save_config",
]
