"""Factory functions for building scoring components from configuration."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from trustscore.ml.store import ModelStore
from trustscore.ml.trust_model import (
    GradientBoostingTrustModel,
    LinearTrustModel,
    RandomForestTrustModel,
    TrustModel,
)

if TYPE_CHECKING:
    from trustscore.config.schema import TrustScoreConfig


def create_trust_model(config: TrustScoreConfig) -> TrustModel:
    """Create an untrained trust model based on configuration.

    Reads ``config.model.algorithm`` and returns the matching model,
    configured from the rest of the ``model`` section.

    Args:
        config: trustscore configuration.

    Returns:
        An untrained trust model.

    Raises:
        ValueError: If the algorithm is not recognised.
    """
    model_config = config.model
    algorithm = model_config.algorithm

    if algorithm == "random_forest":
        return RandomForestTrustModel(
            n_estimators=model_config.n_estimators,
            max_depth=model_config.max_depth,
            random_state=model_config.random_state,
            model_name=model_config.name,
            model_version=model_config.version,
        )
    elif algorithm == "gradient_boosting":
        return GradientBoostingTrustModel(
            n_estimators=model_config.n_estimators,
            max_depth=model_config.max_depth or 3,
            random_state=model_config.random_state,
            model_name=model_config.name,
            model_version=model_config.version,
        )
    elif algorithm == "linear":
        return LinearTrustModel(model_name=model_config.name, model_version=model_config.version)
    else:
        raise ValueError(f"Unknown model algorithm: {algorithm}")


def create_model_store(config: TrustScoreConfig) -> ModelStore:
    """Create the model artifact store described by ``config.store``."""
    return ModelStore(
        model_dir=Path(config.store.model_dir).expanduser(),
        filename=config.store.filename,
    )
