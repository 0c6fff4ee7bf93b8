"""Pydantic models for trustscore.yaml configuration."""

from typing import Literal

from pydantic import BaseModel, Field


class ModelConfig(BaseModel):
    """Trust model configuration."""

    algorithm: Literal["random_forest", "gradient_boosting", "linear"] = Field(
        default="random_forest",
        description="Regression algorithm used for the trust model",
    )
    n_estimators: int = Field(
        default=100, description="Number of trees for ensemble algorithms", ge=1, le=2000
    )
    max_depth: int | None = Field(
        default=None, description="Maximum tree depth (None = unlimited)", ge=1
    )
    random_state: int = Field(default=42, description="Random seed for model fitting")
    name: str | None = Field(
        default=None,
        description="Model name recorded in score history (default: <algorithm>_v1)",
    )
    version: str = Field(default="1.0.0", description="Model version recorded in score history")


class StoreConfig(BaseModel):
    """Model artifact storage configuration."""

    model_dir: str = Field(
        default="~/.trustscore/models",
        description="Directory holding the persisted model and its backups",
    )
    filename: str = Field(default="trust_model.joblib", description="Model artifact file name")


class TrainingConfig(BaseModel):
    """Synthetic training configuration."""

    samples: int = Field(
        default=1000, description="Number of synthetic training samples", ge=3, le=1_000_000
    )
    seed: int = Field(default=42, description="Seed for the synthetic data generator")


class EvaluationConfig(BaseModel):
    """Offline evaluation configuration."""

    samples: int = Field(default=500, description="Number of fresh test samples", ge=1)
    folds: int = Field(default=10, description="Folds for cross-validation", ge=2, le=100)
    seed: int = Field(default=42, description="Seed for cross-validation data and fold split")
    risk_threshold: float = Field(
        default=40.0,
        description="Scores below this value count as HIGH risk in confusion metrics",
        ge=0.0,
        le=100.0,
    )


class SchedulerConfig(BaseModel):
    """Batch recompute configuration."""

    interval_seconds: int = Field(
        default=300, description="Seconds between batch recompute passes", ge=1
    )
    max_concurrency: int = Field(
        default=8, description="Users scored in parallel during a batch pass", ge=1, le=256
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Log level for trustscore loggers"
    )


class TrustScoreConfig(BaseModel):
    """Root configuration model for trustscore."""

    model: ModelConfig = Field(default_factory=ModelConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    training: TrainingConfig = Field(default_factory=TrainingConfig)
    evaluation: EvaluationConfig = Field(default_factory=EvaluationConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
