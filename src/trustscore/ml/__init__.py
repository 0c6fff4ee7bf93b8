"""Machine learning components for trust scoring.

This module provides:
- Rule-labeled synthetic training data
- Trust score regression models with persistence
- Training and model artifact management
- Offline evaluation (regression and confusion metrics)
"""

from .evaluation import ModelEvaluator
from .factory import create_model_store, create_trust_model
from .store import ModelStore
from .synthetic import SyntheticDataGenerator, compute_label, generate
from .training import ModelTrainer
from .trust_model import (
    GradientBoostingTrustModel,
    LinearTrustModel,
    RandomForestTrustModel,
    TrustModel,
)

__all__ = [
    "GradientBoostingTrustModel",
    "LinearTrustModel",
    "ModelEvaluator",
    "ModelStore",
    "ModelTrainer",
    "RandomForestTrustModel",
    "SyntheticDataGenerator",
    "TrustModel",
    "compute_label",
    "create_model_store",
    "create_trust_model",
    "generate",
]
