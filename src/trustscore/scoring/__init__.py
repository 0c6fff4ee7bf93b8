"""Online trust scoring.

This module provides:
- Feature extraction from access events, devices and login state
- Risk classification and access policy
- On-demand and batch scoring with score history
"""

from .engine import PeriodicRecompute, TrustScoreEngine
from .errors import (
    ExtractionError,
    InvalidTrainingSetError,
    ModelError,
    PersistenceError,
    TrustScoreError,
    UntrainedModelError,
)
from .features import FeatureExtractor
from .history import HistorySink, InMemoryHistorySink, summarize_history
from .models import (
    AccessDecision,
    AccessEvent,
    BatchResult,
    DeviceRecord,
    FeatureVector,
    NetworkType,
    RiskLevel,
    RiskScoreHistoryEntry,
    ScoringOutcome,
    TrainingSample,
    UserRecord,
    UserSignals,
)
from .policy import HIGH_RISK_THRESHOLD, MEDIUM_RISK_THRESHOLD, classify, decide

__all__ = [
    "HIGH_RISK_THRESHOLD",
    "MEDIUM_RISK_THRESHOLD",
    "AccessDecision",
    "AccessEvent",
    "BatchResult",
    "DeviceRecord",
    "ExtractionError",
    "FeatureExtractor",
    "FeatureVector",
    "HistorySink",
    "InMemoryHistorySink",
    "InvalidTrainingSetError",
    "ModelError",
    "NetworkType",
    "PeriodicRecompute",
    "PersistenceError",
    "RiskLevel",
    "RiskScoreHistoryEntry",
    "ScoringOutcome",
    "TrainingSample",
    "TrustScoreEngine",
    "TrustScoreError",
    "UntrainedModelError",
    "UserRecord",
    "UserSignals",
    "classify",
    "decide",
    "summarize_history",
]
