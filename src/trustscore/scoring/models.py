"""Data models for trust scoring."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class NetworkType(StrEnum):
    """Network a user connected from."""

    INTERNAL = "internal"
    VPN = "vpn"
    EXTERNAL = "external"
    TOR = "tor"


# Risk weight per network type (0-100)
NETWORK_RISK_WEIGHTS: dict[NetworkType, float] = {
    NetworkType.INTERNAL: 10.0,
    NetworkType.VPN: 25.0,
    NetworkType.EXTERNAL: 45.0,
    NetworkType.TOR: 80.0,
}


class RiskLevel(StrEnum):
    """Discrete risk bucket derived from a trust score."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class AccessDecision(StrEnum):
    """Access decision for a risk level."""

    ALLOW = "ALLOW"
    WARN = "WARN"  # step-up authentication required
    DENY = "DENY"


class UserRecord(BaseModel):
    """User state read for extraction and written back after scoring."""

    id: str
    last_login_at: datetime | None = None
    current_risk_level: RiskLevel | None = None
    trust_score: float | None = Field(default=None, ge=0.0, le=100.0)


class DeviceRecord(BaseModel):
    """Device posture for one of a user's devices."""

    patched: bool = True
    antivirus_enabled: bool = True
    risk_score: float = Field(default=50.0, ge=0.0, le=100.0)


class AccessEvent(BaseModel):
    """A single access attempt."""

    timestamp: datetime
    success: bool
    hour_of_day: int = Field(ge=0, le=23)
    country: str | None = None
    network_type: NetworkType | None = None


class FeatureVector(BaseModel):
    """Fixed-shape numeric summary of a user's recent signals."""

    # Behavioral
    failed_login_rate: float = Field(default=0.0, ge=0.0, le=1.0)
    night_access_rate: float = Field(default=0.0, ge=0.0, le=1.0)
    login_frequency_24h: float = Field(default=0.0, ge=0.0)

    # Device posture
    avg_device_risk: float = Field(default=50.0, ge=0.0, le=100.0)
    unpatched_device_ratio: float = Field(default=0.0, ge=0.0, le=1.0)
    antivirus_disabled_ratio: float = Field(default=0.0, ge=0.0, le=1.0)

    # Contextual
    network_risk_score: float = Field(default=30.0, ge=0.0, le=100.0)
    location_change_score: float = Field(default=0.0, ge=0.0)
    time_anomaly_score: float = Field(default=0.0, ge=0.0, le=100.0)

    # Account state
    seconds_since_last_login: float = Field(default=0.0, ge=0.0)

    def to_array(self) -> list[float]:
        """Convert to flat array for ML models."""
        return [
            self.failed_login_rate,
            self.night_access_rate,
            self.login_frequency_24h,
            self.avg_device_risk,
            self.unpatched_device_ratio,
            self.antivirus_disabled_ratio,
            self.network_risk_score,
            self.location_change_score,
            self.time_anomaly_score,
            self.seconds_since_last_login,
        ]

    @classmethod
    def feature_names(cls) -> list[str]:
        """Get feature names in array order."""
        return [
            "failed_login_rate",
            "night_access_rate",
            "login_frequency_24h",
            "avg_device_risk",
            "unpatched_device_ratio",
            "antivirus_disabled_ratio",
            "network_risk_score",
            "location_change_score",
            "time_anomaly_score",
            "seconds_since_last_login",
        ]

    @classmethod
    def from_array(cls, values: list[float]) -> "FeatureVector":
        """Build a vector from values in :meth:`feature_names` order."""
        names = cls.feature_names()
        if len(values) != len(names):
            raise ValueError(f"Expected {len(names)} feature values, got {len(values)}")
        return cls(**{name: float(value) for name, value in zip(names, values)})


class TrainingSample(BaseModel):
    """Labeled feature vector used for supervised training."""

    features: FeatureVector
    label: float = Field(ge=0.0, le=100.0)
    profile: RiskLevel


class RiskScoreHistoryEntry(BaseModel):
    """Append-only record of one scoring pass."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    user_id: str
    score: float = Field(ge=0.0, le=100.0)
    risk_level: RiskLevel
    confidence: float | None = Field(default=None, ge=0.0, le=1.0)
    model_name: str
    model_version: str
    calculated_at: datetime


class ScoringOutcome(BaseModel):
    """Result of scoring a single user."""

    user_id: str
    score: float = Field(ge=0.0, le=100.0)
    risk_level: RiskLevel
    decision: AccessDecision
    confidence: float | None = None
    user: UserRecord


class UserSignals(BaseModel):
    """A user together with the signals used to score them."""

    user: UserRecord
    events: list[AccessEvent] = Field(default_factory=list)
    devices: list[DeviceRecord] = Field(default_factory=list)


class BatchResult(BaseModel):
    """Outcome of a batch recompute."""

    outcomes: list[ScoringOutcome] = Field(default_factory=list)
    failures: dict[str, str] = Field(default_factory=dict)
    duration_ms: float = 0.0

    @property
    def scored_count(self) -> int:
        return len(self.outcomes)

    @property
    def failed_count(self) -> int:
        return len(self.failures)


class TrainingResult(BaseModel):
    """Result of a training run."""

    model_config = ConfigDict(protected_namespaces=())

    success: bool
    num_samples: int
    seed: int | None = None
    training_time_ms: float
    timestamp: datetime
    model_path: str | None = None
    model_name: str
    model_version: str
    message: str | None = None


class ModelInfo(BaseModel):
    """Information about the persisted model artifact."""

    exists: bool
    path: str | None = None
    size_bytes: int = 0
    last_modified: datetime | None = None
    message: str | None = None


class EvaluationMetrics(BaseModel):
    """Regression metrics comparing predictions with generator labels."""

    mean_absolute_error: float
    root_mean_squared_error: float
    correlation_coefficient: float
    r2_score: float
    accuracy: float  # 1 - MAE/100
    num_samples: int
    folds: int | None = None
    fold_mae: list[float] = Field(default_factory=list)
    evaluation_time_ms: float
    timestamp: datetime
    summary: str


class ConfusionMetrics(BaseModel):
    """High-risk classification metrics at a fixed score threshold."""

    true_positives: int
    true_negatives: int
    false_positives: int
    false_negatives: int
    false_positive_rate: float = Field(ge=0.0, le=1.0)
    false_negative_rate: float = Field(ge=0.0, le=1.0)
    accuracy: float = Field(ge=0.0, le=1.0)
    precision: float = Field(ge=0.0, le=1.0)
    recall: float = Field(ge=0.0, le=1.0)
    f1_score: float = Field(ge=0.0, le=1.0)
    threshold: float
    test_samples: int


class DashboardStats(BaseModel):
    """Aggregate view over the latest score of every user."""

    total_users: int
    high_risk_users: int
    medium_risk_users: int
    low_risk_users: int
    average_trust_score: float
    total_score_calculations: int
    high_percentage: float
    medium_percentage: float
    low_percentage: float
