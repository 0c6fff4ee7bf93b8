"""Synthetic labeled training data.

Samples are drawn from three risk profiles with independent uniform ranges
per feature, then labeled with a deterministic weighted-penalty rule plus a
small amount of noise. The rule is the ground truth the trust model learns.
"""

import logging
import math
import time

import numpy as np

from ..scoring.models import FeatureVector, RiskLevel, TrainingSample

logger = logging.getLogger(__name__)

NOISE_AMPLITUDE = 2.5

# Integer-valued features are sampled with Generator.integers (high exclusive)
INTEGER_FEATURES = frozenset({"login_frequency_24h", "seconds_since_last_login"})

# (low, high) per feature; every range moves towards higher risk from LOW to HIGH
RISK_PROFILES: dict[RiskLevel, dict[str, tuple[float, float]]] = {
    RiskLevel.LOW: {
        "failed_login_rate": (0.0, 0.05),
        "night_access_rate": (0.0, 0.10),
        "login_frequency_24h": (3, 8),
        "avg_device_risk": (10.0, 30.0),
        "unpatched_device_ratio": (0.0, 0.10),
        "antivirus_disabled_ratio": (0.0, 0.05),
        "network_risk_score": (10.0, 25.0),
        "location_change_score": (0.0, 10.0),
        "time_anomaly_score": (0.0, 15.0),
        "seconds_since_last_login": (3600, 7200),
    },
    RiskLevel.MEDIUM: {
        "failed_login_rate": (0.05, 0.20),
        "night_access_rate": (0.10, 0.35),
        "login_frequency_24h": (5, 15),
        "avg_device_risk": (30.0, 60.0),
        "unpatched_device_ratio": (0.10, 0.40),
        "antivirus_disabled_ratio": (0.05, 0.25),
        "network_risk_score": (25.0, 50.0),
        "location_change_score": (10.0, 40.0),
        "time_anomaly_score": (15.0, 45.0),
        "seconds_since_last_login": (7200, 14400),
    },
    RiskLevel.HIGH: {
        "failed_login_rate": (0.20, 0.60),
        "night_access_rate": (0.35, 0.75),
        "login_frequency_24h": (15, 35),
        "avg_device_risk": (60.0, 90.0),
        "unpatched_device_ratio": (0.40, 0.90),
        "antivirus_disabled_ratio": (0.25, 0.85),
        "network_risk_score": (50.0, 80.0),
        "location_change_score": (40.0, 90.0),
        "time_anomaly_score": (45.0, 85.0),
        "seconds_since_last_login": (14400, 100800),
    },
}

PROFILE_ORDER = (RiskLevel.LOW, RiskLevel.MEDIUM, RiskLevel.HIGH)


def compute_label(features: FeatureVector, noise: float = 0.0) -> float:
    """Rule-based ground-truth trust score for a feature vector.

    Args:
        features: Sampled features
        noise: Additive noise applied before clamping

    Returns:
        Trust score clamped to [0, 100]
    """
    f = features
    score = 100.0
    score -= f.failed_login_rate * 80
    score -= f.night_access_rate * 30
    score -= max(0.0, f.login_frequency_24h - 20) * 2
    score -= (f.avg_device_risk / 100.0) * 25
    score -= f.unpatched_device_ratio * 30
    score -= f.antivirus_disabled_ratio * 35
    score -= (f.network_risk_score / 100.0) * 20
    score -= f.location_change_score * 0.8
    score -= f.time_anomaly_score * 0.5

    # Whole hours only
    hours_since_login = math.floor(f.seconds_since_last_login / 3600)
    score -= max(0, hours_since_login - 24) * 0.5

    score += noise
    return max(0.0, min(100.0, score))


def profile_sizes(n: int) -> dict[RiskLevel, int]:
    """Number of samples per risk band; HIGH absorbs the remainder."""
    per_band = n // 3
    return {
        RiskLevel.LOW: per_band,
        RiskLevel.MEDIUM: per_band,
        RiskLevel.HIGH: n - 2 * per_band,
    }


class SyntheticDataGenerator:
    """Generates balanced, rule-labeled training samples.

    The same seed always yields the same sample sequence.
    """

    def __init__(self, seed: int | None = None):
        """Initialize generator.

        Args:
            seed: Random seed. When None a time-based seed is chosen and
                exposed as :attr:`seed` so the run can be reproduced.
        """
        if seed is None:
            seed = time.time_ns() % (2**32)
        self.seed = seed
        self._rng = np.random.default_rng(seed)

    def generate(self, n: int) -> list[TrainingSample]:
        """Generate ``n`` samples in profile order (LOW, MEDIUM, HIGH).

        Args:
            n: Number of samples

        Returns:
            Ordered list of labeled samples
        """
        if n < 1:
            raise ValueError(f"Number of samples must be positive, got {n}")

        sizes = profile_sizes(n)
        samples: list[TrainingSample] = []
        for profile in PROFILE_ORDER:
            for _ in range(sizes[profile]):
                features = self._sample_features(profile)
                noise = float(self._rng.uniform(-NOISE_AMPLITUDE, NOISE_AMPLITUDE))
                samples.append(
                    TrainingSample(
                        features=features,
                        label=compute_label(features, noise),
                        profile=profile,
                    )
                )

        logger.debug(f"Generated {n} synthetic samples (seed={self.seed})")
        return samples

    def _sample_features(self, profile: RiskLevel) -> FeatureVector:
        values = {}
        for name, (low, high) in RISK_PROFILES[profile].items():
            if name in INTEGER_FEATURES:
                values[name] = float(self._rng.integers(low, high))
            else:
                values[name] = float(self._rng.uniform(low, high))
        return FeatureVector(**values)


def generate(n: int, seed: int | None = None) -> list[TrainingSample]:
    """Generate ``n`` samples with a fresh generator."""
    return SyntheticDataGenerator(seed).generate(n)


def to_matrix(samples: list[TrainingSample]) -> tuple[np.ndarray, np.ndarray]:
    """Convert samples to a feature matrix and label vector."""
    X = np.array([s.features.to_array() for s in samples], dtype=np.float64)
    y = np.array([s.label for s in samples], dtype=np.float64)
    return X, y
