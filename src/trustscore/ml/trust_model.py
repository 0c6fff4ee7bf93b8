"""Trust score regression models.

A :class:`TrustModel` owns one fitted scikit-learn estimator. The fitted
state is an immutable snapshot: ``predict`` reads whichever snapshot is
current without locking, while ``train`` and ``restore`` build a new
snapshot and swap it in under an exclusive lock. Many concurrent readers,
one writer at a time.
"""

import io
import logging
import math
import threading
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import joblib
import numpy as np
from sklearn.ensemble import GradientBoostingRegressor, RandomForestRegressor
from sklearn.linear_model import LinearRegression
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import StandardScaler

from ..scoring.errors import (
    InvalidTrainingSetError,
    PersistenceError,
    UntrainedModelError,
)
from ..scoring.models import FeatureVector, TrainingSample

logger = logging.getLogger(__name__)

ARTIFACT_FORMAT = "trustscore-model/1"
NUM_FEATURES = len(FeatureVector.feature_names())
SCORE_MIN = 0.0
SCORE_MAX = 100.0

SampleLike = TrainingSample | tuple[FeatureVector | Sequence[float], float]


@dataclass(frozen=True)
class FittedState:
    """Snapshot of a trained estimator and its metadata."""

    estimator: Any
    trained_at: datetime
    num_samples: int


def _row(features: FeatureVector | Sequence[float]) -> list[float]:
    if isinstance(features, FeatureVector):
        return features.to_array()
    return [float(v) for v in features]


class TrustModel(ABC):
    """Regression model mapping a feature vector to a trust score (0-100)."""

    algorithm = "base"

    def __init__(self, model_name: str | None = None, model_version: str = "1.0.0"):
        """Initialize an untrained model.

        Args:
            model_name: Name recorded in score history (default ``<algorithm>_v1``)
            model_version: Version recorded in score history
        """
        self.model_name = model_name or f"{self.algorithm}_v1"
        self.model_version = model_version
        self._state: FittedState | None = None
        self._write_lock = threading.Lock()

    @abstractmethod
    def _build_estimator(self) -> Any:
        """Create a fresh, unfitted estimator."""

    @abstractmethod
    def spawn(self) -> "TrustModel":
        """Create a new untrained model with the same hyper-parameters."""

    @property
    def is_trained(self) -> bool:
        return self._state is not None

    @property
    def trained_at(self) -> datetime | None:
        state = self._state
        return state.trained_at if state else None

    @property
    def num_training_samples(self) -> int:
        state = self._state
        return state.num_samples if state else 0

    def train(self, samples: Sequence[SampleLike]) -> None:
        """Fit the model, replacing any previous fit.

        Args:
            samples: Labeled samples, either :class:`TrainingSample` objects
                or ``(features, label)`` pairs

        Raises:
            InvalidTrainingSetError: If samples are empty or malformed
        """
        X, y = self._to_training_arrays(samples)

        with self._write_lock:
            estimator = self._build_estimator()
            estimator.fit(X, y)
            self._state = FittedState(
                estimator=estimator,
                trained_at=datetime.now(timezone.utc),
                num_samples=len(y),
            )

        logger.info(f"Trained {self.model_name} on {len(y)} samples")

    def predict(self, vector: FeatureVector) -> float:
        """Predict the trust score for one feature vector.

        Raises:
            UntrainedModelError: If the model has not been trained
        """
        return float(self.predict_many([vector])[0])

    def predict_many(self, vectors: Iterable[FeatureVector]) -> np.ndarray:
        """Predict trust scores for several vectors against one snapshot."""
        state = self._require_state()
        X = np.array([v.to_array() for v in vectors], dtype=np.float64)
        if X.size == 0:
            return np.empty(0, dtype=np.float64)
        raw = state.estimator.predict(X)
        return np.clip(np.asarray(raw, dtype=np.float64), SCORE_MIN, SCORE_MAX)

    def predict_with_confidence(self, vector: FeatureVector) -> tuple[float, float | None]:
        """Predict a score together with a confidence in [0, 1], if available."""
        return self.predict(vector), None

    def persist(self) -> bytes:
        """Serialize the trained state.

        Raises:
            UntrainedModelError: If there is nothing to serialize
            PersistenceError: If serialization fails
        """
        state = self._require_state()
        payload = {
            "format": ARTIFACT_FORMAT,
            "algorithm": self.algorithm,
            "feature_names": FeatureVector.feature_names(),
            "model_name": self.model_name,
            "model_version": self.model_version,
            "trained_at": state.trained_at,
            "num_samples": state.num_samples,
            "estimator": state.estimator,
        }
        buffer = io.BytesIO()
        try:
            joblib.dump(payload, buffer)
        except Exception as e:
            raise PersistenceError(f"Failed to serialize {self.model_name}: {e}") from e
        return buffer.getvalue()

    def restore(self, data: bytes) -> None:
        """Replace the trained state with a serialized one.

        On failure the current state is left untouched.

        Raises:
            PersistenceError: If the data cannot be deserialized or belongs
                to a different model type
        """
        try:
            payload = joblib.load(io.BytesIO(data))
        except Exception as e:
            raise PersistenceError(f"Failed to deserialize model artifact: {e}") from e

        if not isinstance(payload, dict) or payload.get("format") != ARTIFACT_FORMAT:
            raise PersistenceError("Unrecognized model artifact format")
        if payload.get("algorithm") != self.algorithm:
            raise PersistenceError(
                f"Artifact holds a {payload.get('algorithm')} model, expected {self.algorithm}"
            )
        if payload.get("feature_names") != FeatureVector.feature_names():
            raise PersistenceError("Artifact was trained on a different feature set")

        try:
            state = FittedState(
                estimator=payload["estimator"],
                trained_at=payload["trained_at"],
                num_samples=int(payload["num_samples"]),
            )
            model_name = str(payload["model_name"])
            model_version = str(payload["model_version"])
        except KeyError as e:
            raise PersistenceError(f"Model artifact is missing {e}") from e
        except (TypeError, ValueError) as e:
            raise PersistenceError(f"Model artifact metadata is invalid: {e}") from e
        if not callable(getattr(state.estimator, "predict", None)):
            raise PersistenceError("Model artifact does not contain a fitted estimator")

        with self._write_lock:
            self._state = state
            self.model_name = model_name
            self.model_version = model_version

        logger.info(f"Restored {self.model_name} ({self.model_version})")

    def _require_state(self) -> FittedState:
        state = self._state
        if state is None:
            raise UntrainedModelError(self.model_name)
        return state

    def _to_training_arrays(self, samples: Sequence[SampleLike]) -> tuple[np.ndarray, np.ndarray]:
        if not samples:
            raise InvalidTrainingSetError("Training set is empty")

        rows: list[list[float]] = []
        labels: list[float] = []
        for i, sample in enumerate(samples):
            try:
                if isinstance(sample, TrainingSample):
                    row, label = sample.features.to_array(), sample.label
                else:
                    features, label = sample
                    row = _row(features)
                label = float(label)
            except (TypeError, ValueError) as e:
                raise InvalidTrainingSetError(f"Sample {i} is malformed: {e}") from e

            if len(row) != NUM_FEATURES:
                raise InvalidTrainingSetError(
                    f"Sample {i} has {len(row)} features, expected {NUM_FEATURES}"
                )
            if not math.isfinite(label) or not all(math.isfinite(v) for v in row):
                raise InvalidTrainingSetError(f"Sample {i} contains non-finite values")
            rows.append(row)
            labels.append(label)

        return np.array(rows, dtype=np.float64), np.array(labels, dtype=np.float64)

    def __repr__(self) -> str:
        status = "trained" if self.is_trained else "untrained"
        return f"{type(self).__name__}(name={self.model_name}, version={self.model_version}, {status})"


class RandomForestTrustModel(TrustModel):
    """Random forest regression; confidence comes from agreement between trees."""

    algorithm = "random_forest"

    def __init__(
        self,
        n_estimators: int = 100,
        max_depth: int | None = None,
        random_state: int = 42,
        model_name: str | None = None,
        model_version: str = "1.0.0",
    ):
        super().__init__(model_name=model_name, model_version=model_version)
        self.n_estimators = n_estimators
        self.max_depth = max_depth
        self.random_state = random_state

    def _build_estimator(self) -> RandomForestRegressor:
        return RandomForestRegressor(
            n_estimators=self.n_estimators,
            max_depth=self.max_depth,
            random_state=self.random_state,
        )

    def spawn(self) -> "RandomForestTrustModel":
        return RandomForestTrustModel(
            n_estimators=self.n_estimators,
            max_depth=self.max_depth,
            random_state=self.random_state,
            model_name=self.model_name,
            model_version=self.model_version,
        )

    def predict_with_confidence(self, vector: FeatureVector) -> tuple[float, float | None]:
        state = self._require_state()
        X = np.array([vector.to_array()], dtype=np.float64)
        score = float(np.clip(state.estimator.predict(X)[0], SCORE_MIN, SCORE_MAX))

        # Spread of 50 points between trees means no confidence at all
        per_tree = np.array([tree.predict(X)[0] for tree in state.estimator.estimators_])
        confidence = max(0.0, min(1.0, 1.0 - float(per_tree.std()) / 50.0))
        return score, confidence


class GradientBoostingTrustModel(TrustModel):
    """Gradient-boosted regression trees."""

    algorithm = "gradient_boosting"

    def __init__(
        self,
        n_estimators: int = 100,
        max_depth: int | None = 3,
        learning_rate: float = 0.1,
        random_state: int = 42,
        model_name: str | None = None,
        model_version: str = "1.0.0",
    ):
        super().__init__(model_name=model_name, model_version=model_version)
        self.n_estimators = n_estimators
        self.max_depth = max_depth
        self.learning_rate = learning_rate
        self.random_state = random_state

    def _build_estimator(self) -> GradientBoostingRegressor:
        return GradientBoostingRegressor(
            n_estimators=self.n_estimators,
            max_depth=self.max_depth,
            learning_rate=self.learning_rate,
            random_state=self.random_state,
        )

    def spawn(self) -> "GradientBoostingTrustModel":
        return GradientBoostingTrustModel(
            n_estimators=self.n_estimators,
            max_depth=self.max_depth,
            learning_rate=self.learning_rate,
            random_state=self.random_state,
            model_name=self.model_name,
            model_version=self.model_version,
        )


class LinearTrustModel(TrustModel):
    """Ordinary least squares on standardized features."""

    algorithm = "linear"

    def _build_estimator(self) -> Pipeline:
        return Pipeline(
            [
                ("scaler", StandardScaler()),
                ("regressor", LinearRegression()),
            ]
        )

    def spawn(self) -> "LinearTrustModel":
        return LinearTrustModel(model_name=self.model_name, model_version=self.model_version)
