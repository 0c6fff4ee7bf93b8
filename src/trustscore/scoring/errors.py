"""Exceptions raised by the scoring core."""


class TrustScoreError(Exception):
    """Base class for trustscore errors."""


class ExtractionError(TrustScoreError):
    """Malformed or missing input signals.

    The feature extractor recovers from these by falling back to documented
    defaults, so callers normally only see them in logs.
    """


class ModelError(TrustScoreError):
    """Trust model failure."""


class UntrainedModelError(ModelError):
    """Prediction requested before the model was trained or restored."""

    def __init__(self, model_name: str = "trust model"):
        super().__init__(f"{model_name} has not been trained; train or restore it first")
        self.model_name = model_name


class InvalidTrainingSetError(ModelError):
    """Training samples are empty or do not have the expected shape."""


class PersistenceError(TrustScoreError):
    """Model serialization, deserialization or artifact storage failed."""
