"""Training and lifecycle management for the trust model."""

import asyncio
import logging
import time
from datetime import datetime, timezone
from pathlib import Path

from ..scoring.models import ModelInfo, TrainingResult
from .store import ModelStore
from .synthetic import SyntheticDataGenerator
from .trust_model import TrustModel

logger = logging.getLogger(__name__)


class ModelTrainer:
    """Trains the shared trust model on synthetic data and persists it.

    Training is CPU-bound; use :meth:`train_async` from an event loop so the
    work runs in a worker thread and never blocks request scoring.
    """

    def __init__(self, model: TrustModel, store: ModelStore | None = None):
        """Initialize trainer.

        Args:
            model: The trust model instance shared with the scoring engine
            store: Artifact store; when None trained models are kept in memory only
        """
        self.model = model
        self.store = store

    def train(self, num_samples: int = 1000, seed: int | None = 42) -> TrainingResult:
        """Generate synthetic data, train the model and persist it.

        Args:
            num_samples: Number of synthetic training samples
            seed: Generator seed (None for a time-based seed)

        Returns:
            Training result
        """
        logger.info(f"Starting model training with {num_samples} samples")
        start = time.perf_counter()

        generator = SyntheticDataGenerator(seed)
        samples = generator.generate(num_samples)
        logger.info(f"Generated {len(samples)} training samples (seed={generator.seed})")

        self.model.train(samples)

        model_path: Path | None = None
        if self.store is not None:
            model_path = self.store.save(self.model.persist())

        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(f"Model training completed in {duration_ms:.0f} ms")

        return TrainingResult(
            success=True,
            num_samples=len(samples),
            seed=generator.seed,
            training_time_ms=duration_ms,
            timestamp=datetime.now(timezone.utc),
            model_path=str(model_path) if model_path else None,
            model_name=self.model.model_name,
            model_version=self.model.model_version,
        )

    async def train_async(self, num_samples: int = 1000, seed: int | None = 42) -> TrainingResult:
        """Run :meth:`train` in a worker thread."""
        return await asyncio.to_thread(self.train, num_samples, seed)

    def load(self) -> bool:
        """Restore the model from the store.

        Returns:
            True if a persisted model was restored, False if none exists

        Raises:
            PersistenceError: If the artifact exists but cannot be restored
        """
        if self.store is None or not self.store.exists():
            logger.warning("Model file not found. Model needs to be trained first.")
            return False

        self.model.restore(self.store.load())
        return True

    def model_info(self) -> ModelInfo:
        """Describe the persisted model artifact."""
        if self.store is None:
            return ModelInfo(exists=False, message="No model store configured")
        return self.store.info()

    def backup(self) -> Path:
        """Back up the persisted model artifact."""
        if self.store is None:
            raise ValueError("No model store configured")
        return self.store.backup()
