"""File-based store for serialized trust model artifacts."""

import logging
import os
import shutil
import tempfile
from datetime import datetime, timezone
from pathlib import Path

from ..scoring.errors import PersistenceError
from ..scoring.models import ModelInfo

logger = logging.getLogger(__name__)


class ModelStore:
    """Keeps one model artifact under a fixed path, plus timestamped backups."""

    def __init__(self, model_dir: Path | None = None, filename: str = "trust_model.joblib"):
        """Initialize model store.

        Args:
            model_dir: Directory to save/load models
            filename: Artifact file name inside ``model_dir``
        """
        self.model_dir = model_dir or Path.home() / ".trustscore" / "models"
        self.filename = filename

    @property
    def path(self) -> Path:
        return self.model_dir / self.filename

    def exists(self) -> bool:
        return self.path.is_file()

    def save(self, data: bytes) -> Path:
        """Write an artifact, replacing the previous one atomically.

        Args:
            data: Serialized model

        Returns:
            Path to saved model
        """
        try:
            self.model_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.model_dir, prefix=".tmp-", suffix=".joblib")
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(data)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise PersistenceError(f"Failed to save model to {self.path}: {e}") from e

        logger.info(f"Saved model to {self.path} ({len(data)} bytes)")
        return self.path

    def load(self) -> bytes:
        """Read the current artifact.

        Raises:
            PersistenceError: If no artifact exists or it cannot be read
        """
        if not self.exists():
            raise PersistenceError(f"No saved model found at {self.path}")
        try:
            data = self.path.read_bytes()
        except OSError as e:
            raise PersistenceError(f"Failed to read model from {self.path}: {e}") from e

        logger.info(f"Loaded model from {self.path}")
        return data

    def info(self) -> ModelInfo:
        """Describe the current artifact."""
        if not self.exists():
            return ModelInfo(exists=False, message="Model not trained yet")

        stat = self.path.stat()
        return ModelInfo(
            exists=True,
            path=str(self.path.resolve()),
            size_bytes=stat.st_size,
            last_modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
        )

    def backup(self) -> Path:
        """Copy the current artifact to a timestamped backup file.

        Returns:
            Path to the backup

        Raises:
            PersistenceError: If there is no artifact to back up
        """
        if not self.exists():
            raise PersistenceError("No model to backup")

        stamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S_%f")
        stem = Path(self.filename).stem
        backup_path = self.model_dir / f"{stem}_backup_{stamp}{Path(self.filename).suffix}"
        try:
            shutil.copy2(self.path, backup_path)
        except OSError as e:
            raise PersistenceError(f"Failed to back up model to {backup_path}: {e}") from e

        logger.info(f"Model backed up to {backup_path}")
        return backup_path

    def list_backups(self) -> list[Path]:
        """Backups of the artifact, oldest first."""
        stem = Path(self.filename).stem
        return sorted(self.model_dir.glob(f"{stem}_backup_*"))
