"""Offline evaluation of the trust model against synthetic ground truth."""

import asyncio
import logging
import math
import time
from datetime import datetime, timezone

import numpy as np
from sklearn.metrics import mean_absolute_error, mean_squared_error, r2_score
from sklearn.model_selection import KFold

from ..scoring.models import ConfusionMetrics, EvaluationMetrics
from ..scoring.policy import HIGH_RISK_THRESHOLD
from .synthetic import SyntheticDataGenerator, to_matrix
from .trust_model import TrustModel

logger = logging.getLogger(__name__)


def pearson_correlation(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    """Pearson correlation, defined as 0 when either side is constant."""
    if len(y_true) < 2 or np.std(y_true) == 0 or np.std(y_pred) == 0:
        return 0.0
    return float(np.corrcoef(y_true, y_pred)[0, 1])


def _safe_div(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator else 0.0


def _summary(
    y_true: np.ndarray,
    mae: float,
    rmse: float,
    correlation: float,
    r2: float,
    folds: int | None = None,
) -> str:
    title = f"=== Cross-validation ({folds} folds) ===" if folds else "=== Evaluation on test set ==="
    lines = [
        title,
        "",
        f"Correlation coefficient                 {correlation:10.4f}",
        f"Mean absolute error                     {mae:10.4f}",
        f"Root mean squared error                 {rmse:10.4f}",
        f"Coefficient of determination (R^2)      {r2:10.4f}",
        f"Mean label                              {float(np.mean(y_true)):10.4f}",
        f"Total Number of Instances               {len(y_true):10d}",
    ]
    return "\n".join(lines)


class ModelEvaluator:
    """Runs a trust model against freshly generated synthetic data.

    Evaluation is diagnostic: generator and model errors propagate to the
    caller instead of being replaced with defaults.
    """

    def __init__(self, model: TrustModel):
        """Initialize evaluator.

        Args:
            model: The trust model to evaluate
        """
        self.model = model

    def evaluate(self, num_samples: int = 500, seed: int | None = None) -> EvaluationMetrics:
        """Evaluate the trained model on fresh test data.

        Args:
            num_samples: Number of test samples
            seed: Generator seed; None picks a time-based seed so the test
                data differs from the training data

        Returns:
            Regression metrics

        Raises:
            UntrainedModelError: If the model has not been trained
        """
        logger.info(f"Starting model evaluation with {num_samples} test samples")
        start = time.perf_counter()

        samples = SyntheticDataGenerator(seed).generate(num_samples)
        y_true = np.array([s.label for s in samples], dtype=np.float64)
        y_pred = self.model.predict_many(s.features for s in samples)

        return self._regression_metrics(y_true, y_pred, start)

    def cross_validate(self, num_samples: int = 1000, folds: int = 10, seed: int = 42) -> EvaluationMetrics:
        """K-fold cross-validation on a generated dataset.

        Each round trains a fresh copy of the model, so the live model is
        left untouched. Held-out predictions are pooled before computing the
        metrics.

        Args:
            num_samples: Number of samples to generate
            folds: Number of folds (k)
            seed: Seed for both data generation and the fold split

        Returns:
            Pooled regression metrics with per-fold MAE
        """
        if folds < 2:
            raise ValueError(f"Cross-validation needs at least 2 folds, got {folds}")
        if folds > num_samples:
            raise ValueError(f"Cannot split {num_samples} samples into {folds} folds")

        logger.info(f"Starting {folds}-fold cross-validation with {num_samples} samples")
        start = time.perf_counter()

        samples = SyntheticDataGenerator(seed).generate(num_samples)
        _, y = to_matrix(samples)
        predictions = np.zeros_like(y)
        fold_mae: list[float] = []

        # Samples arrive grouped by risk profile, so folds must be shuffled
        splitter = KFold(n_splits=folds, shuffle=True, random_state=seed)
        for fold, (train_idx, test_idx) in enumerate(splitter.split(y), start=1):
            fold_model = self.model.spawn()
            fold_model.train([samples[i] for i in train_idx])
            predictions[test_idx] = fold_model.predict_many(samples[i].features for i in test_idx)
            fold_mae.append(float(mean_absolute_error(y[test_idx], predictions[test_idx])))
            logger.debug(f"Fold {fold}/{folds}: MAE={fold_mae[-1]:.3f}")

        metrics = self._regression_metrics(y, predictions, start, folds=folds)
        return metrics.model_copy(update={"fold_mae": fold_mae})

    def confusion_metrics(
        self,
        num_samples: int = 500,
        threshold: float = HIGH_RISK_THRESHOLD,
        seed: int | None = None,
    ) -> ConfusionMetrics:
        """High-risk detection metrics at a score threshold.

        A sample is positive (HIGH risk) when its score is below
        ``threshold``; the label and the prediction are thresholded the same
        way.

        Args:
            num_samples: Number of fresh test samples
            threshold: Score below which a user counts as HIGH risk
            seed: Generator seed (None for time-based)

        Returns:
            Confusion counts and derived rates
        """
        samples = SyntheticDataGenerator(seed).generate(num_samples)
        y_true = np.array([s.label for s in samples], dtype=np.float64)
        y_pred = self.model.predict_many(s.features for s in samples)

        actual_high = y_true < threshold
        predicted_high = y_pred < threshold

        tp = int(np.sum(actual_high & predicted_high))
        tn = int(np.sum(~actual_high & ~predicted_high))
        fp = int(np.sum(~actual_high & predicted_high))
        fn = int(np.sum(actual_high & ~predicted_high))

        precision = _safe_div(tp, tp + fp)
        recall = _safe_div(tp, tp + fn)

        metrics = ConfusionMetrics(
            true_positives=tp,
            true_negatives=tn,
            false_positives=fp,
            false_negatives=fn,
            false_positive_rate=_safe_div(fp, fp + tn),
            false_negative_rate=_safe_div(fn, fn + tp),
            accuracy=_safe_div(tp + tn, num_samples),
            precision=precision,
            recall=recall,
            f1_score=_safe_div(2 * precision * recall, precision + recall),
            threshold=threshold,
            test_samples=num_samples,
        )
        logger.info(
            f"Confusion metrics at threshold {threshold}: "
            f"FPR={metrics.false_positive_rate:.3f}, FNR={metrics.false_negative_rate:.3f}"
        )
        return metrics

    async def evaluate_async(self, num_samples: int = 500, seed: int | None = None) -> EvaluationMetrics:
        """Run :meth:`evaluate` in a worker thread."""
        return await asyncio.to_thread(self.evaluate, num_samples, seed)

    async def cross_validate_async(
        self, num_samples: int = 1000, folds: int = 10, seed: int = 42
    ) -> EvaluationMetrics:
        """Run :meth:`cross_validate` in a worker thread."""
        return await asyncio.to_thread(self.cross_validate, num_samples, folds, seed)

    async def confusion_metrics_async(
        self,
        num_samples: int = 500,
        threshold: float = HIGH_RISK_THRESHOLD,
        seed: int | None = None,
    ) -> ConfusionMetrics:
        """Run :meth:`confusion_metrics` in a worker thread."""
        return await asyncio.to_thread(self.confusion_metrics, num_samples, threshold, seed)

    def _regression_metrics(
        self,
        y_true: np.ndarray,
        y_pred: np.ndarray,
        start: float,
        folds: int | None = None,
    ) -> EvaluationMetrics:
        mae = float(mean_absolute_error(y_true, y_pred))
        rmse = math.sqrt(float(mean_squared_error(y_true, y_pred)))
        correlation = pearson_correlation(y_true, y_pred)
        r2 = float(r2_score(y_true, y_pred)) if len(y_true) > 1 else 0.0
        duration_ms = (time.perf_counter() - start) * 1000

        logger.info(f"Evaluation finished in {duration_ms:.0f} ms: MAE={mae:.3f}, RMSE={rmse:.3f}")

        return EvaluationMetrics(
            mean_absolute_error=mae,
            root_mean_squared_error=rmse,
            correlation_coefficient=correlation,
            r2_score=r2,
            accuracy=1.0 - mae / 100.0,
            num_samples=len(y_true),
            folds=folds,
            evaluation_time_ms=duration_ms,
            timestamp=datetime.now(timezone.utc),
            summary=_summary(y_true, mae, rmse, correlation, r2, folds),
        )
