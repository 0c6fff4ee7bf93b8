"""Trust scoring orchestration: extract, predict, classify, decide, record."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Iterable
from datetime import datetime
from typing import TYPE_CHECKING

from .features import FeatureExtractor, utc_now
from .history import HistorySink
from .models import (
    AccessEvent,
    BatchResult,
    DeviceRecord,
    RiskScoreHistoryEntry,
    ScoringOutcome,
    UserRecord,
    UserSignals,
)
from .policy import classify, decide

if TYPE_CHECKING:
    from ..ml.trust_model import TrustModel

logger = logging.getLogger(__name__)


class TrustScoreEngine:
    """Scores users on demand (login) and in batch (scheduled recompute).

    The engine owns no model state of its own; the trust model instance is
    injected and may be retrained or restored concurrently by a trainer.
    """

    def __init__(
        self,
        model: TrustModel,
        history: HistorySink,
        extractor: FeatureExtractor | None = None,
        clock: Callable[[], datetime] | None = None,
        max_concurrency: int = 8,
    ):
        """Initialize scoring engine.

        Args:
            model: Shared trust model
            history: Sink receiving one history entry per scoring pass
            extractor: Feature extractor (default uses ``clock``)
            clock: Current-time source for extraction and history timestamps
            max_concurrency: Users scored in parallel by :meth:`score_all`
        """
        self.model = model
        self.history = history
        self.clock = clock or utc_now
        self.extractor = extractor or FeatureExtractor(clock=self.clock)
        self.max_concurrency = max_concurrency

    def score_user(
        self,
        user: UserRecord,
        events: Iterable[AccessEvent] | None,
        devices: Iterable[DeviceRecord] | None,
    ) -> ScoringOutcome:
        """Score one user and append a history entry.

        Args:
            user: User to score
            events: The user's recent access events
            devices: The user's devices

        Returns:
            Score, risk level and access decision, plus the user record with
            the new score written back

        Raises:
            UntrainedModelError: If the model has not been trained
        """
        features = self.extractor.extract(user, events, devices)
        score, confidence = self.model.predict_with_confidence(features)
        risk = classify(score)

        self.history.append(
            RiskScoreHistoryEntry(
                user_id=user.id,
                score=score,
                risk_level=risk,
                confidence=confidence,
                model_name=self.model.model_name,
                model_version=self.model.model_version,
                calculated_at=self.clock(),
            )
        )

        logger.debug(f"User {user.id}: score={score:.1f}, risk={risk.value}")
        return ScoringOutcome(
            user_id=user.id,
            score=score,
            risk_level=risk,
            decision=decide(risk),
            confidence=confidence,
            user=user.model_copy(update={"trust_score": score, "current_risk_level": risk}),
        )

    async def score_all(self, batch: Iterable[UserSignals]) -> BatchResult:
        """Score every user in the batch.

        Users are scored in worker threads, at most ``max_concurrency`` at a
        time. A failure for one user is logged and recorded in the result;
        it never aborts the rest of the batch.

        Args:
            batch: Users with their events and devices

        Returns:
            Outcomes for scored users and error messages for failed ones
        """
        start = time.perf_counter()
        items = list(batch)
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def score_one(signals: UserSignals) -> ScoringOutcome:
            async with semaphore:
                return await asyncio.to_thread(
                    self.score_user, signals.user, signals.events, signals.devices
                )

        results = await asyncio.gather(*(score_one(s) for s in items), return_exceptions=True)

        result = BatchResult()
        for signals, outcome in zip(items, results):
            if isinstance(outcome, ScoringOutcome):
                result.outcomes.append(outcome)
            elif isinstance(outcome, Exception):
                logger.error(f"Failed to score user {signals.user.id}: {outcome}")
                result.failures[signals.user.id] = str(outcome)
            else:
                raise outcome

        result.duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"Batch scoring finished: {result.scored_count} scored, "
            f"{result.failed_count} failed in {result.duration_ms:.0f} ms"
        )
        return result


class PeriodicRecompute:
    """Calls :meth:`TrustScoreEngine.score_all` on a fixed cadence."""

    def __init__(
        self,
        engine: TrustScoreEngine,
        load_batch: Callable[[], Iterable[UserSignals]],
        interval_seconds: float = 300,
    ):
        """Initialize periodic recompute.

        Args:
            engine: Scoring engine
            load_batch: Returns the users to score; called in a worker thread
            interval_seconds: Seconds between passes
        """
        self.engine = engine
        self.load_batch = load_batch
        self.interval_seconds = interval_seconds
        self.last_result: BatchResult | None = None
        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> BatchResult:
        """Load the current batch and score it."""
        batch = await asyncio.to_thread(lambda: list(self.load_batch()))
        self.last_result = await self.engine.score_all(batch)
        return self.last_result

    async def start(self) -> None:
        """Start recomputing in the background."""
        if self.is_running:
            return

        async def loop():
            while True:
                try:
                    await self.run_once()
                except Exception as e:
                    logger.error(f"Batch recompute failed: {e}")
                await asyncio.sleep(self.interval_seconds)

        self._task = asyncio.create_task(loop())
        logger.info(f"Started batch recompute every {self.interval_seconds}s")

    async def stop(self) -> None:
        """Stop background recompute."""
        if self._task is None:
            return

        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Stopped batch recompute")
