"""Risk score history sink and dashboard aggregation."""

import threading
from collections.abc import Iterable
from typing import Protocol

from .models import DashboardStats, RiskLevel, RiskScoreHistoryEntry


class HistorySink(Protocol):
    """Append-only destination for score history."""

    def append(self, entry: RiskScoreHistoryEntry) -> None: ...


class InMemoryHistorySink:
    """Thread-safe, append-only in-memory history."""

    def __init__(self):
        self._entries: list[RiskScoreHistoryEntry] = []
        self._lock = threading.Lock()

    def append(self, entry: RiskScoreHistoryEntry) -> None:
        with self._lock:
            self._entries.append(entry)

    def entries(self) -> list[RiskScoreHistoryEntry]:
        with self._lock:
            return list(self._entries)

    def for_user(self, user_id: str) -> list[RiskScoreHistoryEntry]:
        return [e for e in self.entries() if e.user_id == user_id]

    def latest_by_user(self) -> dict[str, RiskScoreHistoryEntry]:
        return latest_by_user(self.entries())

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def latest_by_user(entries: Iterable[RiskScoreHistoryEntry]) -> dict[str, RiskScoreHistoryEntry]:
    """Most recent entry per user, by ``calculated_at``."""
    latest: dict[str, RiskScoreHistoryEntry] = {}
    for entry in entries:
        current = latest.get(entry.user_id)
        if current is None or entry.calculated_at > current.calculated_at:
            latest[entry.user_id] = entry
    return latest


def _percentage(count: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return round(count * 100.0 / total, 1)


def summarize_history(entries: Iterable[RiskScoreHistoryEntry], total_users: int) -> DashboardStats:
    """Aggregate the latest score of every user into dashboard statistics.

    Args:
        entries: Score history
        total_users: Number of registered users, used for percentages

    Returns:
        Counts and percentages per risk level plus the average latest score
    """
    entries = list(entries)
    latest = latest_by_user(entries).values()

    counts = {level: 0 for level in RiskLevel}
    for entry in latest:
        counts[entry.risk_level] += 1

    scores = [e.score for e in latest]
    average = round(sum(scores) / len(scores), 1) if scores else 0.0

    return DashboardStats(
        total_users=total_users,
        high_risk_users=counts[RiskLevel.HIGH],
        medium_risk_users=counts[RiskLevel.MEDIUM],
        low_risk_users=counts[RiskLevel.LOW],
        average_trust_score=average,
        total_score_calculations=len(entries),
        high_percentage=_percentage(counts[RiskLevel.HIGH], total_users),
        medium_percentage=_percentage(counts[RiskLevel.MEDIUM], total_users),
        low_percentage=_percentage(counts[RiskLevel.LOW], total_users),
    )
