"""Tests for score history and dashboard statistics."""

from datetime import timedelta

import pytest

from trustscore.scoring.history import InMemoryHistorySink, latest_by_user, summarize_history
from trustscore.scoring.models import RiskLevel, RiskScoreHistoryEntry


def _entry(user_id, score, risk, at):
    return RiskScoreHistoryEntry(
        user_id=user_id,
        score=score,
        risk_level=risk,
        confidence=0.9,
        model_name="random_forest_v1",
        model_version="1.0.0",
        calculated_at=at,
    )


class TestInMemoryHistorySink:
    """Test the in-memory history sink."""

    def test_append_and_query(self, now):
        sink = InMemoryHistorySink()
        sink.append(_entry("a", 80.0, RiskLevel.LOW, now))
        sink.append(_entry("b", 20.0, RiskLevel.HIGH, now))
        sink.append(_entry("a", 50.0, RiskLevel.MEDIUM, now + timedelta(minutes=5)))

        assert len(sink) == 3
        assert [e.score for e in sink.for_user("a")] == [80.0, 50.0]
        assert sink.latest_by_user()["a"].score == 50.0

    def test_entries_is_a_copy(self, now):
        sink = InMemoryHistorySink()
        sink.append(_entry("a", 80.0, RiskLevel.LOW, now))
        sink.entries().clear()
        assert len(sink) == 1

    def test_entries_are_immutable(self, now):
        entry = _entry("a", 80.0, RiskLevel.LOW, now)
        with pytest.raises(Exception):
            entry.score = 10.0


def test_latest_by_user_ignores_insertion_order(now):
    entries = [
        _entry("a", 30.0, RiskLevel.HIGH, now + timedelta(hours=1)),
        _entry("a", 90.0, RiskLevel.LOW, now),
    ]
    assert latest_by_user(entries)["a"].score == 30.0


class TestSummarizeHistory:
    """Test dashboard aggregation."""

    def test_counts_latest_scores_only(self, now):
        later = now + timedelta(minutes=10)
        entries = [
            _entry("a", 90.0, RiskLevel.LOW, now),
            _entry("a", 30.0, RiskLevel.HIGH, later),
            _entry("b", 55.0, RiskLevel.MEDIUM, now),
            _entry("c", 75.0, RiskLevel.LOW, now),
        ]

        stats = summarize_history(entries, total_users=4)

        assert stats.total_users == 4
        assert stats.high_risk_users == 1
        assert stats.medium_risk_users == 1
        assert stats.low_risk_users == 1
        assert stats.total_score_calculations == 4
        assert stats.average_trust_score == pytest.approx(53.3)
        assert stats.high_percentage == 25.0
        assert stats.low_percentage == 25.0

    def test_empty(self):
        stats = summarize_history([], total_users=0)

        assert stats.average_trust_score == 0.0
        assert stats.high_percentage == 0.0
        assert stats.total_score_calculations == 0
