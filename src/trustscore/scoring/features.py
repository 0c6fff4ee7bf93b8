"""Feature extraction from access events, devices and login state."""

import logging
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta, timezone
from typing import Any, TypeVar

from .errors import ExtractionError
from .models import (
    NETWORK_RISK_WEIGHTS,
    AccessEvent,
    DeviceRecord,
    FeatureVector,
    NetworkType,
    UserRecord,
)

logger = logging.getLogger(__name__)

SignalT = TypeVar("SignalT", AccessEvent, DeviceRecord)

DEFAULT_DEVICE_RISK = 50.0
DEFAULT_NETWORK_RISK = 30.0
LOCATION_CHANGE_WEIGHT = 10.0
LOOKBACK_WINDOW = timedelta(hours=24)

# Business hours are 06:00-22:00 UTC inclusive
NIGHT_START_HOUR = 22
NIGHT_END_HOUR = 6


def utc_now() -> datetime:
    """Default clock."""
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _ratio(count: int, total: int) -> float:
    if total == 0:
        return 0.0
    return _clamp(count / total, 0.0, 1.0)


def network_risk_for(network_type: NetworkType | str | None) -> float:
    """Risk weight of a network type, with the default for unknown types."""
    if network_type is None:
        return DEFAULT_NETWORK_RISK
    try:
        return NETWORK_RISK_WEIGHTS[NetworkType(network_type)]
    except ValueError:
        return DEFAULT_NETWORK_RISK


class FeatureExtractor:
    """Reduces a user's recent signals to a :class:`FeatureVector`.

    The extractor is stateless apart from its clock, so one instance can be
    shared between any number of concurrent callers.
    """

    def __init__(self, clock: Callable[[], datetime] | None = None):
        """Initialize extractor.

        Args:
            clock: Zero-argument callable returning the current time. Defaults
                to the system UTC clock; inject a fixed clock in tests.
        """
        self.clock = clock or utc_now

    def extract(
        self,
        user: UserRecord,
        events: Iterable[AccessEvent] | None,
        devices: Iterable[DeviceRecord] | None,
    ) -> FeatureVector:
        """Extract a feature vector.

        Args:
            user: User whose last login time is used
            events: Recent access events (any order)
            devices: The user's devices

        Returns:
            Feature vector with every field inside its documented range
        """
        now = _as_utc(self.clock())
        event_list = self._collect(events, AccessEvent, user)
        device_list = self._collect(devices, DeviceRecord, user)

        total = len(event_list)
        failed = sum(1 for e in event_list if not e.success)
        night = sum(
            1 for e in event_list if e.hour_of_day < NIGHT_END_HOUR or e.hour_of_day > NIGHT_START_HOUR
        )
        cutoff = now - LOOKBACK_WINDOW
        recent = sum(1 for e in event_list if _as_utc(e.timestamp) > cutoff)

        failed_rate = _ratio(failed, total)
        night_rate = _ratio(night, total)

        if device_list:
            avg_device_risk = sum(d.risk_score for d in device_list) / len(device_list)
        else:
            avg_device_risk = DEFAULT_DEVICE_RISK
        unpatched = sum(1 for d in device_list if not d.patched)
        av_disabled = sum(1 for d in device_list if not d.antivirus_enabled)

        if event_list:
            network_risk = sum(network_risk_for(e.network_type) for e in event_list) / total
        else:
            network_risk = DEFAULT_NETWORK_RISK

        countries = {e.country for e in event_list if e.country}

        if user.last_login_at is None:
            seconds_since_login = 0.0
        else:
            seconds_since_login = max(0.0, (now - _as_utc(user.last_login_at)).total_seconds())

        return FeatureVector(
            failed_login_rate=failed_rate,
            night_access_rate=night_rate,
            login_frequency_24h=float(recent),
            avg_device_risk=_clamp(avg_device_risk, 0.0, 100.0),
            unpatched_device_ratio=_ratio(unpatched, len(device_list)),
            antivirus_disabled_ratio=_ratio(av_disabled, len(device_list)),
            network_risk_score=_clamp(network_risk, 0.0, 100.0),
            location_change_score=len(countries) * LOCATION_CHANGE_WEIGHT,
            time_anomaly_score=_clamp(night_rate * 100.0, 0.0, 100.0),
            seconds_since_last_login=seconds_since_login,
        )

    def _collect(
        self,
        items: Iterable[Any] | None,
        item_type: type[SignalT],
        user: UserRecord,
    ) -> list[SignalT]:
        """Materialize an input collection, keeping only well-formed records.

        Missing or non-iterable input is treated as empty; elements of the
        wrong type are dropped.
        """
        kind = item_type.__name__
        if items is None:
            err = ExtractionError(f"No {kind} records supplied for user {user.id}")
            logger.debug(f"{err}; using defaults")
            return []
        if isinstance(items, (str, bytes)):
            err = ExtractionError(f"Malformed {kind} collection for user {user.id}")
            logger.warning(f"{err}; using defaults")
            return []
        try:
            materialized = list(items)
        except TypeError as e:
            err = ExtractionError(f"Malformed {kind} collection for user {user.id}: {e}")
            logger.warning(f"{err}; using defaults")
            return []

        valid = [item for item in materialized if isinstance(item, item_type)]
        dropped = len(materialized) - len(valid)
        if dropped:
            err = ExtractionError(f"Dropped {dropped} malformed {kind} records for user {user.id}")
            logger.warning(str(err))
        return valid
