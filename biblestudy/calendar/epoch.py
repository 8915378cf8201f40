"""
Epoch-day calendar arithmetic.

All derivations start from an integer count of whole UTC days since
1970-01-01, which was a Thursday (index 4 with Sunday = 0).
"""

import time
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from typing import Protocol

from biblestudy.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

MS_PER_DAY = 86_400_000
EPOCH_DATE = date(1970, 1, 1)
EPOCH_DAY_OFFSET = 4
REFERENCE_YEAR = 2024
REFERENCE_EPOCH_DAY = 19723  # 2024-01-01


def day_of_week(epoch_day: int) -> int:
    return (epoch_day + EPOCH_DAY_OFFSET) % 7


def week_number(epoch_day: int) -> int:
    sunday = epoch_day - day_of_week(epoch_day)
    return sunday // 7


def year_estimate(epoch_day: int) -> int:
    """Approximate year ignoring leap days. Only picks a default display year."""
    return REFERENCE_YEAR + (epoch_day - REFERENCE_EPOCH_DAY) // 365


def epoch_day_from_ms(timestamp_ms: int) -> int:
    return timestamp_ms // MS_PER_DAY


def epoch_day_for_date(value: date) -> int:
    return (value - EPOCH_DATE).days


def date_for_epoch_day(epoch_day: int) -> date:
    return EPOCH_DATE + timedelta(days=epoch_day)


def date_for_day_of_week(target_dow: int, reference_epoch_day: int, reference_dow: int) -> date:
    """Date of the weekday `target_dow` in the same Sunday-first week as the reference day."""
    return date_for_epoch_day(reference_epoch_day + (target_dow - reference_dow))


def month_epoch_range(month: int, year: int) -> tuple[int, int]:
    """First and last epoch day of a calendar month (1-based month)."""
    if not 1 <= month <= 12:
        raise ValueError(f"month must be in 1..12, got {month}")
    first = date(year, month, 1)
    if month == 12:
        next_first = date(year + 1, 1, 1)
    else:
        next_first = date(year, month + 1, 1)
    return epoch_day_for_date(first), epoch_day_for_date(next_first) - 1


def year_epoch_range(year: int) -> tuple[int, int]:
    return epoch_day_for_date(date(year, 1, 1)), epoch_day_for_date(date(year, 12, 31))


def week_range(first_epoch_day: int, last_epoch_day: int) -> range:
    """Inclusive range of week numbers covering the given epoch days."""
    return range(week_number(first_epoch_day), week_number(last_epoch_day) + 1)


class LedgerClock(Protocol):
    async def get_clock_time(self) -> int: ...


@dataclass(frozen=True, slots=True)
class LedgerTime:
    """Calendar fields for "now", derived identically for ledger and local sources."""

    timestamp_ms: int
    epoch_day: int
    day_of_week: int
    week_number: int
    year: int
    source: str
    error: str | None = None

    @classmethod
    def from_timestamp(
        cls, timestamp_ms: int, source: str, error: str | None = None
    ) -> "LedgerTime":
        epoch_day = epoch_day_from_ms(timestamp_ms)
        return cls(
            timestamp_ms=timestamp_ms,
            epoch_day=epoch_day,
            day_of_week=day_of_week(epoch_day),
            week_number=week_number(epoch_day),
            year=year_estimate(epoch_day),
            source=source,
            error=error,
        )

    @property
    def calendar_date(self) -> date:
        return date_for_epoch_day(self.epoch_day)


def local_time_ms() -> int:
    return int(time.time() * 1000)


def local_ledger_time(error: str | None = None) -> LedgerTime:
    return LedgerTime.from_timestamp(local_time_ms(), source="local", error=error)


async def resolve_ledger_time(clock: LedgerClock | None) -> LedgerTime:
    """
    Read the ledger clock object, falling back to local UTC time.

    Args:
        clock: Anything exposing async get_clock_time() in milliseconds

    Returns:
        LedgerTime: source is "ledger" or "local"; error carries the fallback reason
    """
    if clock is None:
        return local_ledger_time()

    try:
        timestamp_ms = await clock.get_clock_time()
        return LedgerTime.from_timestamp(int(timestamp_ms), source="ledger")
    except Exception as e:
        logger.warning(
            "Ledger clock unavailable, using local time",
            error=str(e),
            error_type=type(e).__name__,
            local_now=datetime.now(UTC).isoformat(),
        )
        return local_ledger_time(error=str(e))
