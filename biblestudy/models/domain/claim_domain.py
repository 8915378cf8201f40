# biblestudy/models/domain/claim_domain.py
"""
Claim Domain Models
Shapes for decoded ledger claim records and the progress views built from them.
Records are immutable; views are rebuilt wholesale on every refresh.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from biblestudy.calendar.epoch import date_for_day_of_week

TOKEN_DECIMALS_FACTOR = 1_000_000
MONTHS_PER_YEAR = 12


class ClaimStatus(str, Enum):
    """Whether the active identity has claimed today, per the ledger."""

    CHECKING = "checking"
    NOT_CLAIMED = "not_claimed"
    CLAIMED = "claimed"


class GasStatus(str, Enum):
    """Whether the active wallet holds enough SUI to pay for a claim."""

    CHECKING = "checking"
    SUFFICIENT = "sufficient"
    LOW = "low"


class DayStatus(str, Enum):
    COMPLETED = "completed"
    MISSED = "missed"
    AVAILABLE = "available"
    FUTURE = "future"


@dataclass(frozen=True, slots=True)
class ClaimRecord:
    """One DailyClaimInfo entry as returned by the progress registry."""

    day_of_week: int
    amount_claimed: int
    timestamp: int
    verse_reference: bytes
    claim_day: int
    streak_at_claim: int

    @property
    def verse_reference_text(self) -> str:
        return self.verse_reference.decode("utf-8", errors="replace")

    @property
    def daily_reward(self) -> int:
        """Claimed amount in whole tokens."""
        return self.amount_claimed // TOKEN_DECIMALS_FACTOR


@dataclass(frozen=True, slots=True)
class VerseText:
    text: str = ""
    version: str = ""


@dataclass(frozen=True, slots=True)
class EnrichedClaim:
    """A claim record with its verse text resolved for display."""

    record: ClaimRecord
    verse_text: str = ""
    version: str = ""

    @property
    def verse_reference(self) -> str:
        return self.record.verse_reference_text

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        record = self.record
        return {
            "day_of_week": record.day_of_week,
            "amount_claimed": record.amount_claimed,
            "daily_reward": record.daily_reward,
            "timestamp": record.timestamp,
            "verse_reference": self.verse_reference,
            "claim_day": record.claim_day,
            "streak_at_claim": record.streak_at_claim,
            "verse_text": self.verse_text,
            "version": self.version,
        }


@dataclass(frozen=True, slots=True)
class DayColumn:
    day_of_week: int
    calendar_date: date
    status: DayStatus
    claim: EnrichedClaim | None = None


@dataclass(frozen=True, slots=True)
class WeeklyView:
    """At most one claim per day of week for the current ledger week."""

    week_number: int | None = None
    days: dict[int, EnrichedClaim] = field(default_factory=dict)

    def has_entry(self, day_of_week: int) -> bool:
        return day_of_week in self.days

    @property
    def streak(self) -> int:
        """Days completed this week, used as the current streak for reward estimates."""
        return len(self.days)

    def columns(self, today_epoch_day: int, today_day_of_week: int) -> list[DayColumn]:
        """Sunday-first columns labelled with real dates and a completion status."""
        columns = []
        for dow in range(7):
            claim = self.days.get(dow)
            if claim is not None:
                status = DayStatus.COMPLETED
            elif dow < today_day_of_week:
                status = DayStatus.MISSED
            elif dow == today_day_of_week:
                status = DayStatus.AVAILABLE
            else:
                status = DayStatus.FUTURE
            columns.append(
                DayColumn(
                    day_of_week=dow,
                    calendar_date=date_for_day_of_week(dow, today_epoch_day, today_day_of_week),
                    status=status,
                    claim=claim,
                )
            )
        return columns


@dataclass(frozen=True, slots=True)
class MonthlyView:
    month: int
    year: int
    claims: tuple[EnrichedClaim, ...] = ()
    failed_weeks: tuple[int, ...] = ()


@dataclass(frozen=True, slots=True)
class YearlyView:
    year: int
    monthly_counts: tuple[int, ...] = (0,) * MONTHS_PER_YEAR
    failed_weeks: tuple[int, ...] = ()

    @property
    def total(self) -> int:
        return sum(self.monthly_counts)
