"""
Progress aggregation service.

Turns per-week ledger progress into weekly, monthly and yearly views. The
ledger client is the only I/O boundary besides best-effort verse lookups;
everything else here is calendar filtering over decoded records.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable

from biblestudy.calendar.epoch import (
    LedgerTime,
    date_for_epoch_day,
    month_epoch_range,
    week_range,
    year_epoch_range,
)
from biblestudy.codec.bcs import RecordDecodeError, decode_claim_records
from biblestudy.infrastructure.observability.logging import get_logger
from biblestudy.models.domain.claim_domain import (
    MONTHS_PER_YEAR,
    ClaimRecord,
    EnrichedClaim,
    MonthlyView,
    WeeklyView,
    YearlyView,
)
from biblestudy.models.domain.results import DecodeFailure, Failure, NetworkFailure, Ok
from biblestudy.services.ledger.interfaces import LedgerQueryClient, VerseLookup
from biblestudy.services.ledger.sui_client import LedgerQueryError
from biblestudy.services.verse.bible_client import VerseLookupError

logger = get_logger(__name__)


class AggregationError(Exception):
    """Raised when a view cannot be assembled at all."""

    def __init__(self, message: str, operation: str | None = None):
        super().__init__(message)
        self.operation = operation


def _calendar_month(claim_day: int) -> tuple[int, int] | None:
    """(year, month) of an epoch day, or None when outside the representable calendar."""
    try:
        value = date_for_epoch_day(claim_day)
    except OverflowError:
        return None
    return value.year, value.month


class ProgressAggregator:
    def __init__(self, ledger: LedgerQueryClient, verses: VerseLookup):
        self.ledger = ledger
        self.verses = verses

    async def load_week(self, identity: str, week_number: int) -> Ok[list[ClaimRecord]] | Failure:
        if week_number < 0:
            # the registry indexes weeks as u64, so nothing is stored before week 0
            return Ok([])

        try:
            raw = await self.ledger.get_progress_for_week(identity, week_number)
        except LedgerQueryError as e:
            return NetworkFailure(str(e))

        try:
            return Ok(decode_claim_records(raw))
        except RecordDecodeError as e:
            return DecodeFailure(str(e))

    async def _load_week_range(
        self, identity: str, weeks: Iterable[int]
    ) -> tuple[list[ClaimRecord], list[int]]:
        records: list[ClaimRecord] = []
        failed_weeks: list[int] = []
        seen: set[ClaimRecord] = set()

        for week in weeks:
            match await self.load_week(identity, week):
                case Ok(value=week_records):
                    # a record served by two neighbouring weeks is still one claim
                    for record in week_records:
                        if record not in seen:
                            seen.add(record)
                            records.append(record)
                case DecodeFailure(reason=reason) | NetworkFailure(reason=reason) as failure:
                    failed_weeks.append(week)
                    logger.warning(
                        "Week progress unavailable, counting as empty",
                        identity=identity,
                        week_number=week,
                        failure=type(failure).__name__,
                        error=reason,
                    )

        return records, failed_weeks

    async def enrich(self, record: ClaimRecord) -> EnrichedClaim:
        """Attach verse text; lookup failures leave text and version empty."""
        try:
            verse = await self.verses.lookup_verse_text(record.verse_reference_text)
        except VerseLookupError as e:
            logger.debug(
                "Verse lookup failed", reference=record.verse_reference_text, error=str(e)
            )
            return EnrichedClaim(record=record)
        return EnrichedClaim(record=record, verse_text=verse.text, version=verse.version)

    async def _enrich_all(self, records: list[ClaimRecord], operation: str) -> list[EnrichedClaim]:
        try:
            return list(await asyncio.gather(*(self.enrich(record) for record in records)))
        except Exception as e:
            logger.error(
                "Verse enrichment failed", operation=operation, error=str(e), error_type=type(e).__name__
            )
            raise AggregationError(f"Failed to enrich claims: {e}", operation=operation) from e

    async def load_month(self, identity: str, month: int, year: int) -> MonthlyView:
        """
        Claims whose claim_day falls in the given month (1-based), enriched with verse text.

        Every week overlapping the month is queried; spill-over records from the
        neighbouring months are removed by the exact calendar filter.
        """
        first_day, last_day = month_epoch_range(month, year)
        weeks = week_range(first_day, last_day)
        records, failed_weeks = await self._load_week_range(identity, weeks)

        in_month = [r for r in records if _calendar_month(r.claim_day) == (year, month)]
        claims = await self._enrich_all(in_month, "load_month")

        logger.info(
            "Monthly progress loaded",
            identity=identity,
            month=month,
            year=year,
            weeks_queried=len(weeks),
            failed_weeks=len(failed_weeks),
            claim_count=len(claims),
        )
        return MonthlyView(
            month=month, year=year, claims=tuple(claims), failed_weeks=tuple(failed_weeks)
        )

    async def load_year(self, identity: str, year: int) -> YearlyView:
        first_day, last_day = year_epoch_range(year)
        weeks = week_range(first_day, last_day)
        records, failed_weeks = await self._load_week_range(identity, weeks)

        counts = [0] * MONTHS_PER_YEAR
        for record in records:
            calendar_month = _calendar_month(record.claim_day)
            if calendar_month is None or calendar_month[0] != year:
                continue
            counts[calendar_month[1] - 1] += 1

        logger.info(
            "Yearly progress loaded",
            identity=identity,
            year=year,
            weeks_queried=len(weeks),
            failed_weeks=len(failed_weeks),
            claim_count=sum(counts),
        )
        return YearlyView(year=year, monthly_counts=tuple(counts), failed_weeks=tuple(failed_weeks))

    async def load_weekly_view(self, identity: str, today: LedgerTime) -> WeeklyView:
        """Current ledger week keyed by day of week; empty when the ledger cannot be read."""
        try:
            raw = await self.ledger.get_weekly_progress(identity)
            records = decode_claim_records(raw)
        except (LedgerQueryError, RecordDecodeError) as e:
            logger.warning("Weekly progress unavailable", identity=identity, error=str(e))
            return WeeklyView(week_number=today.week_number)

        claims = await self._enrich_all(records, "load_weekly_view")
        days = {claim.record.day_of_week: claim for claim in claims}
        return WeeklyView(week_number=today.week_number, days=days)
