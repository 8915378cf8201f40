# biblestudy/models/api/progress_response.py
"""
Progress and claim API response models.
Used by routes for output formatting.
"""

from datetime import date

from pydantic import BaseModel, Field

from biblestudy.calendar.epoch import LedgerTime
from biblestudy.models.domain.claim_domain import EnrichedClaim


class LedgerTimeResponse(BaseModel):
    """Response model for the resolved "now"."""

    timestamp_ms: int = Field(..., description="Milliseconds since Unix epoch")
    epoch_day: int = Field(..., description="Whole days since 1970-01-01")
    day_of_week: int = Field(..., description="0 = Sunday")
    week_number: int = Field(..., description="Sunday-anchored week index")
    year: int = Field(..., description="Approximate year used for default views")
    calendar_date: date = Field(..., description="Calendar date (UTC)")
    source: str = Field(..., description="ledger or local")
    error: str | None = Field(None, description="Why the local fallback was used")

    @classmethod
    def from_domain(cls, value: LedgerTime) -> "LedgerTimeResponse":
        return cls(
            timestamp_ms=value.timestamp_ms,
            epoch_day=value.epoch_day,
            day_of_week=value.day_of_week,
            week_number=value.week_number,
            year=value.year,
            calendar_date=value.calendar_date,
            source=value.source,
            error=value.error,
        )


class ClaimRecordResponse(BaseModel):
    """Response model for a decoded claim record with verse text."""

    day_of_week: int = Field(..., description="0 = Sunday")
    amount_claimed: int = Field(..., description="Reward in minor units")
    daily_reward: int = Field(..., description="Reward in whole tokens")
    timestamp: int = Field(..., description="Claim time in milliseconds since epoch")
    verse_reference: str = Field(..., description="Claimed verse reference")
    claim_day: int = Field(..., description="Epoch day of the claim")
    streak_at_claim: int = Field(..., description="Streak reported by the ledger")
    verse_text: str = Field(default="", description="Verse text, empty if lookup failed")
    version: str = Field(default="", description="Bible translation name")

    @classmethod
    def from_domain(cls, claim: EnrichedClaim) -> "ClaimRecordResponse":
        return cls(**claim.to_dict())


class DayColumnResponse(BaseModel):
    day_of_week: int = Field(..., description="0 = Sunday")
    calendar_date: date = Field(..., description="Calendar date of this column")
    status: str = Field(..., description="completed, missed, available or future")
    claim: ClaimRecordResponse | None = Field(None, description="Claim made on this day")


class WeeklyProgressResponse(BaseModel):
    week_number: int | None = Field(None, description="Week the view was built for")
    days: list[DayColumnResponse] = Field(..., description="Sunday-first day columns")
    completed_days: int = Field(..., description="Days claimed this week")
    today: LedgerTimeResponse = Field(..., description="Resolved current time")


class MonthlyProgressResponse(BaseModel):
    month: int = Field(..., description="1 = January")
    year: int = Field(..., description="Calendar year")
    claims: list[ClaimRecordResponse] = Field(..., description="Claims in the month")
    total_count: int = Field(..., description="Number of claims in the month")
    failed_weeks: list[int] = Field(default_factory=list, description="Weeks that could not be read")


class YearlyProgressResponse(BaseModel):
    year: int = Field(..., description="Calendar year")
    monthly_counts: list[int] = Field(..., description="Claims per month, January first")
    total_count: int = Field(..., description="Claims in the year")
    failed_weeks: list[int] = Field(default_factory=list, description="Weeks that could not be read")


class ClaimStatusResponse(BaseModel):
    identity: str | None = Field(None, description="Active wallet address")
    status: str = Field(..., description="checking, not_claimed or claimed")
    today_completed: bool = Field(..., description="Claimed per ledger or weekly progress")
    todays_claim_amount: int = Field(..., description="Whole tokens earned today")
    is_verifying: bool = Field(default=False, description="Primary status check in progress")
    polling: bool = Field(default=False, description="Background status polling active")
    gas_status: str = Field(default="checking", description="checking, sufficient or low")
    gas_balance: int | None = Field(None, description="Wallet SUI balance in MIST")
    today: LedgerTimeResponse = Field(..., description="Resolved current time")


class ClaimResponse(BaseModel):
    success: bool = Field(..., description="Whether a new claim was recorded")
    outcome: str = Field(..., description="Classified submission outcome")
    message: str = Field(..., description="User-facing message")
    digest: str | None = Field(None, description="Transaction digest")
    reward: int | None = Field(None, description="Estimated whole-token reward")
    streak: int | None = Field(None, description="Streak after this claim")
    status: str = Field(..., description="Claim status after the attempt")
