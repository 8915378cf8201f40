# biblestudy/routes/progress.py
"""
Weekly, monthly and yearly progress endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from biblestudy.infrastructure.observability.logging import get_logger
from biblestudy.models.api.progress_response import (
    ClaimRecordResponse,
    DayColumnResponse,
    LedgerTimeResponse,
    MonthlyProgressResponse,
    WeeklyProgressResponse,
    YearlyProgressResponse,
)
from biblestudy.routes.dependencies import get_controller, require_identity
from biblestudy.services.progress.aggregator import AggregationError
from biblestudy.services.progress.controller import StudyController

logger = get_logger(__name__)

router = APIRouter(prefix="/progress", tags=["progress"])


@router.get("/week", response_model=WeeklyProgressResponse)
async def get_weekly_progress(
    refresh: bool = Query(default=False, description="Re-read the week from the ledger"),
    controller: StudyController = Depends(get_controller),
):
    """Sunday-first view of the current ledger week."""
    require_identity(controller)
    reconciler = controller.reconciler

    view = await reconciler.refresh_weekly_view() if refresh else reconciler.weekly_view
    today = reconciler.current_time()

    days = [
        DayColumnResponse(
            day_of_week=column.day_of_week,
            calendar_date=column.calendar_date,
            status=column.status.value,
            claim=ClaimRecordResponse.from_domain(column.claim) if column.claim else None,
        )
        for column in view.columns(today.epoch_day, today.day_of_week)
    ]

    return WeeklyProgressResponse(
        week_number=view.week_number,
        days=days,
        completed_days=view.streak,
        today=LedgerTimeResponse.from_domain(today),
    )


@router.get("/month", response_model=MonthlyProgressResponse)
async def get_monthly_progress(
    month: int = Query(..., ge=1, le=12, description="Month (1-12)"),
    year: int | None = Query(default=None, ge=1970, le=9998, description="Calendar year"),
    controller: StudyController = Depends(get_controller),
):
    identity = require_identity(controller)

    try:
        view = await controller.load_month(month, year)
    except AggregationError as e:
        logger.error("Error loading monthly progress", identity=identity, month=month, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to load monthly progress"
        )

    claims = [ClaimRecordResponse.from_domain(claim) for claim in view.claims]
    return MonthlyProgressResponse(
        month=view.month,
        year=view.year,
        claims=claims,
        total_count=len(claims),
        failed_weeks=list(view.failed_weeks),
    )


@router.get("/year", response_model=YearlyProgressResponse)
async def get_yearly_progress(
    year: int | None = Query(default=None, ge=1970, le=9998, description="Calendar year"),
    controller: StudyController = Depends(get_controller),
):
    """Claims per month for a year. Year defaults to the ledger's current year."""
    identity = require_identity(controller)

    try:
        view = await controller.load_year(year)
    except AggregationError as e:
        logger.error("Error loading yearly progress", identity=identity, year=year, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to load yearly progress"
        )

    return YearlyProgressResponse(
        year=view.year,
        monthly_counts=list(view.monthly_counts),
        total_count=view.total,
        failed_weeks=list(view.failed_weeks),
    )
