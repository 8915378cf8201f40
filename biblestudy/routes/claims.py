# biblestudy/routes/claims.py
"""
Claim status and daily claim submission endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from biblestudy.infrastructure.observability.logging import get_logger
from biblestudy.models.api.claim_request import ClaimRequest
from biblestudy.models.api.progress_response import (
    ClaimResponse,
    ClaimStatusResponse,
    LedgerTimeResponse,
)
from biblestudy.routes.dependencies import get_controller, require_identity
from biblestudy.services.claims.reconciler import NoActiveIdentityError
from biblestudy.services.progress.controller import StudyController

logger = get_logger(__name__)

router = APIRouter(prefix="/claim", tags=["claims"])


def build_status_response(controller: StudyController) -> ClaimStatusResponse:
    reconciler = controller.reconciler
    return ClaimStatusResponse(
        identity=reconciler.identity,
        status=reconciler.status.value,
        today_completed=reconciler.is_today_completed(),
        todays_claim_amount=reconciler.todays_claim_amount(),
        is_verifying=reconciler.is_verifying,
        polling=reconciler.is_polling,
        gas_status=reconciler.gas_status.value,
        gas_balance=reconciler.gas_balance,
        today=LedgerTimeResponse.from_domain(reconciler.current_time()),
    )


@router.get("/status", response_model=ClaimStatusResponse)
async def get_claim_status(controller: StudyController = Depends(get_controller)):
    """Current claim status as last reconciled; never blocks on the ledger."""
    require_identity(controller)
    return build_status_response(controller)


@router.post("", response_model=ClaimResponse)
async def claim_today(request: ClaimRequest, controller: StudyController = Depends(get_controller)):
    """Claim today's reward for the connected wallet."""
    identity = require_identity(controller)

    try:
        result = await controller.claim_today(request.verse_reference)
    except NoActiveIdentityError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error("Error submitting claim", identity=identity, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to submit claim"
        )

    return ClaimResponse(
        success=result.succeeded,
        outcome=result.outcome.value,
        message=result.message,
        digest=result.digest,
        reward=result.reward,
        streak=result.streak,
        status=controller.reconciler.status.value,
    )
