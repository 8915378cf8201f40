# biblestudy/routes/session.py
"""
Wallet session endpoints: connect and disconnect the active identity.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from biblestudy.infrastructure.observability.logging import get_logger
from biblestudy.models.api.claim_request import SessionRequest
from biblestudy.routes.claims import build_status_response
from biblestudy.routes.dependencies import get_controller
from biblestudy.services.claims.reconciler import ClaimStatusUnavailableError
from biblestudy.services.progress.controller import StudyController

logger = get_logger(__name__)

router = APIRouter(prefix="/session", tags=["session"])


@router.post("")
async def connect_wallet(request: SessionRequest, controller: StudyController = Depends(get_controller)):
    """Activate a wallet and run the initial claim status check."""
    try:
        await controller.connect(request.address)
    except ClaimStatusUnavailableError as e:
        logger.warning("Initial claim status unavailable", identity=request.address, attempts=e.attempts)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    return build_status_response(controller)


@router.delete("")
async def disconnect_wallet(controller: StudyController = Depends(get_controller)):
    identity = controller.identity
    await controller.disconnect()
    return {"disconnected": identity is not None, "identity": identity}
