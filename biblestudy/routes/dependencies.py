"""
Shared route dependencies.
"""

from fastapi import HTTPException, Request, status

from biblestudy.services.progress.controller import StudyController


def get_controller(request: Request) -> StudyController:
    controller = getattr(request.app.state, "controller", None)
    if controller is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Service not initialized"
        )
    return controller


def require_identity(controller: StudyController) -> str:
    identity = controller.identity
    if identity is None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="No wallet connected")
    return identity
