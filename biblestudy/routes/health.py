# biblestudy/routes/health.py
"""
Health check endpoints with ledger reachability and contract config checks.
"""

import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from biblestudy.calendar.epoch import resolve_ledger_time
from biblestudy.config import settings

router = APIRouter()


@router.get("/healthz")
async def healthz():
    """Basic health check - always returns 200 if app is running."""
    return {"status": "ok", "service": "biblestudy-progress"}


@router.get("/readyz")
async def readyz(request: Request):
    """
    Readiness check: contract configuration and ledger clock reachability.
    """
    checks = {}
    overall_ok = True

    # 1) Contract object IDs
    missing = settings.missing_contract_ids()
    checks["contract_config"] = {"ok": not missing}
    if missing:
        checks["contract_config"]["missing"] = missing
        overall_ok = False

    # 2) Ledger clock
    controller = getattr(request.app.state, "controller", None)
    if controller is None:
        checks["ledger"] = {"ok": False, "error": "Service not initialized"}
        overall_ok = False
    else:
        t0 = time.time()
        now = await resolve_ledger_time(controller.reconciler.ledger)
        ledger_ok = now.source == "ledger"
        checks["ledger"] = {
            "ok": ledger_ok,
            "latency_ms": round((time.time() - t0) * 1000, 1),
            "epoch_day": now.epoch_day,
        }
        if not ledger_ok:
            checks["ledger"]["error"] = now.error
            overall_ok = False

    body = {"status": "ready" if overall_ok else "degraded", "checks": checks}
    return JSONResponse(status_code=200 if overall_ok else 503, content=body)
