"""
FastAPI application: wires the study controller into the HTTP API.
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from biblestudy.config import settings
from biblestudy.infrastructure.observability.logging import get_logger, log_request, setup_logging
from biblestudy.routes import claims, health, progress, session
from biblestudy.services.progress.controller import create_study_controller

# Setup logging before creating the app
setup_logging(log_level=settings.LOG_LEVEL)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown with proper resource management."""
    logger.info("Application starting", environment=settings.environment, debug=settings.debug)

    missing = settings.missing_contract_ids()
    if missing:
        logger.warning("Contract configuration incomplete", missing=missing)

    app.state.controller = create_study_controller(settings)
    logger.info("Study controller initialized", rpc_url=settings.SUI_RPC_URL)

    yield

    logger.info("Application shutting down")
    try:
        await app.state.controller.close()
        logger.info("All services closed successfully")
    except Exception as e:
        logger.error("Error closing study controller", error=str(e))


app = FastAPI(
    title="Bible Study Progress",
    description="Daily verse claims and study progress backed by a Sui ledger",
    version="0.1.0",
    lifespan=lifespan,
)

# Include routers
app.include_router(health.router)
app.include_router(session.router)
app.include_router(claims.router)
app.include_router(progress.router)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log HTTP requests with timing."""
    start_time = time.time()
    response = await call_next(request)
    process_time = (time.time() - start_time) * 1000

    log_request(request.method, request.url.path, response.status_code, round(process_time, 2))
    return response


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
