"""
Claim status watch job.

Keeps a claim status session open for the configured wallet and logs every
status transition. Runs in its own process via the worker runner, either
as a long-running watcher or as a single check that reports and exits.
"""

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime

from biblestudy.config import Settings, settings
from biblestudy.infrastructure.observability.logging import get_logger
from biblestudy.services.claims.reconciler import ClaimStatusUnavailableError
from biblestudy.services.progress.controller import StudyController, create_study_controller

logger = get_logger(__name__)

ERROR_BACKOFF_SECONDS = 60


class ClaimStatusJobError(Exception):
    """Custom exception for claim status watch operations."""

    def __init__(self, message: str, operation: str | None = None, recoverable: bool = True):
        super().__init__(message)
        self.operation = operation
        self.recoverable = recoverable


class ClaimStatusWatchJob:
    """
    Watches today's claim status for one wallet.

    The controller's reconciler does the polling; this job only reads the
    reconciled state at the same cadence and reports transitions.
    """

    def __init__(
        self,
        config: Settings | None = None,
        controller_factory: Callable[[Settings], StudyController] = create_study_controller,
    ):
        self.config = config or settings
        self._controller_factory = controller_factory
        self.controller: StudyController | None = None
        self.last_status: str | None = None
        self.last_check_time: datetime | None = None
        self.transitions = 0

    def _validate_config(self) -> str:
        address = self.config.WALLET_ADDRESS
        if not address:
            raise ClaimStatusJobError(
                "WALLET_ADDRESS is required for the claim status watcher",
                operation="validate_config",
                recoverable=False,
            )

        missing = self.config.missing_contract_ids()
        if missing:
            raise ClaimStatusJobError(
                f"Missing contract configuration: {', '.join(missing)}",
                operation="validate_config",
                recoverable=False,
            )
        return address

    async def start(self) -> None:
        address = self._validate_config()
        self.controller = self._controller_factory(self.config)

        try:
            await self.controller.connect(address)
        except ClaimStatusUnavailableError as e:
            # Polling is already running; later ticks may succeed.
            logger.warning("Initial claim status unavailable", identity=address, error=str(e))

        self._record(self.controller.reconciler.status.value)

    def _record(self, status: str) -> bool:
        self.last_check_time = datetime.now(UTC)
        if status == self.last_status:
            return False

        logger.info(
            "Claim status changed",
            identity=self.config.WALLET_ADDRESS,
            previous=self.last_status,
            status=status,
            job_run="claim_status_watch",
        )
        self.last_status = status
        self.transitions += 1
        return True

    def run_once(self) -> dict:
        """Record the reconciled status and return a snapshot of it."""
        if self.controller is None:
            raise ClaimStatusJobError("Job not started", operation="run_once")

        reconciler = self.controller.reconciler
        changed = self._record(reconciler.status.value)
        return {
            "job_run": "claim_status_watch",
            "identity": reconciler.identity,
            "status": reconciler.status.value,
            "changed": changed,
            "today_completed": reconciler.is_today_completed(),
            "todays_claim_amount": reconciler.todays_claim_amount(),
            "polling": reconciler.is_polling,
            "gas_status": reconciler.gas_status.value,
            "gas_balance": reconciler.gas_balance,
        }

    def get_job_status(self) -> dict:
        return {
            "job_name": "claim_status_watch",
            "identity": self.config.WALLET_ADDRESS,
            "last_status": self.last_status,
            "last_check_time": self.last_check_time.isoformat() if self.last_check_time else None,
            "transitions": self.transitions,
            "interval_seconds": self.config.STATUS_POLL_INTERVAL_SECONDS,
        }

    async def stop(self) -> None:
        if self.controller is not None:
            await self.controller.close()
            self.controller = None


async def start_claim_status_scheduler(job: ClaimStatusWatchJob | None = None) -> None:
    """Run the claim status watcher until cancelled."""
    job = job or ClaimStatusWatchJob()
    interval = job.config.STATUS_POLL_INTERVAL_SECONDS
    logger.info("Starting claim status watcher", interval_seconds=interval)

    await job.start()
    try:
        while True:
            try:
                snapshot = job.run_once()
                logger.debug("Claim status watch cycle completed", **snapshot)
                await asyncio.sleep(interval)
            except ClaimStatusJobError:
                raise
            except Exception as e:
                logger.error(
                    "Error in claim status watcher", error=str(e), error_type=type(e).__name__
                )
                await asyncio.sleep(ERROR_BACKOFF_SECONDS)
    finally:
        await job.stop()


async def run_claim_status_check(job: ClaimStatusWatchJob | None = None) -> dict:
    """Connect once, report today's status and gas, then disconnect."""
    job = job or ClaimStatusWatchJob()
    await job.start()
    try:
        snapshot = job.run_once()
    finally:
        await job.stop()

    logger.info("Claim status check completed", **snapshot)
    return snapshot
