"""
Background worker entrypoint for the claim status jobs.

    biblestudy-worker [claim_status_watch|claim_status_check] [--address 0x...] [--interval SECONDS]

The job defaults to WORKER_JOB (or claim_status_watch); the wallet defaults
to WALLET_ADDRESS.
"""

import argparse
import asyncio
import os
from collections.abc import Awaitable, Callable

from biblestudy.config import Settings, settings
from biblestudy.infrastructure.observability.logging import get_logger, setup_logging
from biblestudy.jobs.claim_status_job import (
    ClaimStatusJobError,
    ClaimStatusWatchJob,
    run_claim_status_check,
    start_claim_status_scheduler,
)
from biblestudy.models.api.claim_request import SUI_ADDRESS_PATTERN

logger = get_logger(__name__)

DEFAULT_JOB = "claim_status_watch"

JobRunner = Callable[[ClaimStatusWatchJob], Awaitable[object]]

JOB_REGISTRY: dict[str, JobRunner] = {
    "claim_status_watch": start_claim_status_scheduler,
    "claim_status_check": run_claim_status_check,
}


def _wallet_address(value: str) -> str:
    value = value.strip()
    if not SUI_ADDRESS_PATTERN.fullmatch(value):
        raise argparse.ArgumentTypeError(f"invalid Sui address: {value!r}")
    return value.lower()


def _positive_seconds(value: str) -> float:
    seconds = float(value)
    if seconds <= 0:
        raise argparse.ArgumentTypeError("interval must be positive")
    return seconds


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a biblestudy claim status job.")
    parser.add_argument(
        "job",
        nargs="?",
        default=os.getenv("WORKER_JOB", DEFAULT_JOB),
        help=f"Job to run: {', '.join(sorted(JOB_REGISTRY))}",
    )
    parser.add_argument(
        "--address", type=_wallet_address, help="Wallet to watch (overrides WALLET_ADDRESS)."
    )
    parser.add_argument("--interval", type=_positive_seconds, help="Seconds between status checks.")

    args = parser.parse_args(argv)
    args.job = args.job.strip().lower()
    if args.job not in JOB_REGISTRY:
        parser.error(f"unknown job {args.job!r}")
    return args


def build_job(
    address: str | None = None, interval: float | None = None, config: Settings | None = None
) -> ClaimStatusWatchJob:
    """Job for the configured wallet, with command-line overrides applied."""
    config = config or settings
    overrides: dict = {}
    if address:
        overrides["WALLET_ADDRESS"] = address
    if interval:
        overrides["STATUS_POLL_INTERVAL_SECONDS"] = interval
    if overrides:
        config = config.model_copy(update=overrides)
    return ClaimStatusWatchJob(config=config)


async def run_worker(job_name: str, job: ClaimStatusWatchJob | None = None) -> None:
    """Run the requested claim status job."""
    name = job_name.strip().lower()
    if name not in JOB_REGISTRY:
        raise ValueError(
            f"Unknown worker job '{name}'. "
            f"Available jobs: {', '.join(sorted(JOB_REGISTRY.keys()))}"
        )

    job = job or build_job()
    logger.info("Starting background worker", job=name, identity=job.config.WALLET_ADDRESS)
    await JOB_REGISTRY[name](job)


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint; returns the process exit code."""
    args = parse_args(argv)
    setup_logging(log_level=settings.LOG_LEVEL)

    job = build_job(address=args.address, interval=args.interval)
    try:
        asyncio.run(run_worker(args.job, job))
    except ClaimStatusJobError as e:
        logger.error("Worker job failed", job=args.job, operation=e.operation, error=str(e))
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
