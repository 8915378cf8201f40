"""
Claim status reconciliation for the active wallet identity.

Tracks checking / not_claimed / claimed from three inputs: the ledger's
has_claimed_today query (on activation and on every poll tick), the weekly
progress view, and locally observed submission outcomes. The wallet's SUI
balance is checked alongside so a low-gas wallet can be flagged before it
submits.
"""

import asyncio
import contextlib

from biblestudy.calendar.epoch import LedgerTime, local_ledger_time, resolve_ledger_time
from biblestudy.config import Settings, settings
from biblestudy.infrastructure.observability.logging import get_logger
from biblestudy.models.domain.claim_domain import ClaimStatus, GasStatus, WeeklyView
from biblestudy.services.claims.outcomes import SubmissionOutcome
from biblestudy.services.claims.rewards import calculate_daily_reward
from biblestudy.services.ledger.interfaces import LedgerQueryClient
from biblestudy.services.ledger.sui_client import LedgerQueryError
from biblestudy.services.progress.aggregator import ProgressAggregator
from biblestudy.services.sequencing import RequestSequencer

logger = get_logger(__name__)

INITIAL_RETRY_DELAY_SECONDS = 1.0


class NoActiveIdentityError(Exception):
    """Raised when an operation needs a connected wallet and none is active."""


class ClaimStatusUnavailableError(Exception):
    """The primary status check failed on every attempt."""

    def __init__(self, message: str, identity: str | None = None, attempts: int = 0):
        super().__init__(message)
        self.identity = identity
        self.attempts = attempts


class ClaimReconciler:
    """
    Owns ClaimStatus and the WeeklyView for one identity at a time.

    Both are replaced wholesale. Every query takes a ticket from a sequencer
    and is applied only if it is the newest result and the identity session
    it was issued in is still active.
    """

    def __init__(
        self,
        ledger: LedgerQueryClient,
        aggregator: ProgressAggregator,
        config: Settings | None = None,
        retry_delay: float = INITIAL_RETRY_DELAY_SECONDS,
    ):
        config = config or settings
        self.ledger = ledger
        self.aggregator = aggregator
        self.poll_interval = config.STATUS_POLL_INTERVAL_SECONDS
        self.settle_delay = config.CLAIM_SETTLE_DELAY_SECONDS
        self.initial_attempts = max(1, config.INITIAL_STATUS_MAX_ATTEMPTS)
        self.min_gas_balance = config.MIN_GAS_BALANCE
        self.retry_delay = retry_delay

        self.identity: str | None = None
        self.status = ClaimStatus.CHECKING
        self.weekly_view = WeeklyView()
        self.ledger_time: LedgerTime | None = None
        self.is_verifying = False
        self.gas_status = GasStatus.CHECKING
        self.gas_balance: int | None = None

        self._claimed_day: int | None = None
        self._session = 0
        self._poll_task: asyncio.Task | None = None
        self._status_sequencer = RequestSequencer()
        self._view_sequencer = RequestSequencer()
        self._gas_sequencer = RequestSequencer()

    # ------------------------------------------------------------------
    # Identity lifecycle
    # ------------------------------------------------------------------

    @property
    def is_polling(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    async def activate(self, identity: str) -> None:
        """
        Make `identity` the active wallet: start polling and run the primary status check.

        Raises:
            ClaimStatusUnavailableError: If the primary check fails on every attempt
        """
        if identity == self.identity and self.is_polling:
            return

        await self.deactivate()

        self._session += 1
        self.identity = identity
        self._poll_task = asyncio.create_task(
            self._poll_loop(identity, self._session), name=f"claim-status-poll-{identity}"
        )
        logger.info("Claim status session started", identity=identity, session=self._session)

        try:
            await self.refresh_status(silent=False)
        finally:
            await self.refresh_weekly_view()
            await self.refresh_gas_status()

    async def deactivate(self) -> None:
        """Cancel polling and forget all state tied to the current identity."""
        task, self._poll_task = self._poll_task, None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

        if self.identity is not None:
            logger.info("Claim status session ended", identity=self.identity, session=self._session)

        self._session += 1
        self.identity = None
        self.status = ClaimStatus.CHECKING
        self.weekly_view = WeeklyView()
        self._claimed_day = None
        self.is_verifying = False
        self.gas_status = GasStatus.CHECKING
        self.gas_balance = None
        self._status_sequencer.invalidate()
        self._view_sequencer.invalidate()
        self._gas_sequencer.invalidate()

    def _is_current(self, session: int, sequencer: RequestSequencer, ticket: int) -> bool:
        return session == self._session and sequencer.try_apply(ticket)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def _query_claimed(self, identity: str, attempts: int) -> tuple[bool | None, Exception | None]:
        last_error: Exception | None = None
        for attempt in range(1, attempts + 1):
            try:
                return await self.ledger.has_claimed_today(identity), None
            except LedgerQueryError as e:
                last_error = e
                logger.warning(
                    "Claim status query failed",
                    identity=identity,
                    attempt=attempt,
                    max_attempts=attempts,
                    error=str(e),
                )
                if attempt < attempts:
                    await asyncio.sleep(self.retry_delay)
        return None, last_error

    async def refresh_status(self, silent: bool = True) -> ClaimStatus:
        """
        Re-query has_claimed_today and apply the result.

        Silent refreshes (poll ticks) try once and recover from failures. The
        primary check retries and raises once every attempt has failed.
        """
        identity = self.identity
        if identity is None:
            self.status = ClaimStatus.CHECKING
            return self.status

        session = self._session
        ticket = self._status_sequencer.next_ticket()
        if not silent:
            self.is_verifying = True

        try:
            today = await resolve_ledger_time(self.ledger)
            attempts = 1 if silent else self.initial_attempts
            claimed, error = await self._query_claimed(identity, attempts)

            if not self._is_current(session, self._status_sequencer, ticket):
                logger.debug("Discarding stale claim status result", identity=identity, ticket=ticket)
                return self.status

            self.ledger_time = today
            self._apply_status(bool(claimed), today)

            if claimed is None and not silent:
                raise ClaimStatusUnavailableError(
                    f"Could not verify claim status after {attempts} attempts: {error}",
                    identity=identity,
                    attempts=attempts,
                ) from error
            return self.status
        finally:
            if not silent and session == self._session:
                self.is_verifying = False

    def _apply_status(self, claimed: bool, today: LedgerTime) -> None:
        if claimed:
            self.status = ClaimStatus.CLAIMED
            self._claimed_day = today.epoch_day
            return

        # A claim confirmed for today stays confirmed for the rest of the session.
        if (
            self.status == ClaimStatus.CLAIMED
            and self._claimed_day is not None
            and self._claimed_day >= today.epoch_day
        ):
            return

        self.status = ClaimStatus.NOT_CLAIMED
        self._claimed_day = None

    async def refresh_weekly_view(self) -> WeeklyView:
        identity = self.identity
        if identity is None:
            self.weekly_view = WeeklyView()
            return self.weekly_view

        session = self._session
        ticket = self._view_sequencer.next_ticket()

        today = await resolve_ledger_time(self.ledger)
        view = await self.aggregator.load_weekly_view(identity, today)

        if self._is_current(session, self._view_sequencer, ticket):
            self.weekly_view = view
            self.ledger_time = today
        else:
            logger.debug("Discarding stale weekly view", identity=identity, ticket=ticket)
        return self.weekly_view

    async def refresh_gas_status(self) -> GasStatus:
        """Flag the wallet as low on gas when its SUI balance is below the minimum or unreadable."""
        identity = self.identity
        if identity is None:
            self.gas_status = GasStatus.CHECKING
            return self.gas_status

        session = self._session
        ticket = self._gas_sequencer.next_ticket()

        try:
            balance: int | None = await self.ledger.get_gas_balance(identity)
        except LedgerQueryError as e:
            logger.warning("Gas balance check failed", identity=identity, error=str(e))
            balance = None

        if not self._is_current(session, self._gas_sequencer, ticket):
            logger.debug("Discarding stale gas balance", identity=identity, ticket=ticket)
            return self.gas_status

        self.gas_balance = balance
        if balance is not None and balance >= self.min_gas_balance:
            self.gas_status = GasStatus.SUFFICIENT
        else:
            self.gas_status = GasStatus.LOW
        return self.gas_status

    async def _poll_loop(self, identity: str, session: int) -> None:
        logger.info("Claim status polling started", identity=identity, interval_seconds=self.poll_interval)

        while True:
            await asyncio.sleep(self.poll_interval)

            if session != self._session or identity != self.identity:
                logger.info("Claim status polling stopped for inactive identity", identity=identity)
                return

            try:
                await self.refresh_status(silent=True)
                await self.refresh_weekly_view()
                await self.refresh_gas_status()
            except Exception as e:
                logger.error(
                    "Error in claim status poll", identity=identity, error=str(e), error_type=type(e).__name__
                )

    # ------------------------------------------------------------------
    # Submission results
    # ------------------------------------------------------------------

    def mark_claimed(self) -> None:
        """Optimistically record today's claim before the ledger reflects it."""
        today = self.ledger_time or local_ledger_time()
        # Polls issued before the claim landed may still report not_claimed.
        self._status_sequencer.invalidate()
        self.status = ClaimStatus.CLAIMED
        self._claimed_day = today.epoch_day

    async def on_submission_success(self, digest: str) -> None:
        session = self._session
        self.mark_claimed()
        logger.info("Claim submitted", identity=self.identity, digest=digest)

        await asyncio.sleep(self.settle_delay)
        if session == self._session:
            await self.refresh_weekly_view()

    def on_submission_failure(self, outcome: SubmissionOutcome) -> None:
        if outcome == SubmissionOutcome.ALREADY_CLAIMED:
            logger.info("Ledger reports claim already made", identity=self.identity)
            self.mark_claimed()
        elif outcome == SubmissionOutcome.INSUFFICIENT_GAS:
            self.gas_status = GasStatus.LOW

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    def current_time(self) -> LedgerTime:
        return self.ledger_time or local_ledger_time()

    def is_today_completed(self) -> bool:
        today = self.current_time()
        return self.status == ClaimStatus.CLAIMED or self.weekly_view.has_entry(today.day_of_week)

    def todays_claim_amount(self) -> int:
        """Whole tokens earned today: the recorded amount, else the estimate once claimed."""
        today = self.current_time()
        entry = self.weekly_view.days.get(today.day_of_week)
        if entry is not None and entry.record.daily_reward:
            return entry.record.daily_reward
        if self.is_today_completed():
            return calculate_daily_reward(self.weekly_view.streak + 1)
        return 0
