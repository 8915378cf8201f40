"""
Study controller: the single owner of application state.

Holds the reconciler (claim status + weekly view), the latest monthly and
yearly views, and the collaborators they are built from. Routes and jobs go
through this object; nothing else mutates the views.
"""

from biblestudy.calendar.epoch import year_estimate
from biblestudy.config import Settings, settings
from biblestudy.infrastructure.observability.logging import get_logger
from biblestudy.models.domain.claim_domain import MonthlyView, YearlyView
from biblestudy.services.claims.reconciler import ClaimReconciler, NoActiveIdentityError
from biblestudy.services.claims.submission import ClaimResult, ClaimService
from biblestudy.services.ledger.interfaces import ClaimSigner, LedgerQueryClient, VerseLookup
from biblestudy.services.ledger.signer import HttpClaimSigner
from biblestudy.services.ledger.sui_client import SuiLedgerClient
from biblestudy.services.progress.aggregator import ProgressAggregator
from biblestudy.services.sequencing import RequestSequencer
from biblestudy.services.verse.bible_client import BibleApiClient

logger = get_logger(__name__)


class StudyController:
    def __init__(
        self,
        ledger: LedgerQueryClient,
        verses: VerseLookup,
        signer: ClaimSigner,
        config: Settings | None = None,
        owned: list | None = None,
    ):
        self.config = config or settings
        # Collaborators closed together with the controller.
        self._owned = owned or []
        self.aggregator = ProgressAggregator(ledger, verses)
        self.reconciler = ClaimReconciler(ledger, self.aggregator, config=self.config)
        self.claims = ClaimService(self.reconciler, signer)

        self.monthly_view: MonthlyView | None = None
        self.yearly_view: YearlyView | None = None
        self._month_sequencer = RequestSequencer()
        self._year_sequencer = RequestSequencer()

    @property
    def identity(self) -> str | None:
        return self.reconciler.identity

    def _require_identity(self) -> str:
        identity = self.reconciler.identity
        if identity is None:
            raise NoActiveIdentityError("No wallet connected")
        return identity

    async def connect(self, identity: str) -> None:
        if identity != self.reconciler.identity:
            self._reset_views()
        await self.reconciler.activate(identity)

    async def disconnect(self) -> None:
        await self.reconciler.deactivate()
        self._reset_views()

    def _reset_views(self) -> None:
        self.monthly_view = None
        self.yearly_view = None
        self._month_sequencer.invalidate()
        self._year_sequencer.invalidate()

    def default_year(self) -> int:
        """Display year picked from the approximate ledger-time year."""
        return year_estimate(self.reconciler.current_time().epoch_day)

    async def load_month(self, month: int, year: int | None = None) -> MonthlyView:
        identity = self._require_identity()
        year = year if year is not None else self.default_year()
        ticket = self._month_sequencer.next_ticket()

        view = await self.aggregator.load_month(identity, month, year)

        if identity == self.reconciler.identity and self._month_sequencer.try_apply(ticket):
            self.monthly_view = view
        else:
            logger.debug("Monthly view superseded", month=month, year=year, ticket=ticket)
        return view

    async def load_year(self, year: int | None = None) -> YearlyView:
        identity = self._require_identity()
        year = year if year is not None else self.default_year()
        ticket = self._year_sequencer.next_ticket()

        view = await self.aggregator.load_year(identity, year)

        if identity == self.reconciler.identity and self._year_sequencer.try_apply(ticket):
            self.yearly_view = view
        else:
            logger.debug("Yearly view superseded", year=year, ticket=ticket)
        return view

    async def claim_today(self, verse_reference: str) -> ClaimResult:
        return await self.claims.claim_today(verse_reference)

    async def close(self) -> None:
        await self.disconnect()
        for collaborator in reversed(self._owned):
            try:
                await collaborator.close()
            except Exception as e:
                logger.error(
                    "Error closing collaborator", collaborator=type(collaborator).__name__, error=str(e)
                )


def create_study_controller(config: Settings | None = None) -> StudyController:
    """Wire the controller to the Sui fullnode, bible-api.com and the claim signer."""
    config = config or settings
    ledger = SuiLedgerClient(config)
    verses = BibleApiClient(config)
    signer = HttpClaimSigner(config)
    return StudyController(ledger, verses, signer, config=config, owned=[ledger, verses, signer])
