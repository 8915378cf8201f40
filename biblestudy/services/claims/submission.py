"""
Daily claim submission.

Estimates the reward, hands the claim to the external signer and routes the
outcome back into the reconciler so a terminal status is always reached.
"""

from dataclasses import dataclass

from biblestudy.infrastructure.observability.logging import get_logger
from biblestudy.models.domain.claim_domain import TOKEN_DECIMALS_FACTOR
from biblestudy.services.claims.outcomes import (
    OUTCOME_MESSAGES,
    SubmissionOutcome,
    classify_submission_error,
    failure_message,
)
from biblestudy.services.claims.reconciler import ClaimReconciler, NoActiveIdentityError
from biblestudy.services.claims.rewards import calculate_daily_reward
from biblestudy.services.ledger.interfaces import ClaimSigner
from biblestudy.services.ledger.signer import ClaimSubmissionError

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ClaimResult:
    outcome: SubmissionOutcome
    message: str
    digest: str | None = None
    reward: int | None = None
    streak: int | None = None

    @property
    def succeeded(self) -> bool:
        return self.outcome == SubmissionOutcome.CLAIMED


class ClaimService:
    def __init__(self, reconciler: ClaimReconciler, signer: ClaimSigner):
        self.reconciler = reconciler
        self.signer = signer

    async def claim_today(self, verse_reference: str) -> ClaimResult:
        """
        Claim today's reward for the active identity.

        Args:
            verse_reference: Reference of today's verse, sent as raw UTF-8

        Returns:
            ClaimResult: claimed, or the classified reason it was not

        Raises:
            NoActiveIdentityError: If no wallet is connected
            ValueError: If the verse reference is empty
        """
        identity = self.reconciler.identity
        if identity is None:
            raise NoActiveIdentityError("Connect a wallet before claiming")

        if self.reconciler.is_today_completed():
            return ClaimResult(
                outcome=SubmissionOutcome.ALREADY_CLAIMED,
                message=OUTCOME_MESSAGES[SubmissionOutcome.ALREADY_CLAIMED],
            )

        if not verse_reference or not verse_reference.strip():
            raise ValueError("Verse reference is required to claim")

        streak = self.reconciler.weekly_view.streak + 1
        reward = calculate_daily_reward(streak)
        amount = reward * TOKEN_DECIMALS_FACTOR

        logger.info(
            "Submitting daily claim", identity=identity, amount=amount, verse_reference=verse_reference
        )

        try:
            digest = await self.signer.submit_claim(identity, amount, verse_reference.encode("utf-8"))
        except ClaimSubmissionError as e:
            outcome = classify_submission_error(e.message)
            self.reconciler.on_submission_failure(outcome)
            logger.warning(
                "Daily claim not completed", identity=identity, outcome=outcome.value, error=e.message
            )
            return ClaimResult(outcome=outcome, message=failure_message(outcome, e.message))

        await self.reconciler.on_submission_success(digest)
        return ClaimResult(
            outcome=SubmissionOutcome.CLAIMED,
            message=f"Daily Claim Complete! +{reward} $BIBLESTUDY earned today! Streak: {streak} days",
            digest=digest,
            reward=reward,
            streak=streak,
        )
