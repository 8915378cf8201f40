"""
Claim submission outcomes and the failure signatures that map to them.
"""

from enum import Enum

MAX_DIAGNOSTIC_LENGTH = 100


class SubmissionOutcome(str, Enum):
    CLAIMED = "claimed"
    ALREADY_CLAIMED = "already_claimed"
    PERIOD_LIMIT = "period_limit"
    INSUFFICIENT_GAS = "insufficient_gas"
    CANCELLED = "cancelled"
    FAILED = "failed"


# Checked in order; the first matching signature wins.
FAILURE_SIGNATURES: list[tuple[SubmissionOutcome, tuple[str, ...]]] = [
    (SubmissionOutcome.ALREADY_CLAIMED, ("EAlreadyClaimedToday", "Abort(1)")),
    (SubmissionOutcome.PERIOD_LIMIT, ("EGlobalPeriodLimitExceeded", "Abort(4)")),
    (SubmissionOutcome.INSUFFICIENT_GAS, ("Insufficient gas",)),
    (SubmissionOutcome.CANCELLED, ("User rejected",)),
]

OUTCOME_MESSAGES = {
    SubmissionOutcome.ALREADY_CLAIMED: "You've already claimed today! Come back tomorrow for another blessing!",
    SubmissionOutcome.PERIOD_LIMIT: "The daily limit has been reached. Try again later.",
    SubmissionOutcome.INSUFFICIENT_GAS: "Need testnet SUI for gas. Add SUI to your wallet and retry.",
    SubmissionOutcome.CANCELLED: "Transaction cancelled.",
}


def classify_submission_error(message: str | None) -> SubmissionOutcome:
    text = message or ""
    for outcome, signatures in FAILURE_SIGNATURES:
        if any(signature in text for signature in signatures):
            return outcome
    return SubmissionOutcome.FAILED


def failure_message(outcome: SubmissionOutcome, raw_message: str | None) -> str:
    if outcome in OUTCOME_MESSAGES:
        return OUTCOME_MESSAGES[outcome]
    return f"Claim failed: {(raw_message or 'unknown error')[:MAX_DIAGNOSTIC_LENGTH]}..."
