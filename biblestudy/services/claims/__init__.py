"""
Claim status reconciliation and daily claim submission.
"""

from .outcomes import SubmissionOutcome, classify_submission_error
from .reconciler import ClaimReconciler, ClaimStatusUnavailableError, NoActiveIdentityError
from .submission import ClaimResult, ClaimService

__all__ = [
    "ClaimReconciler",
    "ClaimResult",
    "ClaimService",
    "ClaimStatusUnavailableError",
    "NoActiveIdentityError",
    "SubmissionOutcome",
    "classify_submission_error",
]
