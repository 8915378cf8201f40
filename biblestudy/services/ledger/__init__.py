"""
Ledger collaborators: Sui read queries and claim submission.
"""

from .interfaces import ClaimSigner, LedgerQueryClient, VerseLookup
from .signer import ClaimSubmissionError, HttpClaimSigner
from .sui_client import LedgerQueryError, SuiLedgerClient

__all__ = [
    "ClaimSigner",
    "ClaimSubmissionError",
    "HttpClaimSigner",
    "LedgerQueryClient",
    "LedgerQueryError",
    "SuiLedgerClient",
    "VerseLookup",
]
