"""
Background job runners.
"""

from .claim_status_job import ClaimStatusWatchJob, start_claim_status_scheduler

__all__ = ["ClaimStatusWatchJob", "start_claim_status_scheduler"]
