"""
Collaborator contracts the progress core depends on.

The Sui implementations live next to this module; tests substitute fakes.
"""

from typing import Protocol

from biblestudy.models.domain.claim_domain import VerseText


class LedgerQueryClient(Protocol):
    async def has_claimed_today(self, identity: str) -> bool: ...

    async def get_weekly_progress(self, identity: str) -> bytes: ...

    async def get_progress_for_week(self, identity: str, week_number: int) -> bytes: ...

    async def get_clock_time(self) -> int: ...

    async def get_gas_balance(self, identity: str) -> int: ...


class ClaimSigner(Protocol):
    async def submit_claim(self, identity: str, amount: int, verse_reference: bytes) -> str:
        """Build, sign and execute claim_daily_reward; return the transaction digest."""
        ...


class VerseLookup(Protocol):
    async def lookup_verse_text(self, reference: str) -> VerseText: ...
