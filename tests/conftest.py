import asyncio

import pytest

from biblestudy.calendar.epoch import MS_PER_DAY, week_number
from biblestudy.codec.bcs import encode_claim_records
from biblestudy.config import Settings
from biblestudy.models.domain.claim_domain import ClaimRecord, VerseText
from biblestudy.services.ledger.signer import ClaimSubmissionError
from biblestudy.services.ledger.sui_client import LedgerQueryError
from biblestudy.services.verse.bible_client import VerseLookupError

WALLET = "0x" + "ab" * 32
OTHER_WALLET = "0x" + "cd" * 32

# 2024-03-18, a Monday
TODAY_EPOCH_DAY = 19800


def make_record(claim_day: int, reference: str = "John 3:16", streak: int = 1, amount: int = 0):
    return ClaimRecord(
        day_of_week=(claim_day + 4) % 7,
        amount_claimed=amount,
        timestamp=claim_day * MS_PER_DAY + 3_600_000,
        verse_reference=reference.encode("utf-8"),
        claim_day=claim_day,
        streak_at_claim=streak,
    )


class FakeLedger:
    """In-memory LedgerQueryClient. Weekly progress is served from `records`."""

    def __init__(self, today_epoch_day: int = TODAY_EPOCH_DAY):
        self.clock_ms = today_epoch_day * MS_PER_DAY + 12 * 3_600_000
        self.claimed = False
        self.status_failures = 0
        self.always_fail_status = False
        self.clock_error = False
        self.weekly_error = False
        self.records: list[ClaimRecord] = []
        self.failing_weeks: set[int] = set()
        self.corrupt_weeks: set[int] = set()
        self.status_gate: asyncio.Event | None = None
        self.status_calls = 0
        self.week_calls: list[int] = []
        self.gas_balance = 1_000_000_000
        self.gas_error = False
        self.duplicate_into_next_week = False

    async def get_clock_time(self) -> int:
        if self.clock_error:
            raise LedgerQueryError("clock unavailable", operation="get_clock_time")
        return self.clock_ms

    async def has_claimed_today(self, identity: str) -> bool:
        self.status_calls += 1
        claimed = self.claimed
        if self.status_gate is not None:
            await self.status_gate.wait()
        if self.always_fail_status:
            raise LedgerQueryError("rpc down", operation="has_claimed_today")
        if self.status_failures > 0:
            self.status_failures -= 1
            raise LedgerQueryError("rpc down", operation="has_claimed_today")
        return claimed

    async def get_weekly_progress(self, identity: str) -> bytes:
        if self.weekly_error:
            raise LedgerQueryError("rpc down", operation="get_weekly_progress")
        current_week = week_number(self.clock_ms // MS_PER_DAY)
        return encode_claim_records(r for r in self.records if week_number(r.claim_day) == current_week)

    async def get_progress_for_week(self, identity: str, week: int) -> bytes:
        self.week_calls.append(week)
        if week in self.failing_weeks:
            raise LedgerQueryError("rpc down", operation="get_progress_for_week")
        weeks = {week, week - 1} if self.duplicate_into_next_week else {week}
        data = encode_claim_records(r for r in self.records if week_number(r.claim_day) in weeks)
        if week in self.corrupt_weeks:
            return data[:-3]
        return data

    async def get_gas_balance(self, identity: str) -> int:
        if self.gas_error:
            raise LedgerQueryError("rpc down", operation="get_gas_balance")
        return self.gas_balance


class FakeVerses:
    def __init__(self):
        self.fail = False
        self.lookups: list[str] = []

    async def lookup_verse_text(self, reference: str) -> VerseText:
        self.lookups.append(reference)
        if self.fail:
            raise VerseLookupError("bible api down", reference=reference)
        return VerseText(text=f"Text of {reference}", version="King James Version")


class FakeSigner:
    def __init__(self):
        self.error: str | None = None
        self.submissions: list[tuple[str, int, bytes]] = []

    async def submit_claim(self, identity: str, amount: int, verse_reference: bytes) -> str:
        self.submissions.append((identity, amount, verse_reference))
        if self.error is not None:
            raise ClaimSubmissionError(self.error)
        return "DigestAbc123"


@pytest.fixture
def test_settings():
    return Settings(
        _env_file=None,
        PACKAGE_ID="0x" + "11" * 32,
        CLAIMS_ID="0x" + "22" * 32,
        PROGRESS_REGISTRY_ID="0x" + "33" * 32,
        TREASURY_ID="0x" + "44" * 32,
        SUI_RPC_URL="https://fullnode.test.sui.io",
        BIBLE_API_URL="https://bible.test",
        SIGNER_URL="https://signer.test",
        STATUS_POLL_INTERVAL_SECONDS=3600,
        CLAIM_SETTLE_DELAY_SECONDS=0,
        INITIAL_STATUS_MAX_ATTEMPTS=3,
    )


@pytest.fixture
def fake_ledger():
    return FakeLedger()


@pytest.fixture
def fake_verses():
    return FakeVerses()


@pytest.fixture
def fake_signer():
    return FakeSigner()


@pytest.fixture
def record_factory():
    return make_record


@pytest.fixture
def wallet():
    return WALLET


@pytest.fixture
def other_wallet():
    return OTHER_WALLET
