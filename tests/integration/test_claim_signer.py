import json

import pytest

from biblestudy.services.ledger.signer import ClaimSubmissionError, HttpClaimSigner


@pytest.mark.asyncio
async def test_submit_claim_returns_digest(httpx_mock, test_settings, wallet):
    httpx_mock.add_response(method="POST", url="https://signer.test/claims", json={"digest": "9xYz"})
    signer = HttpClaimSigner(test_settings)

    digest = await signer.submit_claim(wallet, 15_000_000, b"John 3:16")
    await signer.close()

    assert digest == "9xYz"
    body = json.loads(httpx_mock.get_requests()[0].content)
    assert body["sender"] == wallet
    assert body["target"] == test_settings.move_target("claim_daily_reward")
    assert body["amount"] == "15000000"
    assert bytes(body["verse_reference"]) == b"John 3:16"
    assert body["objects"]["clock"] == "0x6"


@pytest.mark.asyncio
async def test_submit_claim_rejection_carries_message(httpx_mock, test_settings, wallet):
    httpx_mock.add_response(
        method="POST",
        url="https://signer.test/claims",
        status_code=400,
        json={"error": "MoveAbort(EAlreadyClaimedToday) Abort(1)"},
    )
    signer = HttpClaimSigner(test_settings)

    with pytest.raises(ClaimSubmissionError) as exc:
        await signer.submit_claim(wallet, 10_000_000, b"John 3:16")
    await signer.close()

    assert "EAlreadyClaimedToday" in exc.value.message
    assert exc.value.status_code == 400


@pytest.mark.asyncio
async def test_submit_claim_without_signer_url(test_settings, wallet):
    test_settings.SIGNER_URL = None
    signer = HttpClaimSigner(test_settings)

    with pytest.raises(ClaimSubmissionError):
        await signer.submit_claim(wallet, 10_000_000, b"John 3:16")
    await signer.close()
