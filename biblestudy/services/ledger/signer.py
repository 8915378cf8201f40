"""
Claim submission through an external signing service.

The signer owns key custody; this client only forwards the claim arguments
and reports the digest or the signer's error message.
"""

import httpx

from biblestudy.config import Settings, settings
from biblestudy.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class ClaimSubmissionError(Exception):
    """Raised when the claim transaction was not executed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class HttpClaimSigner:
    """Posts claim_daily_reward calls to the configured signer endpoint."""

    def __init__(self, config: Settings | None = None, client: httpx.AsyncClient | None = None):
        self.config = config or settings
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(self.config.get_http_client_config()["timeout"])
        )

    async def close(self) -> None:
        await self._client.aclose()

    def _build_payload(self, identity: str, amount: int, verse_reference: bytes) -> dict:
        return {
            "sender": identity,
            "target": self.config.move_target("claim_daily_reward"),
            "objects": {
                "treasury": self.config.TREASURY_ID,
                "claims": self.config.CLAIMS_ID,
                "progress_registry": self.config.PROGRESS_REGISTRY_ID,
                "clock": self.config.CLOCK_OBJECT_ID,
            },
            "amount": str(amount),
            "verse_reference": list(verse_reference),
        }

    async def submit_claim(self, identity: str, amount: int, verse_reference: bytes) -> str:
        """
        Submit a claim and return its transaction digest.

        Raises:
            ClaimSubmissionError: If the signer is unreachable or rejects the claim
        """
        if not self.config.SIGNER_URL:
            raise ClaimSubmissionError("Signer URL not configured")

        url = f"{self.config.SIGNER_URL.rstrip('/')}/claims"
        payload = self._build_payload(identity, amount, verse_reference)

        try:
            response = await self._client.post(url, json=payload)
        except httpx.HTTPError as e:
            logger.error("Signer request failed", identity=identity, error=str(e))
            raise ClaimSubmissionError(f"Signer unreachable: {e}") from e

        try:
            data = response.json() if response.text else {}
        except ValueError:
            data = {"error": response.text[:200]}

        if not response.is_success or data.get("error"):
            message = data.get("error") or f"Signer error (HTTP {response.status_code})"
            logger.warning(
                "Claim rejected by signer",
                identity=identity,
                status_code=response.status_code,
                error=message,
            )
            raise ClaimSubmissionError(str(message), status_code=response.status_code)

        digest = data.get("digest") or "completed"
        logger.info("Claim transaction executed", identity=identity, digest=digest)
        return digest
