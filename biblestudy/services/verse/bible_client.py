"""
bible-api.com client for resolving verse references to text.
"""

from urllib.parse import quote

import httpx

from biblestudy.config import Settings, settings
from biblestudy.infrastructure.observability.logging import get_logger
from biblestudy.models.domain.claim_domain import VerseText

logger = get_logger(__name__)


class VerseLookupError(Exception):
    """Custom exception for verse lookup failures."""

    def __init__(self, message: str, reference: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.reference = reference
        self.status_code = status_code


class BibleApiClient:
    """Looks up verse text by reference, e.g. "John 3:16"."""

    def __init__(self, config: Settings | None = None, client: httpx.AsyncClient | None = None):
        self.config = config or settings
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(self.config.get_http_client_config()["timeout"])
        )

    async def close(self) -> None:
        await self._client.aclose()

    def _verse_url(self, reference: str) -> str:
        return f"{self.config.BIBLE_API_URL.rstrip('/')}/{quote(reference, safe=':')}"

    async def lookup_verse_text(self, reference: str) -> VerseText:
        """
        Fetch verse text in the configured translation.

        Raises:
            VerseLookupError: If the reference is empty or the API call fails
        """
        if not reference or not reference.strip():
            raise VerseLookupError("Empty verse reference", reference=reference)

        try:
            response = await self._client.get(
                self._verse_url(reference.strip()),
                params={"translation": self.config.VERSE_TRANSLATION},
            )
        except httpx.HTTPError as e:
            raise VerseLookupError(f"Bible API unreachable: {e}", reference=reference) from e

        if not response.is_success:
            raise VerseLookupError(
                f"Bible API error (HTTP {response.status_code})",
                reference=reference,
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise VerseLookupError(f"Invalid Bible API response: {e}", reference=reference) from e

        if not isinstance(data, dict):
            raise VerseLookupError("Bible API response is not a JSON object", reference=reference)

        text = data.get("text")
        version = data.get("translation_name")
        if not isinstance(version, str) or not version:
            version = self.config.VERSE_TRANSLATION.upper()
        return VerseText(text=text.strip() if isinstance(text, str) else "", version=version)
