"""
Sui full node client for the biblestudy Move package.
Read-only queries run through sui_devInspectTransactionBlock; the clock is
read from the shared Clock object; gas balance comes from suix_getBalance.
"""

import asyncio
import base64
import itertools
import time
from typing import Any

import httpx

from biblestudy.config import Settings, settings
from biblestudy.infrastructure.observability.logging import get_logger, log_ledger_query
from biblestudy.services.ledger.transaction import (
    PureArg,
    SharedObjectArg,
    build_move_call_kind,
    pure_address,
    pure_u64,
)

logger = get_logger(__name__)

# Request retry configuration
MAX_RETRIES = 3
BACKOFF_FACTOR = 0.5
RETRY_STATUS_CODES = {429, 500, 502, 503, 504}

CLOCK_INITIAL_SHARED_VERSION = 1
SUI_COIN_TYPE = "0x2::sui::SUI"


class LedgerQueryError(Exception):
    """Custom exception for ledger query failures."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        error_code: int | None = None,
        recoverable: bool = True,
    ):
        super().__init__(message)
        self.operation = operation
        self.error_code = error_code
        self.recoverable = recoverable


class SuiLedgerClient:
    """
    JSON-RPC client implementing the ledger query contract.

    Shared object versions are looked up once per object and cached; they
    never change after an object becomes shared.
    """

    def __init__(self, config: Settings | None = None, client: httpx.AsyncClient | None = None):
        self.config = config or settings
        self._client = client or self._create_client()
        self._request_ids = itertools.count(1)
        self._shared_versions: dict[str, int] = {}

    def _create_client(self) -> httpx.AsyncClient:
        http_config = self.config.get_http_client_config()
        timeout = httpx.Timeout(http_config["timeout"])
        limits = httpx.Limits(
            max_keepalive_connections=http_config["max_keepalive_connections"],
            max_connections=http_config["max_connections"],
        )
        return httpx.AsyncClient(timeout=timeout, limits=limits)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def _post_with_retry(self, payload: dict) -> httpx.Response:
        """POST a JSON-RPC payload with retry and backoff."""
        for attempt in range(1, MAX_RETRIES + 1):
            try:
                response = await self._client.post(self.config.SUI_RPC_URL, json=payload)
                if response.status_code in RETRY_STATUS_CODES and attempt < MAX_RETRIES:
                    backoff = BACKOFF_FACTOR * (2 ** (attempt - 1))
                    logger.debug(
                        "Sui RPC retrying request",
                        attempt=attempt,
                        status_code=response.status_code,
                        backoff_seconds=backoff,
                    )
                    await asyncio.sleep(backoff)
                    continue
                return response
            except httpx.RequestError as e:
                if attempt >= MAX_RETRIES:
                    raise
                backoff = BACKOFF_FACTOR * (2 ** (attempt - 1))
                logger.debug(
                    "Sui RPC request error, retrying",
                    attempt=attempt,
                    error=str(e),
                    backoff_seconds=backoff,
                )
                await asyncio.sleep(backoff)
        raise RuntimeError("Sui RPC retry loop exhausted")

    async def _rpc(self, method: str, params: list[Any]) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._request_ids),
            "method": method,
            "params": params,
        }
        try:
            response = await self._post_with_retry(payload)
        except httpx.HTTPError as e:
            raise LedgerQueryError(f"Sui RPC unreachable: {e}", operation=method) from e

        if not response.is_success:
            raise LedgerQueryError(
                f"Sui RPC error (HTTP {response.status_code})",
                operation=method,
                error_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise LedgerQueryError(f"Invalid Sui RPC response: {e}", operation=method) from e

        if not isinstance(data, dict):
            raise LedgerQueryError("Sui RPC response is not a JSON object", operation=method)

        if data.get("error"):
            error = data["error"]
            raise LedgerQueryError(
                error.get("message", "Unknown Sui RPC error"),
                operation=method,
                error_code=error.get("code"),
            )
        return data.get("result")

    async def get_clock_time(self) -> int:
        """Current ledger time in milliseconds from the shared Clock object."""
        result = await self._rpc("sui_getObject", [self.config.CLOCK_OBJECT_ID, {"showContent": True}])
        try:
            return int(result["data"]["content"]["fields"]["timestamp_ms"])
        except (KeyError, TypeError, ValueError) as e:
            raise LedgerQueryError(
                f"Clock object has no timestamp_ms: {e}", operation="get_clock_time"
            ) from e

    async def _shared_object(self, object_id: str | None, mutable: bool = False) -> SharedObjectArg:
        if not object_id:
            raise LedgerQueryError(
                "Contract object ID not configured", operation="shared_object", recoverable=False
            )

        if object_id == self.config.CLOCK_OBJECT_ID:
            return SharedObjectArg(object_id, CLOCK_INITIAL_SHARED_VERSION, mutable)

        version = self._shared_versions.get(object_id)
        if version is None:
            result = await self._rpc("sui_getObject", [object_id, {"showOwner": True}])
            try:
                version = int(result["data"]["owner"]["Shared"]["initial_shared_version"])
            except (KeyError, TypeError, ValueError) as e:
                raise LedgerQueryError(
                    f"Object {object_id} is not a shared object",
                    operation="shared_object",
                    recoverable=False,
                ) from e
            self._shared_versions[object_id] = version
        return SharedObjectArg(object_id, version, mutable)

    async def _dev_inspect(
        self, operation: str, sender: str, inputs: list[PureArg | SharedObjectArg]
    ) -> bytes:
        """Run a read-only Move call and return the BCS bytes of its first return value."""
        start = time.time()
        try:
            try:
                tx_kind = build_move_call_kind(self.config.move_target(operation), inputs)
            except ValueError as e:
                raise LedgerQueryError(str(e), operation=operation, recoverable=False) from e
            result = await self._rpc(
                "sui_devInspectTransactionBlock",
                [sender, base64.b64encode(tx_kind).decode("ascii"), None, None],
            )
            value = self._first_return_value(operation, result)
        except LedgerQueryError as e:
            log_ledger_query(
                operation, sender, False, round((time.time() - start) * 1000, 1), error=str(e)
            )
            raise
        log_ledger_query(operation, sender, True, round((time.time() - start) * 1000, 1))
        return value

    def _first_return_value(self, operation: str, result: Any) -> bytes:
        if not isinstance(result, dict):
            raise LedgerQueryError("Empty devInspect result", operation=operation)
        if result.get("error"):
            raise LedgerQueryError(str(result["error"]), operation=operation)

        try:
            return_value = result["results"][0]["returnValues"][0]
            raw = return_value[0]
            return bytes(raw)
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise LedgerQueryError(
                f"devInspect returned no value for {operation}", operation=operation
            ) from e

    @staticmethod
    def _pure(operation: str, encode, value) -> PureArg:
        """Encode a pure argument, rejecting values the Move signature cannot hold."""
        try:
            return encode(value)
        except ValueError as e:
            raise LedgerQueryError(
                f"Invalid argument for {operation}: {e}", operation=operation, recoverable=False
            ) from e

    async def has_claimed_today(self, identity: str) -> bool:
        owner = self._pure("has_claimed_today", pure_address, identity)
        inputs = [
            await self._shared_object(self.config.CLAIMS_ID),
            await self._shared_object(self.config.CLOCK_OBJECT_ID),
            owner,
        ]
        value = await self._dev_inspect("has_claimed_today", identity, inputs)
        return len(value) > 0 and value[0] == 1

    async def get_weekly_progress(self, identity: str) -> bytes:
        owner = self._pure("get_weekly_progress", pure_address, identity)
        inputs = [
            await self._shared_object(self.config.PROGRESS_REGISTRY_ID),
            owner,
            await self._shared_object(self.config.CLOCK_OBJECT_ID),
        ]
        return await self._dev_inspect("get_weekly_progress", identity, inputs)

    async def get_progress_for_week(self, identity: str, week_number: int) -> bytes:
        owner = self._pure("get_progress_for_week", pure_address, identity)
        week = self._pure("get_progress_for_week", pure_u64, week_number)
        inputs = [
            await self._shared_object(self.config.PROGRESS_REGISTRY_ID),
            owner,
            week,
        ]
        return await self._dev_inspect("get_progress_for_week", identity, inputs)

    async def get_gas_balance(self, identity: str) -> int:
        """Total SUI balance of the wallet in MIST."""
        result = await self._rpc("suix_getBalance", [identity, SUI_COIN_TYPE])
        try:
            return int(result["totalBalance"])
        except (KeyError, TypeError, ValueError) as e:
            raise LedgerQueryError(
                f"Balance response has no totalBalance: {e}", operation="get_gas_balance"
            ) from e
