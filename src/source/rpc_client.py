"""JSON-RPC state source for Substrate nodes.

This module implements the StateSource protocol over HTTP.
The HTTP endpoint is used because node WebSocket endpoints cap
response sizes, which large ``state_getPairs`` results exceed.
"""

from __future__ import annotations

import itertools
from typing import Any, Mapping

import httpx

from core.constants import KEYSPACE_FAN_OUT
from core.errors import ForkSourceError
from core.logging_config import get_logger
from core.types import StatePair
from source.metadata import decode_partition_names

_LOGGER = get_logger(__name__)


class SubstrateRpcClient:
    """Async JSON-RPC 2.0 client for origin chain state queries."""

    def __init__(
        self,
        endpoint: str,
        timeout_seconds: float,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the HTTP client.

        Args:
            endpoint: HTTP JSON-RPC endpoint.
            timeout_seconds: Per-request timeout.
            transport: Optional transport override, used by tests.
        """
        self._endpoint = endpoint
        self._request_ids = itertools.count(1)
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_seconds),
            limits=httpx.Limits(
                max_connections=KEYSPACE_FAN_OUT,
                max_keepalive_connections=KEYSPACE_FAN_OUT // 4,
            ),
            transport=transport,
        )
        _LOGGER.info("rpc_client_created", endpoint=endpoint)

    async def get_partition_names(self) -> list[str]:
        """Return storage-bearing pallet names from runtime metadata."""
        metadata_hex = await self.call("state_getMetadata", [])
        if not isinstance(metadata_hex, str):
            raise ForkSourceError("state_getMetadata returned a non-hex result.")
        return decode_partition_names(metadata_hex)

    async def get_pairs(self, prefix: str, at: str) -> list[StatePair]:
        """Return all storage pairs under prefix at block hash ``at``."""
        result = await self.call("state_getPairs", [prefix, at])
        if not isinstance(result, list):
            raise ForkSourceError(f"state_getPairs returned a non-list result for {prefix}.")
        return [_parse_pair(item, prefix) for item in result]

    async def get_block_hash(self, block_number: int | None = None) -> str:
        """Return the hash of a block height, or of the chain head when omitted."""
        params: list[Any] = [] if block_number is None else [block_number]
        block_hash = await self.call("chain_getBlockHash", params)
        if not isinstance(block_hash, str):
            raise ForkSourceError(f"Block {block_number} not found on the origin chain.")
        return block_hash

    async def call(self, method: str, params: list[Any]) -> Any:
        """Issue one JSON-RPC request and return its result.

        Args:
            method: RPC method name.
            params: Positional parameters.

        Returns:
            The ``result`` member of the response.

        Raises:
            ForkSourceError: For transport failures or RPC error objects.
        """
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._request_ids),
            "method": method,
            "params": params,
        }
        try:
            response = await self._client.post(self._endpoint, json=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as error:
            raise ForkSourceError(f"RPC {method} to {self._endpoint} failed: {error}") from error
        except ValueError as error:
            raise ForkSourceError(f"RPC {method} returned invalid JSON: {error}") from error
        if not isinstance(body, dict):
            raise ForkSourceError(f"RPC {method} returned an unexpected payload.")
        if "error" in body:
            rpc_error = body["error"] or {}
            if not isinstance(rpc_error, Mapping):
                rpc_error = {"message": rpc_error}
            raise ForkSourceError(
                f"RPC {method} error {rpc_error.get('code')}: {rpc_error.get('message')}"
            )
        return body.get("result")

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()


def _parse_pair(item: Any, prefix: str) -> StatePair:
    if not isinstance(item, list) or len(item) != 2:
        raise ForkSourceError(f"state_getPairs returned a malformed pair under {prefix}.")
    key, value = item
    return str(key), str(value)
