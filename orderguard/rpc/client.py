"""
Minimal async JSON-RPC client for read-only ``eth_call`` traffic.

Transport errors from httpx and JSON-RPC error objects are raised to the
caller untouched; there are no retries here.
"""

import itertools
from typing import Any, List, Optional

import httpx
from eth_utils import decode_hex, encode_hex

from ..exceptions import RpcError
from ..exchange.oracles import BlockTag
from ..logger import get_logger

logger = get_logger(__name__)

DEFAULT_BLOCK_TAG = "latest"


def format_block_tag(block_tag: Optional[BlockTag]) -> str:
    """Block numbers go over the wire as hex quantities."""
    if block_tag is None:
        return DEFAULT_BLOCK_TAG
    if isinstance(block_tag, int):
        if block_tag < 0:
            raise ValueError(f"Block number must be non-negative, got {block_tag}")
        return hex(block_tag)
    return block_tag


class JsonRpcClient:
    """
    Thin wrapper over an ``httpx.AsyncClient`` owned by the caller.

    The caller also owns timeouts: configure them on the httpx client.
    """

    def __init__(self, url: str, client: httpx.AsyncClient):
        self.url = url
        self._client = client
        self._ids = itertools.count(1)

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client

    async def call(self, method: str, params: List[Any]) -> Any:
        """
        Issue one JSON-RPC request.

        Raises:
            RpcError: If the node answers with an error object
            httpx.HTTPError: On transport failure or non-2xx status
        """
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }
        response = await self._client.post(self.url, json=payload)
        response.raise_for_status()
        body = response.json()

        error = body.get("error")
        if error:
            logger.warning(f"[RPC] {method} failed: {error}")
            raise RpcError(error.get("message", "unknown error"), error.get("code", 0), error.get("data"))

        return body.get("result")

    async def eth_call(self, to: str, data: bytes, block_tag: Optional[BlockTag] = None) -> bytes:
        """Run a read-only contract call and return the raw return data."""
        result = await self.call(
            "eth_call",
            [{"to": to, "data": encode_hex(data)}, format_block_tag(block_tag)],
        )
        return decode_hex(result)
