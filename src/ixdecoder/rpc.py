"""
Async Solana JSON-RPC client.

Only the calls the decoder needs: raw account data for a transaction account.
"""

import asyncio
import base64
import binascii
import logging
from typing import Any, Optional

import aiohttp

from .errors import AccountFetchError

logger = logging.getLogger(__name__)


class SolanaRpcClient:
    """
    Simple async Solana RPC client.

    A new HTTP session is opened per call, so one client can be shared by
    decoders running on different event loops.
    """

    def __init__(self, rpc_url: str, timeout: float = 30.0):
        """
        Initialize RPC client.

        Args:
            rpc_url: RPC endpoint URL
            timeout: Total request timeout in seconds
        """
        self.rpc_url = rpc_url
        self.timeout = timeout
        self._request_id = 0

    async def _call(self, method: str, params: list = None) -> Any:
        """Make an RPC call."""
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params or [],
        }

        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(
                    self.rpc_url,
                    json=payload,
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                ) as response:
                    result = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise AccountFetchError(f"{method} request to {self.rpc_url} failed: {e}") from e

        if not isinstance(result, dict):
            raise AccountFetchError(f"Malformed {method} response from {self.rpc_url}: {result!r}")
        if "error" in result:
            raise AccountFetchError(f"RPC error: {result['error']}")
        return result.get("result")

    async def get_account_info(self, pubkey: str) -> Optional[dict]:
        result = await self._call("getAccountInfo", [pubkey, {"encoding": "base64"}])
        if not result:
            return None
        if not isinstance(result, dict):
            raise AccountFetchError(f"Malformed getAccountInfo result for {pubkey}: {result!r}")
        return result.get("value")

    async def get_account_data(self, address: str) -> Optional[bytes]:
        """Raw account bytes, or None when the account does not exist."""
        info = await self.get_account_info(address)
        if info is None:
            logger.debug("Account %s not found", address)
            return None

        if not isinstance(info, dict):
            raise AccountFetchError(f"Malformed account info for {address}: {info!r}")
        data = info.get("data")
        if not isinstance(data, list) or not data:
            raise AccountFetchError(f"Unexpected account data encoding for {address}")
        try:
            return base64.b64decode(data[0])
        except (binascii.Error, ValueError) as e:
            raise AccountFetchError(f"Invalid base64 account data for {address}: {e}") from e
