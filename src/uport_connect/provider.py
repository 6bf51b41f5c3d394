"""Web3 provider that routes account and signing calls through uPort."""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from web3 import AsyncHTTPProvider
from web3.providers.async_base import AsyncBaseProvider
from web3.types import RPCEndpoint, RPCResponse

from .exceptions import ValidationError

logger = logging.getLogger(__name__)

_ACCOUNT_METHODS = ("eth_accounts", "eth_requestAccounts")


class UportProvider(AsyncBaseProvider):
    """Answer account and transaction RPCs via uPort, forward everything else.

    The account address is requested from the signing app once and cached for
    the lifetime of the provider.
    """

    def __init__(
        self,
        request_address: Callable[[], Awaitable[str]],
        send_transaction: Callable[[dict[str, Any]], Awaitable[Any]],
        rpc_url: str,
        *,
        fallback: AsyncBaseProvider | None = None,
    ) -> None:
        super().__init__()
        self.rpc_url = rpc_url
        self._request_address = request_address
        self._send_transaction = send_transaction
        self._fallback = fallback or AsyncHTTPProvider(rpc_url)
        self._address: str | None = None
        self._address_lock = asyncio.Lock()
        self._ids = itertools.count(1)

    async def address(self) -> str:
        async with self._address_lock:
            if self._address is None:
                self._address = await self._request_address()
                logger.debug("Cached uPort address %s", self._address)
            return self._address

    async def make_request(self, method: RPCEndpoint, params: Any) -> RPCResponse:
        if method == "eth_coinbase":
            result: Any = await self.address()
        elif method in _ACCOUNT_METHODS:
            result = [await self.address()]
        elif method == "eth_sendTransaction":
            if not params:
                raise ValidationError("eth_sendTransaction needs a transaction", field="params")
            result = await self._send_transaction(dict(params[0]))
        else:
            return await self._fallback.make_request(method, params)

        # make_request does not receive the caller's id.
        return {"jsonrpc": "2.0", "id": next(self._ids), "result": result}

    async def is_connected(self, show_traceback: bool = False) -> bool:
        return await self._fallback.is_connected(show_traceback)
