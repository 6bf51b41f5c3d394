"""Contract convenience wrappers built on transaction requests.

``ContractFactory(abi, handler).at(address).transfer(to, 10)`` turns an ABI
call into a ``function`` intent such as ``transfer(address 0xabc..., uint256 10)``
and sends it through the request pipeline. View and pure functions are read
over JSON-RPC instead.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any

from hexbytes import HexBytes
from web3 import AsyncWeb3, Web3

from .exceptions import ValidationError
from .types import UriHandler

logger = logging.getLogger(__name__)

TxHandler = Callable[[dict[str, Any], UriHandler | None], Awaitable[Any]]
Web3Factory = Callable[[], AsyncWeb3]

_READ_ONLY = ("view", "pure")


def format_argument(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, bytes | bytearray | HexBytes):
        return HexBytes(value).to_0x_hex()
    if isinstance(value, list | tuple):
        return "[" + ",".join(format_argument(item) for item in value) + "]"
    return str(value)


def format_function_call(entry: Mapping[str, Any], args: Sequence[Any]) -> str:
    """Render an ABI function call as ``name(type value, ...)``."""

    inputs = entry.get("inputs", [])
    rendered = ", ".join(
        f"{item['type']} {format_argument(arg)}" for item, arg in zip(inputs, args)
    )
    return f"{entry['name']}({rendered})"


def is_read_only(entry: Mapping[str, Any]) -> bool:
    return entry.get("stateMutability") in _READ_ONLY or bool(entry.get("constant"))


class ContractFunction:
    """One named function of a deployed contract, possibly overloaded."""

    def __init__(self, contract: ContractInstance, name: str, entries: list[Mapping[str, Any]]):
        self._contract = contract
        self.name = name
        self._entries = entries

    def _match(self, args: Sequence[Any]) -> Mapping[str, Any]:
        candidates = [e for e in self._entries if len(e.get("inputs", [])) == len(args)]
        if not candidates:
            raise ValidationError(
                f"No '{self.name}' overload takes {len(args)} arguments",
                field="args",
                value=list(args),
            )
        if len(candidates) > 1:
            raise ValidationError(
                f"Ambiguous call to overloaded '{self.name}'",
                field="args",
                value=list(args),
            )
        return candidates[0]

    def __call__(
        self, *args: Any, value: int | str | None = None, uri_handler: UriHandler | None = None
    ) -> Awaitable[Any]:
        entry = self._match(args)
        if is_read_only(entry):
            return self._contract._call(entry, args)

        intent: dict[str, Any] = {
            "to": self._contract.address,
            "function": format_function_call(entry, args),
        }
        if value is not None:
            intent["value"] = value
        logger.debug("Requesting %s on %s", intent["function"], self._contract.address)
        return self._contract._tx_handler(intent, uri_handler)


class ContractInstance:
    """Contract bound to an address, exposing one attribute per ABI function."""

    def __init__(
        self,
        address: str,
        abi: Sequence[Mapping[str, Any]],
        tx_handler: TxHandler,
        web3_factory: Web3Factory | None = None,
    ) -> None:
        try:
            self.address = Web3.to_checksum_address(address)
        except ValueError as exc:
            raise ValidationError(
                "Invalid contract address", field="address", value=address
            ) from exc

        self.abi = list(abi)
        self._tx_handler = tx_handler
        self._web3_factory = web3_factory
        self._functions: dict[str, list[Mapping[str, Any]]] = {}
        for entry in self.abi:
            if entry.get("type", "function") == "function" and entry.get("name"):
                self._functions.setdefault(entry["name"], []).append(entry)

    @property
    def function_names(self) -> list[str]:
        return list(self._functions)

    def __getattr__(self, name: str) -> ContractFunction:
        functions = self.__dict__.get("_functions", {})
        if name not in functions:
            raise AttributeError(f"Contract has no function '{name}'")
        return ContractFunction(self, name, functions[name])

    async def _call(self, entry: Mapping[str, Any], args: Sequence[Any]) -> Any:
        if self._web3_factory is None:
            raise ValidationError(
                f"Reading '{entry['name']}' needs a JSON-RPC connection",
                field="web3",
            )

        web3 = self._web3_factory()
        contract = web3.eth.contract(address=self.address, abi=[entry])
        return await getattr(contract.functions, entry["name"])(*args).call()


class ContractFactory:
    """Bind an ABI to addresses of deployed contracts."""

    def __init__(
        self,
        abi: Sequence[Mapping[str, Any]],
        tx_handler: TxHandler,
        *,
        web3_factory: Web3Factory | None = None,
    ) -> None:
        self.abi = list(abi)
        self._tx_handler = tx_handler
        self._web3_factory = web3_factory

    def at(self, address: str) -> ContractInstance:
        return ContractInstance(address, self.abi, self._tx_handler, self._web3_factory)
