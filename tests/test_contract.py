from __future__ import annotations

from types import SimpleNamespace
from typing import Any

import pytest
from web3 import Web3

from uport_connect.contract import ContractFactory, format_argument
from uport_connect.exceptions import ValidationError

_TOKEN = "0x00000000000000000000000000000000000000aa"
_HOLDER = "0x00000000000000000000000000000000000000bb"

_TOKEN_ABI = [
    {
        "type": "function",
        "name": "transfer",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "to", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
    {
        "type": "function",
        "name": "balanceOf",
        "stateMutability": "view",
        "inputs": [{"name": "owner", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "type": "function",
        "name": "setFlags",
        "constant": False,
        "inputs": [
            {"name": "enabled", "type": "bool"},
            {"name": "tag", "type": "bytes32"},
            {"name": "ids", "type": "uint8[]"},
        ],
        "outputs": [],
    },
    {"type": "event", "name": "Transfer", "inputs": []},
]


class RecordingTxHandler:
    def __init__(self) -> None:
        self.calls: list[tuple[dict[str, Any], Any]] = []

    async def __call__(self, intent: dict[str, Any], uri_handler: Any = None) -> str:
        self.calls.append((intent, uri_handler))
        return "0xtxhash"


class DummyCall:
    def __init__(self, args: tuple[Any, ...], calls: list[tuple[Any, ...]]) -> None:
        self._args = args
        self._calls = calls

    async def call(self) -> int:
        self._calls.append(self._args)
        return 42


class DummyWeb3:
    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []
        self.contracts: list[tuple[str, list[Any]]] = []
        self.eth = SimpleNamespace(contract=self._contract)

    def _contract(self, address: str, abi: list[Any]) -> SimpleNamespace:
        self.contracts.append((address, abi))
        return SimpleNamespace(
            functions=SimpleNamespace(balanceOf=lambda *args: DummyCall(args, self.calls))
        )


@pytest.mark.asyncio
async def test_transaction_call_builds_function_intent() -> None:
    handler = RecordingTxHandler()
    token = ContractFactory(_TOKEN_ABI, handler).at(_TOKEN)
    chooser = object()

    result = await token.transfer(_HOLDER, 10, value="0x1", uri_handler=chooser)

    assert result == "0xtxhash"
    intent, uri_handler = handler.calls[0]
    assert intent == {
        "to": Web3.to_checksum_address(_TOKEN),
        "function": f"transfer(address {_HOLDER}, uint256 10)",
        "value": "0x1",
    }
    assert uri_handler is chooser


@pytest.mark.asyncio
async def test_arguments_are_rendered_for_the_signing_app() -> None:
    handler = RecordingTxHandler()
    contract = ContractFactory(_TOKEN_ABI, handler).at(_TOKEN)

    await contract.setFlags(True, b"\x01\x02", [1, 2])

    intent, _ = handler.calls[0]
    assert intent["function"] == "setFlags(bool true, bytes32 0x0102, uint8[] [1,2])"
    assert "value" not in intent


@pytest.mark.asyncio
async def test_view_call_goes_through_web3() -> None:
    handler = RecordingTxHandler()
    web3 = DummyWeb3()
    token = ContractFactory(_TOKEN_ABI, handler, web3_factory=lambda: web3).at(_TOKEN)

    balance = await token.balanceOf(_HOLDER)

    assert balance == 42
    assert web3.calls == [(_HOLDER,)]
    assert web3.contracts[0][1][0]["name"] == "balanceOf"
    assert handler.calls == []


@pytest.mark.asyncio
async def test_view_call_without_web3_raises() -> None:
    token = ContractFactory(_TOKEN_ABI, RecordingTxHandler()).at(_TOKEN)

    with pytest.raises(ValidationError):
        await token.balanceOf(_HOLDER)


def test_argument_count_mismatch_raises() -> None:
    token = ContractFactory(_TOKEN_ABI, RecordingTxHandler()).at(_TOKEN)

    with pytest.raises(ValidationError) as excinfo:
        token.transfer(_HOLDER)

    assert excinfo.value.field == "args"


def test_unknown_function_and_events_are_not_exposed() -> None:
    token = ContractFactory(_TOKEN_ABI, RecordingTxHandler()).at(_TOKEN)

    assert token.function_names == ["transfer", "balanceOf", "setFlags"]
    with pytest.raises(AttributeError):
        token.Transfer
    with pytest.raises(AttributeError):
        token.approve


def test_invalid_address_raises() -> None:
    with pytest.raises(ValidationError) as excinfo:
        ContractFactory(_TOKEN_ABI, RecordingTxHandler()).at("0x1234")
    assert excinfo.value.field == "address"


def test_format_argument_nested_lists() -> None:
    assert format_argument([[1, 2], [False]]) == "[[1,2],[false]]"
    assert format_argument(bytearray(b"\xff")) == "0xff"
