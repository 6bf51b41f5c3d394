"""Request URI construction for the me.uport scheme.

A call intent is serialised as::

    me.uport:<to>?value=<int>&function=<sig>&label=<app>&callback_url=<url>&client_id=<id>

Every parameter is optional and emitted only when its source field is truthy.
``bytecode`` (taken from ``data``) stands in for ``function`` when no function
signature is given.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from eth_typing import HexStr
from web3 import Web3

from .constants import APP_PARAMETERS, URI_COMPONENT_SAFE, URI_SCHEME
from .exceptions import ValidationError
from .types import CallIntent


def validate_intent(intent: CallIntent) -> None:
    """Reject intents that cannot be encoded, before anything is dispatched."""

    if not intent.get("to"):
        raise ValidationError(
            "Contract creation is not supported by uport-connect",
            field="to",
            value=intent.get("to"),
        )

    if intent.get("value"):
        encode_value(intent["value"])


def encode_value(value: Any) -> int:
    """Return a transaction value as a base-10 integer.

    Strings are read as hexadecimal (with or without ``0x``); integers are
    taken to be in wei already.
    """

    if isinstance(value, bool):
        raise ValidationError("Transaction value must be hex or int", field="value", value=value)

    if isinstance(value, int):
        return value

    if isinstance(value, str):
        try:
            return Web3.to_int(hexstr=HexStr(value))
        except ValueError as exc:
            raise ValidationError(
                "Transaction value is not a hex string",
                field="value",
                value=value,
                details={"error": str(exc)},
            ) from exc

    raise ValidationError("Transaction value must be hex or int", field="value", value=value)


def encode_component(value: Any) -> str:
    """Percent-encode a single parameter value like encodeURIComponent."""

    return quote(str(value), safe=URI_COMPONENT_SAFE)


def request_parameters(intent: CallIntent) -> list[tuple[str, Any]]:
    """Return the ordered ``(key, value)`` pairs of a request URI."""

    params: list[tuple[str, Any]] = []

    if intent.get("value"):
        params.append(("value", encode_value(intent["value"])))

    # A function signature takes precedence over raw call data.
    if intent.get("function"):
        params.append(("function", intent["function"]))
    elif intent.get("data"):
        params.append(("bytecode", intent["data"]))

    for key in APP_PARAMETERS:
        if intent.get(key):
            params.append((key, intent[key]))

    return params


def encode_request_uri(intent: CallIntent) -> str:
    """Serialise a call intent into a ``me.uport:`` request URI."""

    validate_intent(intent)

    query = "&".join(
        f"{key}={encode_component(value)}" for key, value in request_parameters(intent)
    )
    return f"{URI_SCHEME}:{intent['to']}?{query}"
