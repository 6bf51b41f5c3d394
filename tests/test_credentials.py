"""Tests for credential token signing and verification."""

from __future__ import annotations

import time

import jwt
import pytest
from eth_account import Account
from jwt.utils import base64url_decode, base64url_encode

from uport_connect.credentials import Credentials, issuer_address
from uport_connect.exceptions import ValidationError, VerificationError

_APP_KEY = "0x" + "11" * 32
_USER_KEY = "0x" + "22" * 32
_NOW = int(time.time())


def _clock() -> float:
    return float(_NOW)


@pytest.fixture
def user() -> Credentials:
    return Credentials(signer=Account.from_key(_USER_KEY), clock=_clock)


@pytest.fixture
def app() -> Credentials:
    return Credentials(audience="0xapp", clock=_clock)


@pytest.mark.asyncio
async def test_receive_returns_profile_of_signer(user: Credentials, app: Credentials) -> None:
    token = user.sign({"name": "Alice", "aud": "0xapp"}, expires_in=600)

    profile = await app.receive(token)

    assert profile.address == Account.from_key(_USER_KEY).address
    assert profile.claims["name"] == "Alice"
    assert profile.claims["iat"] == _NOW
    assert profile.claims["exp"] == _NOW + 600
    assert profile.issuer == f"did:ethr:{profile.address}"
    assert profile.token == token


@pytest.mark.asyncio
async def test_signature_from_other_key_is_rejected(app: Credentials) -> None:
    impostor = Credentials(signer=Account.from_key(_APP_KEY), clock=_clock)
    victim = Account.from_key(_USER_KEY).address
    token = impostor.sign({"iss": f"did:ethr:{victim}"})

    with pytest.raises(VerificationError) as excinfo:
        await app.receive(token)

    assert excinfo.value.reason == "signature"


@pytest.mark.asyncio
async def test_tampered_payload_is_rejected(user: Credentials, app: Credentials) -> None:
    header, _, signature = user.sign({"name": "Alice"}).split(".")
    forged = base64url_encode(
        b'{"iss":"did:ethr:%s","name":"Mallory"}' % Account.from_key(_USER_KEY).address.encode()
    ).decode()

    with pytest.raises(VerificationError) as excinfo:
        await app.receive(f"{header}.{forged}.{signature}")

    assert excinfo.value.reason == "signature"


def test_ethereum_style_recovery_id_is_accepted(user: Credentials, app: Credentials) -> None:
    header, payload, signature = user.sign({}).split(".")
    raw = bytearray(base64url_decode(signature))
    raw[64] += 27

    claims = app.verify(f"{header}.{payload}.{base64url_encode(bytes(raw)).decode()}")

    assert issuer_address(claims) == Account.from_key(_USER_KEY).address


def test_expired_token_is_rejected(app: Credentials) -> None:
    earlier = Credentials(signer=Account.from_key(_USER_KEY), clock=lambda: float(_NOW - 3600))
    token = earlier.sign({}, expires_in=60)

    with pytest.raises(VerificationError) as excinfo:
        app.verify(token)

    assert excinfo.value.reason == "expired"


def test_audience_mismatch_is_rejected(user: Credentials, app: Credentials) -> None:
    token = user.sign({"aud": ["0xother"]})

    with pytest.raises(VerificationError) as excinfo:
        app.verify(token)

    assert excinfo.value.reason == "audience"


def test_token_without_audience_is_accepted(user: Credentials, app: Credentials) -> None:
    assert app.verify(user.sign({}))["iss"].startswith("did:ethr:")


def test_unsupported_algorithm_is_rejected(user: Credentials, app: Credentials) -> None:
    _, payload, signature = user.sign({}).split(".")
    header = base64url_encode(b'{"typ":"JWT","alg":"HS256"}').decode()

    with pytest.raises(VerificationError) as excinfo:
        app.verify(f"{header}.{payload}.{signature}")

    assert excinfo.value.reason == "algorithm"


@pytest.mark.parametrize("token", ["not-a-jwt", "a.b", "!!!.###.$$$"])
def test_malformed_token_is_rejected(app: Credentials, token: str) -> None:
    with pytest.raises(VerificationError) as excinfo:
        app.verify(token)
    assert excinfo.value.reason == "format"


@pytest.mark.asyncio
async def test_non_string_response_is_rejected(app: Credentials) -> None:
    with pytest.raises(VerificationError):
        await app.receive({"access_token": "x"})


def test_issuer_must_be_an_address() -> None:
    with pytest.raises(VerificationError) as excinfo:
        issuer_address({"iss": "2ooAs8FQjDrjA9xrNdQxJQbSj5Qzr2GaLsX"})
    assert excinfo.value.reason == "issuer"


@pytest.mark.asyncio
async def test_custom_verifier_replaces_signature_check() -> None:
    seen: list[str] = []

    async def verifier(token: str) -> dict:
        seen.append(token)
        return {"address": "0x00000000000000000000000000000000000000aa", "name": "Bob"}

    profile = await Credentials(verifier=verifier).receive("opaque-token")

    assert seen == ["opaque-token"]
    assert profile.address == "0x00000000000000000000000000000000000000aa"
    assert profile.claims["name"] == "Bob"


def test_signing_requires_signer(app: Credentials) -> None:
    with pytest.raises(ValidationError) as excinfo:
        app.sign({"name": "Alice"})
    assert excinfo.value.field == "signer"


@pytest.mark.asyncio
async def test_non_numeric_expiry_is_a_verification_error(user: Credentials) -> None:
    token = user.sign({"exp": "tomorrow"})

    with pytest.raises(VerificationError) as excinfo:
        await Credentials().receive(token)

    assert excinfo.value.reason == "format"


def test_token_header_names_recoverable_algorithm(user: Credentials) -> None:
    header = jwt.get_unverified_header(user.sign({}))

    assert header == {"alg": "ES256K-R", "typ": "JWT"}
