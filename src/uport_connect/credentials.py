"""Signed credential tokens.

Responses to credential requests are JWTs signed with a recoverable secp256k1
signature (``ES256K-R``): ``r || s || recovery`` over ``sha256(header.payload)``.
The issuer (``iss``) is an Ethereum address, optionally wrapped as
``did:ethr:<address>``, and must equal the address recovered from the
signature. Token parsing and claim checks are done by PyJWT; this module only
registers the ``ES256K-R`` algorithm with it.
"""

from __future__ import annotations

import hashlib
import inspect
import logging
import time
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any, NoReturn

import jwt
from eth_account.signers.local import LocalAccount
from eth_keys import keys
from eth_keys.exceptions import BadSignature
from eth_keys.exceptions import ValidationError as KeyValidationError
from jwt.algorithms import Algorithm
from jwt.exceptions import InvalidKeyError
from web3 import Web3

from .exceptions import ValidationError, VerificationError
from .types import Profile

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "ES256K-R"
DID_ETHR_PREFIX = "did:ethr:"

Verifier = Callable[[str], Mapping[str, Any] | Awaitable[Mapping[str, Any]]]

# Most specific first: InvalidSignatureError is a DecodeError.
_JWT_ERROR_REASONS: tuple[tuple[type[jwt.PyJWTError], str], ...] = (
    (jwt.ExpiredSignatureError, "expired"),
    (jwt.ImmatureSignatureError, "immature"),
    (jwt.InvalidAudienceError, "audience"),
    (jwt.InvalidAlgorithmError, "algorithm"),
    (jwt.InvalidSignatureError, "signature"),
    (jwt.DecodeError, "format"),
    (jwt.InvalidTokenError, "claims"),
)


def issuer_address(claims: Mapping[str, Any]) -> str:
    """Return the checksum address named by the ``iss`` claim."""

    issuer = claims.get("iss")
    if not isinstance(issuer, str):
        raise VerificationError("Token has no issuer", reason="issuer")

    candidate = issuer[len(DID_ETHR_PREFIX) :] if issuer.startswith(DID_ETHR_PREFIX) else issuer
    if not Web3.is_address(candidate):
        raise VerificationError(
            "Token issuer is not an Ethereum identity", reason="issuer", details={"iss": issuer}
        )
    return Web3.to_checksum_address(candidate)


def recover_address(signing_input: bytes, signature: bytes) -> str:
    """Recover the signer address of an ES256K-R signature."""

    if len(signature) != 65:
        raise VerificationError("Signature must be 65 bytes", reason="signature")

    # Some signers emit Ethereum-style recovery ids (27/28).
    recovery = signature[64] - 27 if signature[64] >= 27 else signature[64]
    digest = hashlib.sha256(signing_input).digest()

    try:
        sig = keys.Signature(signature_bytes=signature[:64] + bytes([recovery]))
        public_key = sig.recover_public_key_from_msg_hash(digest)
    except (BadSignature, KeyValidationError, ValueError) as exc:
        raise VerificationError(
            "Unable to recover signer from signature",
            reason="signature",
            details={"error": str(exc)},
        ) from exc

    return public_key.to_checksum_address()


class RecoverableES256K(Algorithm):
    """PyJWT algorithm for ``ES256K-R``.

    Signing keys are ``LocalAccount`` or ``eth_keys`` private keys; the
    verification key is the expected signer address.
    """

    def prepare_key(self, key: Any) -> Any:
        if isinstance(key, keys.PrivateKey):
            return key
        if isinstance(key, LocalAccount):
            return keys.PrivateKey(bytes(key.key))
        if isinstance(key, str) and Web3.is_address(key):
            return Web3.to_checksum_address(key)
        raise InvalidKeyError("ES256K-R needs a private key or an Ethereum address")

    def sign(self, msg: bytes, key: keys.PrivateKey) -> bytes:
        return key.sign_msg_hash(hashlib.sha256(msg).digest()).to_bytes()

    def verify(self, msg: bytes, key: str, sig: bytes) -> bool:
        try:
            return recover_address(msg, sig) == key
        except VerificationError:
            return False

    @staticmethod
    def to_jwk(key_obj: Any, as_dict: bool = False) -> NoReturn:
        raise NotImplementedError("ES256K-R keys have no JWK form")

    @staticmethod
    def from_jwk(jwk: str | dict[str, Any]) -> NoReturn:
        raise NotImplementedError("ES256K-R keys have no JWK form")


jwt.register_algorithm(JWT_ALGORITHM, RecoverableES256K())


def _verification_error(exc: jwt.PyJWTError) -> VerificationError:
    reason = next(
        (reason for error_type, reason in _JWT_ERROR_REASONS if isinstance(exc, error_type)),
        "format",
    )
    return VerificationError(f"Invalid token: {exc}", reason=reason, details={"error": str(exc)})


@dataclass(frozen=True)
class CredentialSettings:
    signer: LocalAccount | None = None
    audience: str | None = None


class Credentials:
    """Sign and verify credential tokens exchanged with the signing app.

    ``clock`` stamps ``iat``/``exp`` on issued tokens; expiry of received
    tokens is checked by PyJWT against the current time.
    """

    def __init__(
        self,
        signer: LocalAccount | None = None,
        *,
        audience: str | None = None,
        verifier: Verifier | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.settings = CredentialSettings(signer=signer, audience=audience)
        self._verifier = verifier
        self._clock = clock

    @property
    def issuer(self) -> str:
        signer = self._require_signer()
        return f"{DID_ETHR_PREFIX}{signer.address}"

    def _require_signer(self) -> LocalAccount:
        if self.settings.signer is None:
            raise ValidationError("Credentials were created without a signer", field="signer")
        return self.settings.signer

    # ------------------------------------------------------------------
    # Signing
    # ------------------------------------------------------------------
    def sign(self, claims: Mapping[str, Any], *, expires_in: int | None = None) -> str:
        """Return a JWT carrying ``claims`` signed by the configured signer."""

        signer = self._require_signer()
        issued_at = int(self._clock())
        payload: dict[str, Any] = {"iat": issued_at, "iss": self.issuer}
        payload.update(claims)
        if expires_in is not None:
            payload["exp"] = issued_at + expires_in

        return jwt.encode(payload, signer, algorithm=JWT_ALGORITHM, headers={"typ": "JWT"})

    # ------------------------------------------------------------------
    # Verification
    # ------------------------------------------------------------------
    def verify(self, token: str) -> dict[str, Any]:
        """Check a token's signature and claims and return its payload."""

        try:
            unverified = jwt.decode(token, options={"verify_signature": False})
        except jwt.PyJWTError as exc:
            raise _verification_error(exc) from exc

        expected = issuer_address(unverified)

        # A token without ``aud`` is accepted by any app.
        audience = self.settings.audience if "aud" in unverified else None
        try:
            return jwt.decode(
                token,
                expected,
                algorithms=[JWT_ALGORITHM],
                audience=audience,
                options={"verify_exp": True, "verify_aud": audience is not None},
            )
        except jwt.PyJWTError as exc:
            raise _verification_error(exc) from exc

    async def receive(self, response: Any) -> Profile:
        """Verify a posted credential response and return the sender's profile."""

        if not isinstance(response, str):
            raise VerificationError("Credential response is not a token", reason="format")

        if self._verifier is not None:
            claims = self._verifier(response)
            if inspect.isawaitable(claims):
                claims = await claims
            claims = dict(claims)
            address = claims.get("address") or issuer_address(claims)
        else:
            claims = self.verify(response)
            address = issuer_address(claims)

        logger.debug("Received credentials for %s", address)
        return Profile(address=address, claims=claims, token=response)
