from __future__ import annotations

import binascii

import jwt
from jwt.api_jws import PyJWS
from jwt.utils import base64url_decode, base64url_encode

from .codec import StatePayloadError, decode_state, encode_state
from .models import State


# The only accepted algorithm; tokens declaring anything else are rejected
ALGORITHM = "HS256"


class StateTokenError(RuntimeError):
    """Base error for signed state tokens."""


class InvalidStateToken(StateTokenError):
    """Token failed structural or signature verification.

    Raised for every verification failure (bad signature, corrupt segments,
    unexpected algorithm) so callers cannot tell which check rejected it.
    """


class StateTokenInternalError(StateTokenError):
    """Unexpected failure while verifying or decoding a token."""


def _is_canonical(token: str) -> bool:
    """True if every segment is strict base64url (no stray padding bits).

    Lenient decoders map several spellings of the last character to the same
    bytes, which would let an altered token still verify.
    """
    segments = token.split(".")
    if len(segments) != 3:
        return False
    for seg in segments:
        try:
            if base64url_encode(base64url_decode(seg)).decode("ascii") != seg:
                return False
        except (binascii.Error, ValueError):
            return False
    return True


def _secret_from_hex(hex_secret: str) -> bytes:
    """Decode a hex-encoded signing key.

    The error message never includes the offending value.
    """
    if not hex_secret or not isinstance(hex_secret, str):
        raise ValueError("signing secret is required")
    try:
        secret = bytes.fromhex(hex_secret.strip())
    except ValueError as ex:
        raise ValueError("signing secret must be hex-encoded") from ex
    if not secret:
        raise ValueError("signing secret is required")
    return secret


class StateSigner:
    """
    Compact JWS (HS256) signer/verifier for state payloads.

    - The secret is injected at construction and fixed for the instance lifetime.
    - The protected header is exactly {"alg": "HS256"}; no algorithm negotiation.
    - `verify()` raises `InvalidStateToken` for any integrity failure and
      `StateTokenInternalError` for anything unexpected.
    """

    def __init__(self, secret: bytes) -> None:
        if not secret:
            raise ValueError("signing secret is required")
        self._secret = bytes(secret)
        self._jws = PyJWS(algorithms=[ALGORITHM])

    @classmethod
    def from_hex(cls, hex_secret: str) -> "StateSigner":
        return cls(_secret_from_hex(hex_secret))

    def __repr__(self) -> str:
        return f"StateSigner(alg={ALGORITHM!r})"

    # -------- Raw bytes --------
    def sign(self, payload: bytes) -> str:
        return self._jws.encode(
            payload,
            self._secret,
            algorithm=ALGORITHM,
            headers={"typ": None},
        )

    def verify(self, token: str) -> bytes:
        """Verify `token` and return the signed payload bytes."""
        if not isinstance(token, str) or not token:
            raise InvalidStateToken("Invalid state token")
        if not _is_canonical(token):
            raise InvalidStateToken("Invalid state token")
        try:
            return self._jws.decode(token, self._secret, algorithms=[ALGORITHM])
        except jwt.InvalidTokenError as ex:
            raise InvalidStateToken("Invalid state token") from ex
        except (binascii.Error, UnicodeError) as ex:
            raise InvalidStateToken("Invalid state token") from ex
        except Exception as ex:
            raise StateTokenInternalError("Failed to verify state token") from ex

    # -------- State --------
    def seal_state(self, state: State) -> str:
        """Encode State with a fresh nonce and sign it."""
        return self.sign(encode_state(state))

    def open_state(self, token: str) -> State:
        """Verify a token and decode its State.

        A payload that verifies but does not decode was signed by something
        other than `seal_state`, and is reported as an internal error.
        """
        payload = self.verify(token)
        try:
            return decode_state(payload)
        except StatePayloadError as ex:
            raise StateTokenInternalError("Failed to decode verified state payload") from ex


__all__ = [
    "ALGORITHM",
    "StateSigner",
    "StateTokenError",
    "InvalidStateToken",
    "StateTokenInternalError",
]
