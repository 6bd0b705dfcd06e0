from __future__ import annotations

import json
from uuid import uuid4

from pydantic import ValidationError

from .models import State


NONCE_FIELD = "nonce"


class StatePayloadError(ValueError):
    """Raised when a token payload cannot be parsed back into a State."""


def encode_state(state: State) -> bytes:
    """Serialize State to compact JSON with a fresh random nonce.

    The nonce makes two encodings of the same state differ, so the signed
    token is never a stable fingerprint of the counter value.
    """
    raw = state.model_dump()
    raw[NONCE_FIELD] = uuid4().hex
    return json.dumps(raw, separators=(",", ":"), sort_keys=True).encode("utf-8")


def decode_state(data: bytes) -> State:
    """Parse a payload produced by `encode_state`, dropping the nonce."""
    try:
        raw = json.loads(data.decode("utf-8"))
    except ValueError as ex:
        raise StatePayloadError("State payload is not valid JSON") from ex
    if not isinstance(raw, dict):
        raise StatePayloadError("State payload must be a JSON object")
    raw.pop(NONCE_FIELD, None)
    try:
        return State.model_validate(raw)
    except ValidationError as ex:
        raise StatePayloadError("State payload is missing or has invalid fields") from ex


__all__ = [
    "StatePayloadError",
    "encode_state",
    "decode_state",
]
