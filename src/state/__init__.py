"""
State model and signed-token helpers.

The counter state is never stored server-side: it is serialized with a random
nonce, signed (JWS HS256), handed to the client, and verified again on the
next request.
"""

from .models import State
from .codec import StatePayloadError, decode_state, encode_state
from .signer import (
    InvalidStateToken,
    StateSigner,
    StateTokenError,
    StateTokenInternalError,
)

__all__ = [
    "State",
    "StatePayloadError",
    "encode_state",
    "decode_state",
    "StateSigner",
    "StateTokenError",
    "InvalidStateToken",
    "StateTokenInternalError",
]
