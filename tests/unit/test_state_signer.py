from __future__ import annotations

import base64
import json
import string

import jwt
import pytest
from jwt.api_jws import PyJWS

from state.models import State
from state.signer import (
    InvalidStateToken,
    StateSigner,
    StateTokenInternalError,
)


SECRET_HEX = "5f" * 32
_TOKEN_ALPHABET = string.ascii_letters + string.digits + "-_."


def _b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


@pytest.fixture
def signer() -> StateSigner:
    return StateSigner.from_hex(SECRET_HEX)


@pytest.mark.parametrize(
    "state",
    [
        State.empty(),
        State(count=1, incs=1, decs=0, clicks=1),
        State(count=0, incs=1, decs=1, clicks=3),
        State(count=12345, incs=20000, decs=7655, clicks=27655),
    ],
)
def test_seal_and_open_roundtrip(signer, state):
    assert signer.open_state(signer.seal_state(state)) == state


def test_sealing_same_state_twice_gives_different_tokens(signer):
    s = State(count=4, incs=4, decs=0, clicks=4)
    assert signer.seal_state(s) != signer.seal_state(s)


def test_header_declares_only_hs256(signer):
    token = signer.sign(b"payload")
    assert jwt.get_unverified_header(token) == {"alg": "HS256"}
    assert token.count(".") == 2


def test_every_single_character_change_is_rejected(signer):
    token = signer.seal_state(State(count=5, incs=5, decs=0, clicks=5))

    checked = 0
    for i, ch in enumerate(token):
        for replacement in _TOKEN_ALPHABET:
            if replacement == ch:
                continue
            tampered = token[:i] + replacement + token[i + 1:]
            with pytest.raises(InvalidStateToken):
                signer.open_state(tampered)
            checked += 1
    assert checked == len(token) * (len(_TOKEN_ALPHABET) - 1)


def test_padding_bit_variants_of_last_character_are_rejected(signer):
    # Several spellings of the final base64url character decode to the same bytes
    token = signer.seal_state(State(count=5, incs=5, decs=0, clicks=5))
    for replacement in _TOKEN_ALPHABET:
        if replacement == token[-1]:
            continue
        with pytest.raises(InvalidStateToken):
            signer.verify(token[:-1] + replacement)


def test_wrong_key_is_rejected(signer):
    other = StateSigner.from_hex("a0" * 32)
    token = other.seal_state(State.empty())
    with pytest.raises(InvalidStateToken):
        signer.open_state(token)


def test_other_hmac_algorithm_is_rejected(signer):
    token = PyJWS().encode(b'{"count":0,"incs":0,"decs":0,"clicks":0}', bytes.fromhex(SECRET_HEX) * 2, algorithm="HS512")
    with pytest.raises(InvalidStateToken):
        signer.verify(token)


def test_none_algorithm_is_rejected(signer):
    header = _b64url(json.dumps({"alg": "none"}).encode("utf-8"))
    payload = _b64url(b'{"count":9,"incs":9,"decs":0,"clicks":9}')
    with pytest.raises(InvalidStateToken):
        signer.verify(f"{header}.{payload}.")


@pytest.mark.parametrize("token", ["", "garbage", "a.b", "a.b.c.d", "!!!.@@@.###"])
def test_malformed_tokens_are_rejected(signer, token):
    with pytest.raises(InvalidStateToken):
        signer.verify(token)


def test_verified_but_undecodable_payload_is_internal_error(signer):
    token = signer.sign(b'{"count": 1}')
    with pytest.raises(StateTokenInternalError):
        signer.open_state(token)


def test_from_hex_rejects_bad_secrets():
    with pytest.raises(ValueError):
        StateSigner.from_hex("")
    with pytest.raises(ValueError) as exc:
        StateSigner.from_hex("not-hex-secret")
    assert "not-hex-secret" not in str(exc.value)


def test_repr_does_not_leak_secret(signer):
    assert SECRET_HEX not in repr(signer)
    assert "5f5f" not in repr(signer)
