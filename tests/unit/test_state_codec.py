from __future__ import annotations

import json

import pytest

from state.codec import StatePayloadError, decode_state, encode_state
from state.models import State


def test_encode_embeds_fields_and_nonce():
    raw = json.loads(encode_state(State(count=3, incs=5, decs=2, clicks=7)))
    assert raw["count"] == 3
    assert raw["incs"] == 5
    assert raw["decs"] == 2
    assert raw["clicks"] == 7
    assert isinstance(raw["nonce"], str) and len(raw["nonce"]) == 32


def test_encode_is_not_deterministic():
    s = State(count=1, incs=1, decs=0, clicks=1)
    a, b = encode_state(s), encode_state(s)
    assert a != b
    assert decode_state(a) == decode_state(b) == s


def test_decode_drops_nonce_and_unknown_fields():
    data = json.dumps(
        {"count": 2, "incs": 2, "decs": 0, "clicks": 2, "nonce": "x", "theme": "dark"}
    ).encode("utf-8")
    state = decode_state(data)
    assert state == State(count=2, incs=2, decs=0, clicks=2)
    assert set(state.model_dump()) == {"count", "incs", "decs", "clicks"}


def test_decode_missing_field_raises():
    data = json.dumps({"count": 2, "incs": 2, "decs": 0, "nonce": "x"}).encode("utf-8")
    with pytest.raises(StatePayloadError):
        decode_state(data)


def test_decode_negative_field_raises():
    data = json.dumps({"count": -1, "incs": 0, "decs": 1, "clicks": 1}).encode("utf-8")
    with pytest.raises(StatePayloadError):
        decode_state(data)


@pytest.mark.parametrize("data", [b"not json", b"[1, 2, 3]", b"\xff\xfe"])
def test_decode_garbage_raises(data):
    with pytest.raises(StatePayloadError):
        decode_state(data)


def test_empty_state_is_all_zero():
    assert State.empty().model_dump() == {"count": 0, "incs": 0, "decs": 0, "clicks": 0}
