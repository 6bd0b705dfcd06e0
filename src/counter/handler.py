from __future__ import annotations

import base64
import binascii
import json
import logging
import os
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from common.actions import apply_action, resolve_action
from common.frame import FrameContext, render_frame
from counter.config import FrameConfig
from state.models import State
from state.signer import InvalidStateToken


logger = logging.getLogger(__name__)
logger.setLevel(os.environ.get("LOG_LEVEL") or "INFO")


class InvalidRequest(ValueError):
    """Request body is not a JSON object of the expected shape."""


class UntrustedData(BaseModel):
    """Client-reported frame action fields; nothing here is authenticated."""

    model_config = ConfigDict(populate_by_name=True)

    button_index: Optional[int] = Field(default=None, alias="buttonIndex")
    state: Optional[str] = None
    fid: Optional[int] = None
    url: Optional[str] = None
    message_hash: Optional[str] = Field(default=None, alias="messageHash")
    timestamp: Optional[int] = None
    network: Optional[int] = None
    input_text: Optional[str] = Field(default=None, alias="inputText")


class FrameActionPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    untrusted_data: UntrustedData = Field(default_factory=UntrustedData, alias="untrustedData")


_CONFIG: Optional[FrameConfig] = None


def _get_config() -> FrameConfig:
    """Load configuration on first use and keep it for the process lifetime."""
    global _CONFIG
    if _CONFIG is None:
        _CONFIG = FrameConfig.from_env()
    return _CONFIG


def _text_response(status: int, text: str) -> Dict[str, Any]:
    return {
        "statusCode": status,
        "headers": {"Content-Type": "text/plain"},
        "body": text,
    }


def _html_response(html: str) -> Dict[str, Any]:
    return {
        "statusCode": 200,
        "headers": {"Content-Type": "text/html"},
        "body": html,
    }


def _parse_payload(body: Union[bytes, str, None]) -> FrameActionPayload:
    """Parse the request body. An empty body is an empty envelope."""
    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError as ex:
            raise InvalidRequest("Request body is not UTF-8") from ex
    if body is None or not body.strip():
        return FrameActionPayload()
    try:
        raw = json.loads(body)
    except ValueError as ex:
        raise InvalidRequest("Request body is not valid JSON") from ex
    if not isinstance(raw, dict):
        raise InvalidRequest("Request body must be a JSON object")
    try:
        return FrameActionPayload.model_validate(raw)
    except ValidationError as ex:
        raise InvalidRequest("Request body has invalid fields") from ex


def handle_frame_action(body: Union[bytes, str, None], *, config: FrameConfig) -> Dict[str, Any]:
    """
    Derive the next counter state from a frame action and render the response.

    - No token: start from the all-zero state.
    - Token present: verify and decode it; a failed verification is a 400,
      anything unexpected is a 500 (cause logged, never returned).
    - Resolve the action from the incoming state, apply it, sign the result
      with a fresh nonce and render the frame for the new state.

    Returns a Lambda proxy response: {"statusCode", "headers", "body"}.
    """
    try:
        payload = _parse_payload(body)
    except InvalidRequest as ex:
        logger.warning("Rejected request: %s", ex)
        return _text_response(400, "Invalid request")

    data = payload.untrusted_data
    logger.debug("Frame action: button_index=%s has_state=%s", data.button_index, bool(data.state))

    if not data.state:
        state = State.empty()
    else:
        try:
            state = config.signer.open_state(data.state)
        except InvalidStateToken:
            logger.warning("Rejected state token that failed verification")
            return _text_response(400, "Invalid state")
        except Exception:
            logger.exception("Unexpected failure while opening state token")
            return _text_response(500, "Internal server error")

    action = resolve_action(state, data.button_index)
    new_state = apply_action(state, action)
    token = config.signer.seal_state(new_state)
    logger.info(
        "Applied %s: count %d -> %d (clicks=%d)",
        action.value,
        state.count,
        new_state.count,
        new_state.clicks,
    )

    return _html_response(render_frame(FrameContext(host=config.host, state=new_state, token=token)))


def _event_body(event: Dict[str, Any]) -> Union[bytes, str, None]:
    body = event.get("body")
    if body and event.get("isBase64Encoded"):
        try:
            return base64.b64decode(body, validate=True)
        except (binascii.Error, ValueError) as ex:
            raise InvalidRequest("Request body is not valid base64") from ex
    return body


def _event_method(event: Dict[str, Any]) -> Optional[str]:
    http = (event.get("requestContext") or {}).get("http") or {}
    return http.get("method") or event.get("httpMethod")


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """AWS Lambda entry for the counter endpoint (function URL or API Gateway).

    GET and POST are handled identically.

    Environment:
    - HOST (default: https://stateful-counter-frame.vercel.app)
    - STATE_SECRET (hex), or PARAM_PREFIX with SSM `{PARAM_PREFIX}state_secret`
    - LOG_LEVEL (default: INFO)
    """
    config = _get_config()
    logger.debug("Received %s request", _event_method(event) or "unknown")
    try:
        body = _event_body(event)
    except InvalidRequest as ex:
        logger.warning("Rejected request: %s", ex)
        return _text_response(400, "Invalid request")
    return handle_frame_action(body, config=config)
