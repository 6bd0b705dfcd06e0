from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

import boto3
from botocore.exceptions import ClientError

from state.signer import StateSigner


ENV_HOST = "HOST"
ENV_STATE_SECRET = "STATE_SECRET"  # hex-encoded HS256 key
ENV_PARAM_PREFIX = "PARAM_PREFIX"  # optional; SSM fallback for the secret

DEFAULT_HOST = "https://stateful-counter-frame.vercel.app"
SSM_STATE_SECRET = "state_secret"


def _getenv(name: str, default: Optional[str] = None) -> Optional[str]:
    val = os.environ.get(name)
    return val if val not in (None, "") else default


def _require(v: Optional[str], what: str) -> str:
    if not v:
        raise RuntimeError(f"Missing required configuration: {what}")
    return v


def _load_ssm_secret(name: str) -> Optional[str]:
    """Read a SecureString from SSM; None if missing or access is denied."""
    ssm = boto3.client("ssm")
    try:
        resp = ssm.get_parameter(Name=name, WithDecryption=True)
    except ClientError as e:
        code = e.response.get("Error", {}).get("Code")
        if code in ("ParameterNotFound", "AccessDeniedException"):
            return None
        raise
    val = resp.get("Parameter", {}).get("Value")
    return val if isinstance(val, str) and val != "" else None


@dataclass(frozen=True)
class FrameConfig:
    """
    Process-wide settings for the counter endpoint.

    - host: base URL for the callback and image URLs.
    - signer: HS256 signer holding the secret; its repr never shows the key.

    Environment variables
    - `HOST`:          base URL (default: https://stateful-counter-frame.vercel.app)
    - `STATE_SECRET`:  hex-encoded signing key
    - `PARAM_PREFIX`:  if STATE_SECRET is unset, read `{PARAM_PREFIX}state_secret` from SSM
    """

    host: str
    signer: StateSigner

    @classmethod
    def from_env(cls) -> "FrameConfig":
        host = _getenv(ENV_HOST, DEFAULT_HOST) or DEFAULT_HOST
        secret = _getenv(ENV_STATE_SECRET)
        if not secret:
            prefix = _getenv(ENV_PARAM_PREFIX)
            if prefix:
                name = f"{prefix}{SSM_STATE_SECRET}"
                secret = _require(_load_ssm_secret(name), name)
        secret = _require(secret, ENV_STATE_SECRET)
        return cls(host=host.rstrip("/"), signer=StateSigner.from_hex(secret))


__all__ = ["FrameConfig", "DEFAULT_HOST"]
