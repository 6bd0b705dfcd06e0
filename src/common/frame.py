from __future__ import annotations

import json
from dataclasses import dataclass
from html import escape
from typing import List
from urllib.parse import quote

from state.models import State


FRAME_TITLE = "Stateful Counter"
FRAME_VERSION = "vNext"
POST_PATH = "/api/count"
IMAGE_PATH = "/api/images/count"


@dataclass(frozen=True)
class FrameButton:
    label: str


@dataclass(frozen=True)
class FrameContext:
    """Everything needed to render the response document.

    Attributes
    - host: base URL used for absolute image and callback URLs
    - state: the new (post-transition) state
    - token: the signed token for `state`
    """

    host: str
    state: State
    token: str


def buttons_for(count: int) -> List[FrameButton]:
    """Controls shown for a counter value: "+" alone at zero, else "-" then "+"."""
    if count > 0:
        return [FrameButton("-"), FrameButton("+")]
    return [FrameButton("+")]


def _base(host: str) -> str:
    return host.rstrip("/")


def post_url(host: str) -> str:
    return f"{_base(host)}{POST_PATH}"


def image_url(host: str, state: State) -> str:
    # Same compact JSON shape the image endpoint parses (no nonce)
    raw = json.dumps(state.model_dump(), separators=(",", ":"))
    return f"{_base(host)}{IMAGE_PATH}?state={quote(raw, safe='')}"


def _meta(attr: str, key: str, content: str) -> str:
    return f'<meta {attr}="{key}" content="{escape(content, quote=True)}" />'


def render_frame(ctx: FrameContext) -> str:
    """Return the HTML document declaring the frame for the new state."""
    img = image_url(ctx.host, ctx.state)
    tags = [
        _meta("property", "og:title", FRAME_TITLE),
        _meta("property", "og:image", img),
        _meta("name", "fc:frame", FRAME_VERSION),
        _meta("name", "fc:frame:image", img),
        _meta("name", "fc:frame:post_url", post_url(ctx.host)),
        _meta("name", "fc:frame:state", ctx.token),
    ]
    for i, button in enumerate(buttons_for(ctx.state.count), start=1):
        tags.append(_meta("name", f"fc:frame:button:{i}", button.label))

    head = "\n    ".join(tags)
    return (
        "<!DOCTYPE html>\n"
        "<html>\n"
        "  <head>\n"
        f"    {head}\n"
        "  </head>\n"
        "  <body></body>\n"
        "</html>\n"
    )


__all__ = [
    "FrameButton",
    "FrameContext",
    "buttons_for",
    "image_url",
    "post_url",
    "render_frame",
]
