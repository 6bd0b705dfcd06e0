from __future__ import annotations

from pydantic import BaseModel, Field


class State(BaseModel):
    """
    Counter state carried inside the signed token.

    Fields
    - count: current counter value, never negative.
    - incs: total increments performed.
    - decs: total decrements performed.
    - clicks: total actions processed, including decrements requested at zero.

    Notes
    - No field has a default, so a payload missing any of them fails validation.
      Unknown keys (e.g. the token nonce) are ignored.
    """

    count: int = Field(..., ge=0, description="Current counter value")
    incs: int = Field(..., ge=0, description="Total increments performed")
    decs: int = Field(..., ge=0, description="Total decrements performed")
    clicks: int = Field(..., ge=0, description="Total actions processed")

    @classmethod
    def empty(cls) -> "State":
        """Convenience constructor for a fresh, all-zero state."""
        return cls(count=0, incs=0, decs=0, clicks=0)
