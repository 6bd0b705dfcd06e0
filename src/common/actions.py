from __future__ import annotations

from enum import Enum
from typing import Optional

from state.models import State


# Position of the "-" control when two buttons are rendered
DECREMENT_BUTTON_INDEX = 2


class Action(str, Enum):
    INCREMENT = "increment"
    DECREMENT = "decrement"


def resolve_action(state: State, button_index: Optional[int]) -> Action:
    """Map the pressed button to an action, based on the incoming state.

    At count == 0 only "+" is rendered, so every signal means increment.
    Otherwise index 2 ("-") decrements and anything else, including a missing
    or out-of-range index, increments.
    """
    if state.count == 0:
        return Action.INCREMENT
    if button_index == DECREMENT_BUTTON_INDEX:
        return Action.DECREMENT
    return Action.INCREMENT


def apply_action(state: State, action: Action) -> State:
    """Return the next State; the input is left untouched.

    Every call consumes exactly one click. A decrement at zero changes nothing
    else.
    """
    update = {"clicks": state.clicks + 1}
    if action is Action.INCREMENT:
        update["count"] = state.count + 1
        update["incs"] = state.incs + 1
    elif action is Action.DECREMENT and state.count > 0:
        update["count"] = state.count - 1
        update["decs"] = state.decs + 1
    return state.model_copy(update=update)


__all__ = [
    "Action",
    "DECREMENT_BUTTON_INDEX",
    "resolve_action",
    "apply_action",
]
