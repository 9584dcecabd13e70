from __future__ import annotations

from typing import Any


def counter_reducer(state: Any, action: Any) -> Any:
    if state is None:
        state = {"count": 0}
    if action["type"] == "INC":
        return {"count": state["count"] + 1}
    if action["type"] == "DEC":
        return {"count": state["count"] - 1}
    return state
