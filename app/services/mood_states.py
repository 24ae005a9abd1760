from __future__ import annotations

from typing import Optional


# Worst to best.
MOOD_STATES: tuple[str, ...] = (
    "crumbs-everywhere",
    "clutching-cookies",
    "side-eye",
    "steady-bite",
    "snack-mode",
)


def adjacent_states(state: str) -> dict[str, Optional[str]]:
    """
    Neighbours of `state` in MOOD_STATES.
    Returns {"prev": None, "next": None} for states outside the sequence.
    """
    if state not in MOOD_STATES:
        return {"prev": None, "next": None}

    i = MOOD_STATES.index(state)
    return {
        "prev": MOOD_STATES[i - 1] if i > 0 else None,
        "next": MOOD_STATES[i + 1] if i < len(MOOD_STATES) - 1 else None,
    }
