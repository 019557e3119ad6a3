from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TypeVar

S = TypeVar("S")
X = TypeVar("X")


def fold_until(
    step: Callable[[S, X], S],
    items: Iterable[X],
    initial: S,
    done: Callable[[S], bool],
) -> S:
    """Left fold over ``items`` that stops as soon as ``done(state)`` holds.

    ``items`` is consumed lazily, so the items after the stopping point are
    never produced.
    """
    state = initial
    if done(state):
        return state
    for item in items:
        state = step(state, item)
        if done(state):
            break
    return state
