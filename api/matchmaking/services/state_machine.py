from __future__ import annotations

from ..domain import SwipeKind

NO_ACTION = "no_action"
LIKED = "liked"
PASSED = "passed"

NEITHER_LIKED = "neither_liked"
ONE_SIDED_A = "one_sided_a"
ONE_SIDED_B = "one_sided_b"
MATCHED = "matched"


def direction_state(latest: SwipeKind | None) -> str:
    if latest is None:
        return NO_ACTION
    if latest.is_positive:
        return LIKED
    return PASSED


def pair_state(a_to_b: SwipeKind | None, b_to_a: SwipeKind | None, matched: bool = False) -> str:
    """Undirected state of a pair from the latest swipe in each direction.

    ``matched`` is terminal: once a match exists, later swipes in either direction do not move it.
    """
    if matched:
        return MATCHED

    a_liked = direction_state(a_to_b) == LIKED
    b_liked = direction_state(b_to_a) == LIKED
    if a_liked and b_liked:
        return MATCHED
    if a_liked:
        return ONE_SIDED_A
    if b_liked:
        return ONE_SIDED_B
    return NEITHER_LIKED
