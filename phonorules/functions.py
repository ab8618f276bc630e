"""Building blocks for writing rule actions.

Each helper implements one common phonological process on segments taken
from a rule's `Window`. Where two segments are involved, the first acts on
the second: `assimilate("voice", w[1], w[0])` makes `w[0]` take its voicing
from `w[1]`.

All helpers return True when they did something and False when one of the
segments is a boundary, so they can be used directly at the edges of a word.
"""
from __future__ import annotations
from typing import Any, Tuple, Union

from .types import RIGHTWARD

__all__ = [
    "assimilate",
    "adjoin",
    "copy",
    "dissimilate",
    "metathesize",
    "metathesize_feature",
    "delete_seg",
    "insert_after",
    "insert_before",
]


def _any_boundary(*segments: Any) -> bool:
    return any(getattr(segment, "is_boundary", False) for segment in segments)


def assimilate(feature: str, source: Any, target: Any) -> bool:
    """
    Links `target` to `source` on `feature`.

    This is a deep assimilation: afterwards the two segments share the same
    storage, so a later change to the feature on either one shows on both.
    Use `copy` for a one-off value copy.
    """
    if _any_boundary(source, target):
        return False
    target.delink(feature)
    ref = source.value_ref(feature)
    if ref is not None:
        target.set(feature, ref)
    return True


adjoin = assimilate


def copy(feature: str, source: Any, target: Any) -> bool:
    """Copies the value of `feature` from `source` to `target` without linking."""
    if _any_boundary(source, target):
        return False
    target.delink(feature)
    value = source.value(feature)
    if value is not None:
        target.set(feature, value)
    return True


def dissimilate(feature: str, source: Any, target: Any) -> bool:
    """
    Gives `target` the opposite value of `feature` to `source`.

    For a node there is no sensible "opposite" to assign, so `target` loses
    the node when `source` has it and is otherwise left alone. Any link
    between the two segments on `feature` is broken first.
    """
    if _any_boundary(source, target):
        return False
    if source.catalog.type(feature) == "node":
        if source.value(feature) is not None:
            target.delink(feature)
        return True
    target.delink(feature)
    opposite = 0 if source.value(feature) else 1
    # A privative feature has no negative value; being unset is its opposite.
    if source.catalog.number_form(feature, opposite) is not None:
        target.set(feature, opposite)
    return True


def metathesize(first: Any, second: Any) -> Union[bool, Tuple[Any, Any]]:
    """
    Swaps two adjacent segments; `first` must be the one on the left.

    Inside a rule the swap is done with the insertion slots and takes effect
    once the current action returns: a rightward rule inserts a copy of
    `second` before `first` and clears `second`, a leftward rule inserts a
    copy of `first` after `second` and clears `first`. Outside a rule, where
    there is no word to rearrange, the pair is simply returned swapped.
    """
    if _any_boundary(first, second):
        return False
    if not hasattr(first, "insert_before"):
        return second, first
    if first.direction == RIGHTWARD:
        first.insert_before(second.duplicate())
        second.clear()
    else:
        second.insert_after(first.duplicate())
        first.clear()
    return True


def metathesize_feature(feature: str, first: Any, second: Any) -> bool:
    """Swaps the values of `feature` between two segments."""
    if _any_boundary(first, second):
        return False
    value_first = first.value(feature)
    value_second = second.value(feature)
    for segment, value in ((first, value_second), (second, value_first)):
        segment.delink(feature)
        if value is not None:
            segment.set(feature, value)
    return True


def delete_seg(segment: Any) -> bool:
    """Clears `segment`, which removes it from the word when the rule ends."""
    if _any_boundary(segment):
        return False
    segment.clear()
    return True


def insert_after(segment: Any, new: Any) -> bool:
    """Inserts `new` after `segment`. Only meaningful inside a rule action."""
    if _any_boundary(segment, new):
        return False
    segment.insert_after(new)
    return True


def insert_before(segment: Any, new: Any) -> bool:
    """Inserts `new` before `segment`. Only meaningful inside a rule action."""
    if _any_boundary(segment, new):
        return False
    segment.insert_before(new)
    return True
