"""Rule-local views of segments.

While a rule runs, each segment it looks at is wrapped in a `RuleSegment`.
The wrapper behaves like the segment it holds, and adds what only makes sense
inside a rule: slots for segments to insert before or after it, and access to
the rule and scan direction.

The insertion slots do not live on the wrapper or on the segment. They live
in the `Traversal` that created the wrapper, keyed by the identity of the
wrapped segment. Two wrappers of the same segment within one traversal
therefore see the same slots, while a nested rule application (a `do` that
applies another rule) gets its own traversal and cannot see or disturb them.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from .types import Direction, RuleSpec

__all__ = ["Traversal", "RuleSegment"]


@dataclass
class _Slots:
    before: Optional[Any] = None
    after: Optional[Any] = None


class Traversal:
    """
    The state of one scan of one rule.

    Attributes:
        rule: The rule being applied.
        direction: The effective scan direction.
    """

    def __init__(self, rule: RuleSpec, direction: Direction) -> None:
        self.rule = rule
        self.direction = direction
        # id(segment) -> (segment, slots); the segment is held so its id
        # cannot be reused while the traversal is alive.
        self._table: Dict[int, Tuple[Any, _Slots]] = {}

    def decorate(self, segment: Any) -> "RuleSegment":
        if isinstance(segment, RuleSegment):
            segment = segment.wrapped
        return RuleSegment(segment, self)

    def slots(self, segment: Any) -> _Slots:
        entry = self._table.get(id(segment))
        if entry is None:
            entry = (segment, _Slots())
            self._table[id(segment)] = entry
        return entry[1]

    def peek(self, segment: Any) -> Optional[_Slots]:
        entry = self._table.get(id(segment))
        return entry[1] if entry else None

    def take(self, segment: Any) -> Tuple[Optional[Any], Optional[Any]]:
        """Empties the slots of `segment`, returning `(before, after)`."""
        entry = self._table.pop(id(segment), None)
        if entry is None:
            return None, None
        return entry[1].before, entry[1].after


def _unwrap(segment: Any) -> Any:
    if isinstance(segment, RuleSegment):
        return segment.wrapped
    return segment


class RuleSegment:
    """
    A segment as seen from inside a rule.

    Every attribute not defined here is looked up on the wrapped segment, so
    a rule can read and write features exactly as it would on the segment
    itself. Discarding the wrapper leaves the segment untouched.
    """

    __slots__ = ("_segment", "_traversal")

    def __init__(self, segment: Any, traversal: Traversal) -> None:
        object.__setattr__(self, "_segment", segment)
        object.__setattr__(self, "_traversal", traversal)

    @property
    def wrapped(self) -> Any:
        return self._segment

    @property
    def rule(self) -> RuleSpec:
        return self._traversal.rule

    @property
    def direction(self) -> Direction:
        return self._traversal.direction

    @property
    def is_boundary(self) -> bool:
        return bool(getattr(self._segment, "is_boundary", False))

    def _insert(self, side: str, segment: Any) -> Optional[Any]:
        if segment is not None:
            segment = _unwrap(segment)
            if getattr(segment, "is_boundary", False) or not hasattr(segment, "all_values"):
                raise TypeError(f"Cannot insert {segment!r}: not a segment")
            setattr(self._traversal.slots(self._segment), side, segment)
            return segment
        slots = self._traversal.peek(self._segment)
        return getattr(slots, side) if slots else None

    def insert_before(self, segment: Any = None) -> Optional[Any]:
        """Stores `segment` to be inserted before this one; returns the slot."""
        return self._insert("before", segment)

    def insert_after(self, segment: Any = None) -> Optional[Any]:
        """Stores `segment` to be inserted after this one; returns the slot."""
        return self._insert("after", segment)

    def __getattr__(self, name: str) -> Any:
        return getattr(self._segment, name)

    def __setattr__(self, name: str, value: Any) -> None:
        setattr(self._segment, name, value)

    def __getitem__(self, feature: str) -> Any:
        return self._segment[feature]

    def __setitem__(self, feature: str, value: Any) -> None:
        self._segment[feature] = value

    def __delitem__(self, feature: str) -> None:
        del self._segment[feature]

    def __contains__(self, feature: str) -> bool:
        return feature in self._segment

    def __repr__(self) -> str:
        return f"<RuleSegment {self._segment!r}>"
