"""Builds the sequence a rule actually scans.

A rule does not necessarily see the word as it is. Its `filter` drops
segments, its `tier` keeps only the segments that carry the tier feature, and
its `domain` cuts what is left into runs that are scanned independently. The
result of `build_view` is a list of such runs; `Window` is the object the
rule's callbacks receive for each position in a run.
"""
from __future__ import annotations
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence

from .segment import BOUNDARY
from .types import LEFTWARD, Direction, RuleSpec

__all__ = ["TierGroup", "Window", "build_view", "partition_by_link", "is_empty"]


class TierGroup:
    """
    Several tier-adjacent segments that share one value for the tier feature,
    presented to a rule as a single pseudo-segment.

    Reads return the value every member agrees on, or `None` when they
    disagree. Writes, delinks and clears reach every member.
    """

    is_boundary = False

    def __init__(self, members: Sequence[Any]) -> None:
        if not members:
            raise ValueError("A tier group needs at least one segment")
        self.members = list(members)

    @property
    def catalog(self):
        return self.members[0].catalog

    def _agreed(self, read: Callable[[Any], Any]) -> Any:
        first = read(self.members[0])
        for member in self.members[1:]:
            if read(member) != first:
                return None
        return first

    def value(self, feature: str) -> Any:
        return self._agreed(lambda m: m.value(feature))

    def value_text(self, feature: str) -> Any:
        return self._agreed(lambda m: m.value_text(feature))

    def link_key(self, feature: str) -> Any:
        return self._agreed(lambda m: m.link_key(feature))

    def value_ref(self, feature: str) -> Any:
        if self.link_key(feature) is None:
            return None
        return self.members[0].value_ref(feature)

    def linked(self, other: Any, feature: str) -> bool:
        if getattr(other, "is_boundary", False) or not hasattr(other, "link_key"):
            return False
        key = self.link_key(feature)
        return key is not None and key == other.link_key(feature)

    def all_values(self) -> Dict[str, Any]:
        shared = self.members[0].all_values()
        for member in self.members[1:]:
            values = member.all_values()
            shared = {k: v for k, v in shared.items() if k in values and values[k] == v}
        return shared

    def set(self, feature: str, value: Any) -> None:
        for member in self.members:
            member.set(feature, value)

    def delink(self, *features: str) -> List[Any]:
        removed: List[Any] = []
        for member in self.members:
            removed.extend(member.delink(*features))
        return removed

    def clear(self) -> None:
        for member in self.members:
            member.clear()

    def duplicate(self) -> "TierGroup":
        return TierGroup([member.duplicate() for member in self.members])

    def __getitem__(self, feature: str) -> Any:
        return self.value(feature)

    def __setitem__(self, feature: str, value: Any) -> None:
        self.set(feature, value)

    def __delitem__(self, feature: str) -> None:
        self.delink(feature)

    def __contains__(self, feature: str) -> bool:
        return self.value(feature) is not None

    def __iter__(self) -> Iterator[Any]:
        return iter(self.members)

    def __len__(self) -> int:
        return len(self.members)

    def __repr__(self) -> str:
        return f"<TierGroup of {len(self.members)}>"


def is_empty(item: Any) -> bool:
    """True when a segment (or every member of a tier group) has no values."""
    if isinstance(item, TierGroup):
        return all(is_empty(member) for member in item.members)
    return not item.all_values()


def partition_by_link(segments: Sequence[Any], feature: str) -> List[List[Any]]:
    """
    Splits `segments` into maximal runs whose `feature` storage is shared.

    Segments that do not have the feature at all belong to no run.
    """
    runs: List[List[Any]] = []
    current: List[Any] = []
    current_key: Any = None
    for segment in segments:
        key = segment.link_key(feature)
        if key is None:
            if current:
                runs.append(current)
            current, current_key = [], None
            continue
        if current and key == current_key:
            current.append(segment)
        else:
            if current:
                runs.append(current)
            current, current_key = [segment], key
    if current:
        runs.append(current)
    return runs


def _merge_tier(run: Sequence[Any], tier: str) -> List[Any]:
    merged: List[Any] = []
    for group in _group_consecutive(run, tier):
        merged.append(group[0] if len(group) == 1 else TierGroup(group))
    return merged


def _group_consecutive(run: Sequence[Any], feature: str) -> List[List[Any]]:
    groups: List[List[Any]] = []
    for segment in run:
        if groups and groups[-1][-1].linked(segment, feature):
            groups[-1].append(segment)
        else:
            groups.append([segment])
    return groups


def build_view(word: Sequence[Any], rule: RuleSpec) -> List[List[Any]]:
    """
    Returns the runs of `word` that `rule` scans, each as a list of items.

    The steps are applied in a fixed order:

    1.  Segments without any feature values are skipped.
    2.  `filter` removes the segments it rejects.
    3.  `tier` keeps only segments with a value for the tier feature.
    4.  `domain` splits the remaining segments into runs sharing the domain
        feature's storage. Without a domain the whole sequence is one run.
    5.  Within each run, consecutive segments sharing the tier feature's
        storage are merged into a single `TierGroup`.

    Domains are cut before tier merging, so segments in different domains are
    never merged. The segments themselves are returned, not copies.
    """
    segments = [s for s in word if not is_empty(s)]
    if rule.filter is not None:
        segments = [s for s in segments if rule.filter(s)]
    if rule.tier:
        segments = [s for s in segments if s.value(rule.tier) is not None]

    if rule.domain:
        runs = partition_by_link(segments, rule.domain)
    else:
        runs = [segments] if segments else []

    if rule.tier:
        runs = [_merge_tier(run, rule.tier) for run in runs]
    return runs


class Window:
    """
    What a rule's `where` and `do` see at one scan position.

    `window[0]` is the focused item, `window[1]` the next item to its right in
    the view and `window[-1]` the previous one to its left, whatever the scan
    direction. Offsets past either end of the run give `BOUNDARY`.

    `ahead` and `behind` are the direction-relative forms: for a rightward
    scan `ahead()` is `window[1]`, for a leftward scan it is `window[-1]`.
    """

    def __init__(
        self,
        items: Sequence[Any],
        index: int,
        direction: Direction,
        rule: Optional[RuleSpec] = None,
    ) -> None:
        self._items = items
        self.index = index
        self.direction = direction
        self.rule = rule

    def __getitem__(self, offset: int) -> Any:
        if not isinstance(offset, int):
            raise TypeError("Window offsets must be integers")
        position = self.index + offset
        if 0 <= position < len(self._items):
            return self._items[position]
        return BOUNDARY

    @property
    def current(self) -> Any:
        return self[0]

    def ahead(self, steps: int = 1) -> Any:
        return self[-steps] if self.direction == LEFTWARD else self[steps]

    def behind(self, steps: int = 1) -> Any:
        return self[steps] if self.direction == LEFTWARD else self[-steps]

    @property
    def segments(self) -> tuple:
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"<Window {self.index}/{len(self._items)} {self.direction}>"
