"""Applies a single rule to a word.

`apply_rule` asks `build_view` for the runs the rule scans, walks each run in
the rule's direction and, at every position where `where` holds, calls `do`.
The scan is live: changes made at one position are visible at the next.

After each `do` the scan is brought back in line with what the action did.
Segments stored in an insertion slot are spliced into both the run and the
word, and segments the action cleared drop out of the run. Cleared segments
are removed from the word itself once the whole rule has finished.
"""
from __future__ import annotations
import logging
from collections.abc import MutableSequence
from typing import Any, List, Optional

from .config import EngineConfig
from .errors import MalformedWordError
from .rule_segment import RuleSegment, Traversal
from .types import LEFTWARD, Direction, RuleSpec
from .view import TierGroup, Window, build_view, is_empty

__all__ = ["apply_rule", "check_word"]

logger = logging.getLogger(__name__)


def check_word(word: Any) -> None:
    """
    Raises `MalformedWordError` unless `word` is a non-empty mutable sequence
    of segments.
    """
    if not isinstance(word, MutableSequence) or isinstance(word, (str, bytes, bytearray)):
        raise MalformedWordError(f"A word must be a mutable sequence of segments, not {type(word).__name__}")
    if not word:
        raise MalformedWordError("Cannot apply a rule to an empty word")
    for i, segment in enumerate(word):
        if getattr(segment, "is_boundary", False) or not hasattr(segment, "all_values"):
            raise MalformedWordError(f"Item at index {i} is not a segment: {segment!r}")


def apply_rule(
    rule: RuleSpec,
    word: MutableSequence,
    config: Optional[EngineConfig] = None,
    name: str = "<rule>",
) -> bool:
    """
    Applies `rule` to `word` in place.

    Args:
        rule: The rule to apply.
        word: A list of segments. It is modified in place when the rule
              inserts or deletes segments.
        config: Engine settings; the defaults are used when omitted.
        name: The rule's name, used only in log records.

    Returns:
        True once the rule has been applied, whether or not it matched anywhere.

    Raises:
        MalformedWordError: If `word` is empty or is not a list of segments.
        Anything raised by the rule's own `filter`, `where` or `do`.
    """
    cfg = config or EngineConfig()
    check_word(word)
    direction: Direction = rule.direction or cfg.default_direction

    runs = build_view(word, rule)
    logger.debug("Applying rule %s %s over %d run(s)", name, direction, len(runs))
    for run in runs:
        _scan(run, word, rule, direction)

    if cfg.drop_empty_segments:
        kept = [segment for segment in word if not is_empty(segment)]
        if len(kept) != len(word):
            logger.debug("Rule %s deleted %d segment(s)", name, len(word) - len(kept))
            word[:] = kept
    return True


def _scan(run: List[Any], word: MutableSequence, rule: RuleSpec, direction: Direction) -> None:
    traversal = Traversal(rule, direction)
    items: List[RuleSegment] = [traversal.decorate(item) for item in run]
    step = -1 if direction == LEFTWARD else 1
    i = len(items) - 1 if direction == LEFTWARD else 0

    while 0 <= i < len(items):
        window = Window(items, i, direction, rule)
        if rule.where is None or rule.where(window):
            if rule.do is not None:
                rule.do(window)
                i = _materialize(items, i, traversal, word, direction)
        i += step


def _materialize(
    items: List[RuleSegment],
    index: int,
    traversal: Traversal,
    word: MutableSequence,
    direction: Direction,
) -> int:
    """
    Splices pending insertions into `items` and `word`, drops cleared items
    from `items`, and returns the index the scan should step from.
    """
    rebuilt: List[RuleSegment] = []
    anchor_at = index
    anchor_kept = False

    for position, item in enumerate(items):
        segment = item.wrapped
        before, after = traversal.take(segment)
        if before is not None:
            _splice(word, segment, before, after=False)
            rebuilt.append(traversal.decorate(before))
        if position == index:
            anchor_at = len(rebuilt)
        if not is_empty(segment):
            if position == index:
                anchor_kept = True
            rebuilt.append(item)
        if after is not None:
            _splice(word, segment, after, after=True)
            rebuilt.append(traversal.decorate(after))

    items[:] = rebuilt
    if anchor_kept:
        return anchor_at
    # The focused item is gone. Step from the gap it left so that nothing
    # behind the scan is revisited and nothing ahead of it is skipped.
    return anchor_at if direction == LEFTWARD else anchor_at - 1


def _members(item: Any) -> List[Any]:
    if isinstance(item, TierGroup):
        return list(item.members)
    return [item]


def _index_of(word: MutableSequence, segment: Any) -> Optional[int]:
    for i, candidate in enumerate(word):
        if candidate is segment:
            return i
    return None


def _splice(word: MutableSequence, anchor: Any, new: Any, after: bool) -> None:
    members = _members(anchor)
    target = members[-1] if after else members[0]
    position = _index_of(word, target)
    if position is None:
        logger.warning("Cannot insert %r: %r is no longer part of the word", new, target)
        return
    if after:
        position += 1
    word[position:position] = _members(new)
    logger.debug("Inserted %r %s %r", new, "after" if after else "before", anchor)
