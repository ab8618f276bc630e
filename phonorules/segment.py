"""Segments as bundles of feature values, and the boundary sentinel.

Every terminal feature value a segment holds lives in a `Cell`. Two segments
that hold the *same* cell for a feature are linked on that feature: writing a
new value through either of them is seen by both, which is how assimilation
and spreading are modelled. Handing a segment a different cell (or delinking
the feature) breaks the link for that segment only.

Node features own no cell of their own. Their value is the aggregate of their
children's values, and linking a node links each of its children.
"""
from __future__ import annotations
import copy
from typing import Any, Dict, List, Mapping, Optional, Union

from .features import FeatureCatalog

__all__ = ["Cell", "Segment", "Boundary", "BOUNDARY"]

# What `value_ref` hands back: a cell for terminal features, a nested
# mapping of child references for nodes.
Ref = Union["Cell", Dict[str, Any]]


class Cell:
    """A shared, mutable slot holding one feature value."""

    __slots__ = ("value",)

    def __init__(self, value: Any = None) -> None:
        self.value = value

    def __repr__(self) -> str:
        return f"Cell({self.value!r})"


def _deref(ref: Optional[Ref]) -> Any:
    if ref is None:
        return None
    if isinstance(ref, Cell):
        return ref.value
    values = {child: _deref(sub) for child, sub in ref.items()}
    values = {child: v for child, v in values.items() if v is not None}
    return values or None


class Segment:
    """
    A single phonological segment, bound to a `FeatureCatalog`.

    Values are stored in their canonical numeric form (see
    `FeatureCatalog.number_form`); `value_text` renders them back. The
    mapping-style accessors are shorthands: `seg["voice"]` is
    `seg.value("voice")`, `seg["voice"] = 1` is `seg.set("voice", 1)`,
    `del seg["voice"]` delinks, and `"voice" in seg` tests for a value.

    Asking about a feature the catalog does not declare raises
    `UnknownFeatureError`.
    """

    is_boundary = False

    def __init__(self, catalog: FeatureCatalog, values: Optional[Mapping[str, Any]] = None) -> None:
        self.catalog = catalog
        self._cells: Dict[str, Cell] = {}
        for feature, value in (values or {}).items():
            self.set(feature, value)

    # -- reading -----------------------------------------------------------

    def value_ref(self, feature: str) -> Optional[Ref]:
        """
        Returns the storage behind a feature rather than its value.

        For a terminal feature this is the `Cell` itself (or `None` when the
        feature is unset). For a node it is a dictionary mapping each child
        with a value to that child's reference, or `None` when no child is set.
        Passing the result to another segment's `set` links the two.
        """
        if self.catalog.type(feature) == "node":
            refs: Dict[str, Any] = {}
            for child in self.catalog.children(feature):
                ref = self.value_ref(child)
                if ref is not None:
                    refs[child] = ref
            return refs or None
        return self._cells.get(feature)

    def value(self, feature: str) -> Any:
        """The stored (numeric) value of a feature, or `None` if unset."""
        return _deref(self.value_ref(feature))

    def value_text(self, feature: str) -> Any:
        """The value passed through `FeatureCatalog.text_form`.

        Nodes return a dictionary of their children's text forms.
        """
        value = self.value(feature)
        if isinstance(value, dict):
            return {child: self._text(child, v) for child, v in value.items()}
        return self.catalog.text_form(feature, value)

    def _text(self, feature: str, value: Any) -> Any:
        if isinstance(value, dict):
            return {child: self._text(child, v) for child, v in value.items()}
        return self.catalog.text_form(feature, value)

    def all_values(self) -> Dict[str, Any]:
        """Every terminal feature that has been given a value (even `None`)."""
        return {feature: cell.value for feature, cell in self._cells.items()}

    def link_key(self, feature: str) -> Any:
        """
        A hashable key that is equal for two segments exactly when they share
        the storage of `feature`. Returns `None` when the feature is unset.
        """
        ref = self.value_ref(feature)
        return _ref_key(ref)

    def linked(self, other: Any, feature: str) -> bool:
        """True when `other` shares this segment's storage for `feature`."""
        if getattr(other, "is_boundary", False) or not hasattr(other, "link_key"):
            return False
        key = self.link_key(feature)
        return key is not None and key == other.link_key(feature)

    # -- writing -----------------------------------------------------------

    def set(self, feature: str, value: Any) -> None:
        """
        Sets a feature.

        A `Cell` (as returned by another segment's `value_ref`) replaces this
        segment's storage, linking the two segments. Any other value is
        converted with `number_form` and written through the existing cell,
        so every segment linked on the feature sees the change; a new cell is
        created if the feature was unset.

        Nodes take a mapping of child values or references. Children that are
        not mentioned in the mapping are left alone, so assigning an empty
        mapping changes nothing; use `delink` to remove a node.

        Raises:
            TypeError: If a node is given something other than a mapping.
        """
        if self.catalog.type(feature) == "node":
            if not isinstance(value, Mapping):
                raise TypeError(f"Value assigned to node '{feature}' must be a mapping")
            for child in self.catalog.children(feature):
                if child in value:
                    self.set(child, value[child])
            return

        if isinstance(value, Cell):
            value.value = self.catalog.number_form(feature, value.value)
            self._cells[feature] = value
            return

        value = self.catalog.number_form(feature, value)
        cell = self._cells.get(feature)
        if cell is not None:
            cell.value = value
        else:
            self._cells[feature] = Cell(value)

    def delink(self, *features: str) -> List[Any]:
        """
        Removes features from this segment and returns their former values.

        Only this segment loses the value; segments that were linked to it
        keep theirs. Delinking a node delinks all of its children.
        """
        removed: List[Any] = []
        for feature in features:
            if self.catalog.type(feature) == "node":
                removed.extend(self.delink(*self.catalog.children(feature)))
            else:
                cell = self._cells.pop(feature, None)
                if cell is not None:
                    removed.append(cell.value)
        return removed

    def duplicate(self) -> "Segment":
        """A copy with private cells; nothing is shared with this segment."""
        new = type(self)(self.catalog)
        for feature, cell in self._cells.items():
            new._cells[feature] = Cell(copy.deepcopy(cell.value))
        return new

    def clear(self) -> None:
        """Removes every feature value. Linked segments are unaffected."""
        self._cells = {}

    # -- mapping sugar -----------------------------------------------------

    def __getitem__(self, feature: str) -> Any:
        return self.value(feature)

    def __setitem__(self, feature: str, value: Any) -> None:
        self.set(feature, value)

    def __delitem__(self, feature: str) -> None:
        self.delink(feature)

    def __contains__(self, feature: str) -> bool:
        return self.value(feature) is not None

    def __repr__(self) -> str:
        values = " ".join(f"{k}={v!r}" for k, v in sorted(self.all_values().items()))
        return f"<Segment {values}>" if values else "<Segment>"


def _ref_key(ref: Optional[Ref]) -> Any:
    if ref is None:
        return None
    if isinstance(ref, Cell):
        # An emptied cell is not a shared value.
        return ref if ref.value is not None else None
    keys = ((child, _ref_key(sub)) for child, sub in ref.items())
    return tuple(sorted((child, key) for child, key in keys if key is not None)) or None


class Boundary:
    """
    The sentinel standing in for a missing neighbour at the edge of a scan.

    It reports itself as a boundary, answers every feature query as unset and
    ignores every attempt to change it.
    """

    is_boundary = True
    catalog = None

    def value(self, feature: str) -> None:
        return None

    def value_ref(self, feature: str) -> None:
        return None

    def value_text(self, feature: str) -> str:
        return "*"

    def link_key(self, feature: str) -> None:
        return None

    def linked(self, other: Any, feature: str) -> bool:
        return False

    def all_values(self) -> Dict[str, Any]:
        return {"BOUNDARY": 1}

    def set(self, feature: str, value: Any) -> None:
        pass

    def delink(self, *features: str) -> List[Any]:
        return []

    def clear(self) -> None:
        pass

    def duplicate(self) -> "Boundary":
        return self

    def __getitem__(self, feature: str) -> None:
        return None

    def __setitem__(self, feature: str, value: Any) -> None:
        pass

    def __delitem__(self, feature: str) -> None:
        pass

    def __contains__(self, feature: str) -> bool:
        return False

    def __repr__(self) -> str:
        return "<Boundary>"


BOUNDARY = Boundary()
