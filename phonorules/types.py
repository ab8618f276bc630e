from __future__ import annotations
from typing import Any, Callable, Literal, Optional

from pydantic import BaseModel, ConfigDict, model_validator

__all__ = [
    "Direction",
    "DIRECTIONS",
    "LEFTWARD",
    "RIGHTWARD",
    "FeatureType",
    "FEATURE_TYPES",
    "RULE_FIELDS",
    "RuleSpec",
]

Direction = Literal["leftward", "rightward"]
LEFTWARD: Direction = "leftward"
RIGHTWARD: Direction = "rightward"
DIRECTIONS: tuple[str, ...] = (LEFTWARD, RIGHTWARD)

FeatureType = Literal["node", "privative", "binary", "scalar"]
FEATURE_TYPES: tuple[str, ...] = ("node", "privative", "binary", "scalar")

RULE_FIELDS: tuple[str, ...] = ("tier", "domain", "direction", "filter", "where", "do")


class RuleSpec(BaseModel):
    """
    The stored specification of a single phonological rule.

    A record is frozen once built; changing a field means validating a new
    record with the updated value (see `RuleSet`), so a rejected update can
    never leave a half-written rule behind.

    Attributes:
        tier: Feature whose presence selects the segments the rule scans.
        domain: Feature whose shared value cells split the word into groups
                that are scanned separately.
        direction: `"leftward"` or `"rightward"`. `None` means the engine
                   default, which is rightward unless configured otherwise.
        filter: Predicate over a single segment. Segments it rejects are left
                out of the scan entirely.
        where: Predicate over a `Window`; gates whether `do` runs.
        do: Action over a `Window`; the place where segments are changed.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    tier: Optional[str] = None
    domain: Optional[str] = None
    direction: Optional[Direction] = None
    filter: Optional[Callable[..., Any]] = None
    where: Optional[Callable[..., Any]] = None
    do: Optional[Callable[..., Any]] = None

    @model_validator(mode="before")
    def _normalise_fields(cls, values: Any) -> Any:
        if isinstance(values, dict):
            values = dict(values)
            for key in ("tier", "domain"):
                if values.get(key) == "":
                    values[key] = None
            direction = values.get("direction")
            if isinstance(direction, str):
                values["direction"] = direction.strip().lower() or None
        return values
