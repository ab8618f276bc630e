"""Defines named rules and applies them, alone or as an ordered pipeline.

A `RuleSet` stores rules by name, validates every field as it is stored, and
applies rules to words (lists of segments). The actions of a rule are
supplied by the caller as ordinary callables; the rule set only decides which
segments they see and in what order.

Example::

    rules = RuleSet()
    rules.add_rule(
        "FinalDevoicing",
        where=lambda w: w[1].is_boundary,
        do=lambda w: w[0].delink("voice"),
    )
    rules.FinalDevoicing(word)

Rules can be applied with `apply(name, word)` or by calling the rule's name
as a method, as above. A name that collides with a `RuleSet` attribute (such
as `apply`) is only reachable through `apply`.

Failures that a caller can recover from return the falsy `FAILED` marker and
log a warning, unless the rule set was configured as strict, in which case
they raise. Errors raised by a rule's own callbacks are never caught.
"""
from __future__ import annotations
import functools
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Tuple

from pydantic import ValidationError

from .applier import apply_rule
from .config import EngineConfig
from .errors import FAILED, MalformedWordError, RuleValidationError, UnknownRuleError
from .types import RULE_FIELDS, RuleSpec

__all__ = ["RuleSet", "PipelineResult"]

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass
class PipelineResult:
    """
    The outcome of `RuleSet.apply_all`.

    Attributes:
        steps: The rule names in the order they were applied.
        failed: The names whose application did not succeed. A failed step
                does not stop the pipeline.
    """
    steps: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return not self.failed


def _describe(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(p) for p in item.get("loc", ())) or "rule"
        parts.append(f"{location}: {item.get('msg')}")
    return "; ".join(parts)


class RuleSet:
    """
    A collection of named rules plus the `order` and `persist` sequences that
    drive `apply_all`.

    Attributes:
        config: The engine settings used for every application.
    """

    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        self.config = config or EngineConfig()
        self._rules: Dict[str, RuleSpec] = {}
        # name -> bound "apply this rule" callable, for rules.<Name>(word)
        self._invokers: Dict[str, Callable[[Any], Any]] = {}
        self._order: Tuple[str, ...] = ()
        self._persist: Tuple[str, ...] = ()

    # -- failure reporting -------------------------------------------------

    def _fail(self, error: Exception) -> Any:
        if self.config.strict:
            raise error
        logger.warning("%s", error)
        return FAILED

    def _lookup(self, name: str) -> Any:
        spec = self._rules.get(name)
        if spec is None:
            return self._fail(UnknownRuleError(name))
        return spec

    # -- storing -----------------------------------------------------------

    def _store(self, name: str, spec: RuleSpec) -> None:
        self._rules[name] = spec
        if name not in self._invokers:
            self._invokers[name] = functools.partial(self.apply, name)

    def add_rule(self, name: str, **fields: Any) -> Any:
        """
        Validates and stores a rule, replacing any rule of the same name.

        Keyword arguments are the rule fields: `tier`, `domain`, `direction`,
        `filter`, `where` and `do`. All are optional.

        Returns:
            True when the rule was stored, `FAILED` when a field was invalid.
            A rejected rule leaves any existing rule of that name unchanged.
        """
        try:
            spec = RuleSpec.model_validate(fields)
        except ValidationError as e:
            return self._fail(RuleValidationError(name, _describe(e)))
        self._store(name, spec)
        logger.debug("Stored rule %s", name)
        return True

    def add_rules(self, rules: Mapping[str, Mapping[str, Any]]) -> List[str]:
        """
        Stores several rules at once and returns the names that were rejected.

        Each value is a mapping of rule fields, as accepted by `add_rule`.
        Rules are validated independently; one bad rule does not keep the
        others from being stored. In strict mode the first rejection raises.
        """
        rejected: List[str] = []
        for name, fields in rules.items():
            if not isinstance(fields, Mapping):
                result = self._fail(RuleValidationError(name, "rule fields must be a mapping"))
            else:
                result = self.add_rule(name, **fields)
            if result is FAILED:
                rejected.append(name)
        return rejected

    def drop_rule(self, name: str) -> Any:
        """Removes a rule. Returns True, or `FAILED` for an unknown name."""
        if self._lookup(name) is FAILED:
            return FAILED
        del self._rules[name]
        del self._invokers[name]
        return True

    def clear(self) -> None:
        """Removes every rule. The `order` and `persist` lists are kept."""
        self._rules.clear()
        self._invokers.clear()

    def rule(self, name: str) -> Any:
        """The stored `RuleSpec` for `name`, or `FAILED`."""
        return self._lookup(name)

    def names(self) -> List[str]:
        return list(self._rules)

    def __contains__(self, name: object) -> bool:
        return name in self._rules

    def __iter__(self) -> Iterator[str]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    # -- field accessors ---------------------------------------------------

    def _field(self, name: str, field_name: str, value: Any) -> Any:
        spec = self._lookup(name)
        if spec is FAILED:
            return FAILED
        if value is _MISSING:
            return getattr(spec, field_name)

        fields = {f: getattr(spec, f) for f in RULE_FIELDS}
        fields[field_name] = value
        try:
            updated = RuleSpec.model_validate(fields)
        except ValidationError as e:
            return self._fail(RuleValidationError(name, _describe(e)))
        self._store(name, updated)
        return getattr(updated, field_name)

    def tier(self, name: str, value: Any = _MISSING) -> Any:
        """Returns, or with a second argument sets, the tier of a rule."""
        return self._field(name, "tier", value)

    def domain(self, name: str, value: Any = _MISSING) -> Any:
        """Returns, or with a second argument sets, the domain of a rule."""
        return self._field(name, "domain", value)

    def direction(self, name: str, value: Any = _MISSING) -> Any:
        """Returns, or with a second argument sets, the direction of a rule."""
        return self._field(name, "direction", value)

    def filter(self, name: str, value: Any = _MISSING) -> Any:
        """Returns, or with a second argument sets, the filter of a rule."""
        return self._field(name, "filter", value)

    def where(self, name: str, value: Any = _MISSING) -> Any:
        """Returns, or with a second argument sets, the condition of a rule."""
        return self._field(name, "where", value)

    def do(self, name: str, value: Any = _MISSING) -> Any:
        """Returns, or with a second argument sets, the action of a rule."""
        return self._field(name, "do", value)

    # -- pipelines ---------------------------------------------------------

    def order(self, *names: str, reset: bool = False) -> Tuple[str, ...]:
        """
        Returns the rule names `apply_all` runs, in order. Called with names,
        replaces the list first; `reset=True` replaces it even with no names,
        which empties it.
        """
        if names or reset:
            self._order = tuple(names)
        return self._order

    def persist(self, *names: str, reset: bool = False) -> Tuple[str, ...]:
        """
        Returns the persistent rules, which `apply_all` re-runs after every
        step of `order`. Called with names, replaces the list first;
        `reset=True` replaces it even with no names.
        """
        if names or reset:
            self._persist = tuple(names)
        return self._persist

    # -- applying ----------------------------------------------------------

    def apply(self, name: str, word: Any) -> Any:
        """
        Applies the named rule to `word`, a list of segments, in place.

        Returns:
            True on success. `FAILED` when the rule is unknown or the word is
            empty or not a list of segments.
        """
        spec = self._lookup(name)
        if spec is FAILED:
            return FAILED
        try:
            return apply_rule(spec, word, self.config, name=name)
        except MalformedWordError as e:
            return self._fail(e)

    def apply_all(self, word: Any) -> PipelineResult:
        """
        Applies every rule in `order` to `word`, running the `persist` rules
        once each, in their listed order, after every step.

        A step that fails is recorded in the result and logged; the remaining
        steps still run.
        """
        result = PipelineResult()
        persist = self._persist
        for name in self._order:
            for step in (name, *persist):
                result.steps.append(step)
                if self.apply(step, word) is FAILED:
                    logger.warning("Pipeline step %s did not apply", step)
                    result.failed.append(step)
        return result

    def __getattr__(self, name: str) -> Any:
        # Only reached for names that are not real attributes.
        invokers = self.__dict__.get("_invokers")
        if invokers is not None and name in invokers:
            return invokers[name]
        raise AttributeError(f"{type(self).__name__!r} object has no attribute or rule {name!r}")
