"""Failure signalling shared by the rule engine.

Recoverable failures (a rejected rule field, an unknown rule name, a word that
cannot be scanned) are reported with the falsy :data:`FAILED` marker so that a
caller can tell them apart from a stored value that merely happens to be
``None``. When the engine runs in strict mode the same conditions raise the
exceptions defined here instead.
"""
from __future__ import annotations

__all__ = [
    "FAILED",
    "PhonologyError",
    "RuleValidationError",
    "UnknownRuleError",
    "UnknownFeatureError",
    "MalformedWordError",
]


class _Failed:
    __slots__ = ()

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "FAILED"

    def __reduce__(self):
        return "FAILED"


FAILED = _Failed()


class PhonologyError(Exception):
    """Base class for every error raised by the engine."""


class RuleValidationError(PhonologyError, ValueError):
    """Raised when a rule record or one of its fields is malformed."""

    def __init__(self, rule: str, message: str) -> None:
        super().__init__(f"Invalid rule '{rule}': {message}")
        self.rule = rule
        self.message = message


class UnknownRuleError(PhonologyError, KeyError):
    """Raised in strict mode when a rule name is not in the rule set."""

    def __init__(self, rule: str) -> None:
        super().__init__(rule)
        self.rule = rule

    def __str__(self) -> str:
        return f"No rule named '{self.rule}'"


class UnknownFeatureError(PhonologyError, KeyError):
    """Raised when a feature name is not declared in the feature catalog."""

    def __init__(self, feature: str) -> None:
        super().__init__(feature)
        self.feature = feature

    def __str__(self) -> str:
        return f"No such feature '{self.feature}'"


class MalformedWordError(PhonologyError, TypeError):
    """Raised in strict mode when a word cannot be scanned."""
