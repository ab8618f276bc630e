"""Manages the loading and validation of engine configuration.

This module defines the `EngineConfig` dataclass, which gathers the handful of
settings that change how rules are applied, and the `load_config` function,
which reads those settings from a `phonorules.yaml` file. A configuration file
may also point at a YAML feature catalog; the path is resolved relative to the
configuration file so that a project directory can be moved as a unit.
"""
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional
import yaml

from .features import FeatureCatalog, default_catalog, load_catalog
from .types import DIRECTIONS, Direction

__all__ = ["EngineConfig", "load_config"]


@dataclass
class EngineConfig:
    """
    A typed configuration object for the rule application engine.

    Attributes:
        default_direction: The scan direction used by rules that do not name one.
        drop_empty_segments: When true, segments left without any feature values
                             after a rule has run are removed from the word. This
                             is how a rule deletes a segment.
        strict: When true, rejected rules, unknown rule names and malformed words
                raise exceptions instead of returning the `FAILED` marker.
        features_path: Optional path to a YAML feature catalog. Already resolved
                       against the configuration file's directory when the
                       object comes from `load_config`.
    """
    default_direction: Direction = "rightward"
    drop_empty_segments: bool = True
    strict: bool = False
    features_path: Optional[str] = None

    def __post_init__(self) -> None:
        if self.default_direction not in DIRECTIONS:
            raise ValueError(
                f"default_direction must be one of {DIRECTIONS}, got {self.default_direction!r}"
            )

    def catalog(self) -> FeatureCatalog:
        """
        Loads the feature catalog named by `features_path`, or the bundled
        default geometry when no path is configured.

        Raises:
            FileNotFoundError, ValueError, TypeError: As for `load_catalog`.
        """
        if self.features_path:
            return load_catalog(self.features_path)
        return default_catalog()


_TRUE_WORDS = ("true", "yes", "on", "1")
_FALSE_WORDS = ("false", "no", "off", "0")


def _as_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return bool(value)
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    raise ValueError(f"'{key}' must be a boolean, got {value!r}")


def load_config(path: str = "phonorules.yaml") -> EngineConfig:
    """
    Loads and validates an engine configuration file.

    Args:
        path: The path to the YAML configuration file.

    Returns:
        A fully populated `EngineConfig` object. Keys that are not recognised
        are ignored, and missing keys fall back to the dataclass defaults.

    Raises:
        FileNotFoundError: If the configuration file cannot be found.
        ValueError: If the YAML cannot be parsed or a value is invalid.
        TypeError: If the root of the YAML document is not a dictionary.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            y = yaml.safe_load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Configuration file not found at: {path}")
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML file at {path}: {e}")

    # An empty file is a valid "all defaults" configuration.
    if y is None:
        y = {}
    if not isinstance(y, dict):
        raise TypeError(f"Configuration file {path} must be a dictionary.")

    features_path = y.get("features")
    if features_path:
        features_path = str(Path(path).parent / str(features_path))

    return EngineConfig(
        default_direction=str(y.get("default_direction", "rightward")).strip().lower(),
        drop_empty_segments=_as_bool(y.get("drop_empty_segments", True), "drop_empty_segments"),
        strict=_as_bool(y.get("strict", False), "strict"),
        features_path=features_path,
    )
