"""Feature catalogs: the names, types and hierarchy segments are built from.

A `FeatureCatalog` answers two questions for the rest of the engine: what
type a feature has, and which features a node dominates. It also owns the
canonical conversions between the values a caller passes in and the values a
segment stores (`number_form`) or renders (`text_form`).

Catalogs can be built programmatically with `add_feature`, read from a YAML
file with `load_catalog`, or taken from the bundled default geometry with
`default_catalog`.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple
import yaml

from .errors import UnknownFeatureError
from .types import FEATURE_TYPES, FeatureType

__all__ = ["FeatureDef", "FeatureCatalog", "load_catalog", "default_catalog"]

DEFAULT_CATALOG_PATH = Path(__file__).with_name("data") / "features.yaml"

# '*' is accepted everywhere as a spelling of "unset".
_UNSET_TEXT = "*"


@dataclass
class FeatureDef:
    name: str
    type: FeatureType
    children: List[str] = field(default_factory=list)


class FeatureCatalog:
    """
    A registry of feature definitions, keyed by feature name.

    A feature may be listed as the child of more than one node; the default
    geometry places `labial` and `Lingual` under both `Cplace` and `Vplace`.
    """

    def __init__(self, features: Optional[Mapping[str, Mapping[str, Any]]] = None) -> None:
        self._features: Dict[str, FeatureDef] = {}
        for name, spec in (features or {}).items():
            spec = spec or {}
            self.add_feature(name, spec.get("type", "privative"), spec.get("children", ()))

    def add_feature(
        self, name: str, type: FeatureType = "privative", children: Iterable[str] = ()
    ) -> FeatureDef:
        """
        Declares a feature, replacing any earlier declaration of the same name.

        Children do not have to be declared yet; `validate` checks that every
        child eventually resolves.

        Raises:
            ValueError: If `type` is not a recognised feature type, or if a
                        non-node feature is given children.
        """
        if type not in FEATURE_TYPES:
            raise ValueError(f"Invalid type '{type}' for feature '{name}'")
        children = list(children)
        if children and type != "node":
            raise ValueError(f"Only node features can have children ('{name}' is {type})")
        feature = FeatureDef(name=name, type=type, children=children)
        self._features[name] = feature
        return feature

    def drop_feature(self, name: str) -> None:
        self._features.pop(name, None)
        for feature in self._features.values():
            if name in feature.children:
                feature.children.remove(name)

    def has(self, name: str) -> bool:
        return name in self._features

    __contains__ = has

    def feature(self, name: str) -> FeatureDef:
        try:
            return self._features[name]
        except KeyError:
            raise UnknownFeatureError(name) from None

    def type(self, name: str) -> FeatureType:
        return self.feature(name).type

    def children(self, name: str) -> Tuple[str, ...]:
        return tuple(self.feature(name).children)

    def parents(self, name: str) -> Tuple[str, ...]:
        self.feature(name)
        return tuple(f.name for f in self._features.values() if name in f.children)

    def features(self) -> List[str]:
        return list(self._features)

    def validate(self) -> None:
        """Raises `ValueError` if a node names a child that was never declared."""
        for feature in self._features.values():
            missing = [child for child in feature.children if child not in self._features]
            if missing:
                raise ValueError(
                    f"Node '{feature.name}' has undeclared children: {', '.join(missing)}"
                )

    def number_form(self, feature: str, value: Any) -> Any:
        """
        Converts a caller-supplied value into the form a segment stores.

        The conversion depends on the feature type:

        *   privative: `1` for any true value, otherwise `None`.
        *   binary: `1` for true values and `"+"`, `0` for false values and `"-"`.
        *   scalar: the value unchanged.
        *   node: mappings unchanged, anything else `None`.

        `None` and `"*"` always mean unset and convert to `None`.
        """
        kind = self.type(feature)
        if value is None or (isinstance(value, str) and value == _UNSET_TEXT):
            return None
        if kind == "privative":
            return 1 if value else None
        if kind == "binary":
            if value == "-":
                return 0
            if value == "+":
                return 1
            return 1 if value else 0
        if kind == "node":
            return value if isinstance(value, Mapping) else None
        return value

    def text_form(self, feature: str, value: Any) -> str:
        """The inverse of `number_form`: `"*"` for unset, `"+"`/`"-"` for binary."""
        kind = self.type(feature)
        if value is None:
            return _UNSET_TEXT
        if kind in ("privative", "node"):
            return ""
        if kind == "binary":
            return "+" if value else "-"
        return str(value)


def load_catalog(path: str | Path) -> FeatureCatalog:
    """
    Loads a feature catalog from a YAML file.

    The file must map feature names to mappings with a `type` key and, for
    nodes, a `children` list.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the YAML cannot be parsed or describes an invalid catalog.
        TypeError: If the root of the document, or any feature entry, is not a
                   dictionary.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            y = yaml.safe_load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Feature catalog not found at: {path}")
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML file at {path}: {e}")

    if not isinstance(y, dict):
        raise TypeError(f"Feature catalog {path} must be a dictionary.")

    catalog = FeatureCatalog()
    for name, spec in y.items():
        if spec is None:
            spec = {}
        if not isinstance(spec, dict):
            raise TypeError(f"Entry for feature '{name}' in {path} is not a dictionary.")
        catalog.add_feature(str(name), spec.get("type", "privative"), spec.get("children") or ())
    catalog.validate()
    return catalog


def default_catalog() -> FeatureCatalog:
    """Returns a fresh copy of the bundled default feature geometry."""
    return load_catalog(DEFAULT_CATALOG_PATH)
