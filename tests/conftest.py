"""Shared fixtures: a feature catalog and a tiny symbol table for words."""
from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, Dict, List

import pytest


def _ensure_project_root_on_path() -> None:
    project_root = Path(__file__).resolve().parents[1]
    if str(project_root) not in sys.path:
        sys.path.insert(0, str(project_root))


_ensure_project_root_on_path()

from phonorules.features import FeatureCatalog, default_catalog  # noqa: E402
from phonorules.segment import Segment  # noqa: E402

# Just enough of a symbol inventory to spell test words.
SYMBOLS: Dict[str, Dict[str, object]] = {
    "b": {"labial": 1, "voice": 1},
    "p": {"labial": 1},
    "d": {"voice": 1, "anterior": 1},
    "t": {"anterior": 1},
    "s": {"anterior": 1, "continuant": 1},
    "k": {"dorsal": 1},
    "n": {"nasal": 1, "sonorant": 1, "voice": 1, "anterior": 1},
    "l": {"lateral": 1, "sonorant": 1, "voice": 1, "anterior": 1},
    "a": {"vocoid": 1, "sonorant": 1, "voice": 1, "aperture": 3},
    "e": {"vocoid": 1, "sonorant": 1, "voice": 1, "aperture": 2, "anterior": 0},
    "i": {"vocoid": 1, "sonorant": 1, "voice": 1, "aperture": 1, "anterior": 0},
    "o": {"vocoid": 1, "sonorant": 1, "voice": 1, "aperture": 2, "dorsal": 1, "labial": 1},
    "u": {"vocoid": 1, "sonorant": 1, "voice": 1, "aperture": 1, "dorsal": 1, "labial": 1},
    "m": {"nasal": 1, "sonorant": 1, "voice": 1, "labial": 1},
    "r": {"sonorant": 1, "voice": 1, "anterior": 1, "continuant": 1},
    "@": {"vocoid": 1, "sonorant": 1, "voice": 1, "aperture": 2},
}


@pytest.fixture
def catalog() -> FeatureCatalog:
    features = default_catalog()
    features.add_feature("DOM", "privative")
    return features


@pytest.fixture
def make_segment(catalog: FeatureCatalog) -> Callable[[str], Segment]:
    def _factory(symbol: str) -> Segment:
        return Segment(catalog, SYMBOLS[symbol])

    return _factory


@pytest.fixture
def make_word(make_segment) -> Callable[[str], List[Segment]]:
    def _factory(spelling: str) -> List[Segment]:
        return [make_segment(symbol) for symbol in spelling]

    return _factory
