"""Service coverage maps.

Every building with a service radius marks the tiles inside a Euclidean disc
around it. Coverage is binary and does not decay with distance: a tile is
either reached by at least one emitter of a category or it is not.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Optional

import numpy as np

from . import config
from .building_catalog import CATALOG, Catalog
from .building_types import BuildingType
from .city_models import Grid

CoverageRules = Mapping[str, frozenset]


@dataclass(frozen=True)
class CoverageMaps:
    """One boolean layer per coverage category, indexed ``[y, x]``."""

    layers: Mapping[str, np.ndarray]

    @property
    def categories(self) -> tuple:
        return tuple(self.layers)

    def covered(self, category: str, x: int, y: int) -> bool:
        layer = self.layers.get(category)
        if layer is None:
            return False
        return bool(layer[y, x])

    def flags_at(self, x: int, y: int) -> Dict[str, bool]:
        return {category: bool(layer[y, x]) for category, layer in self.layers.items()}

    def count(self, category: str) -> int:
        return int(self.layers[category].sum())

    def equals(self, other: "CoverageMaps") -> bool:
        if set(self.layers) != set(other.layers):
            return False
        return all(np.array_equal(layer, other.layers[key]) for key, layer in self.layers.items())


def effective_radius(base_radius: int, level: int) -> int:
    return base_radius + (level - 1)


def disc_mask(size: int, cx: int, cy: int, radius: int) -> np.ndarray:
    """Boolean ``size`` x ``size`` mask of tiles within ``radius`` of (cx, cy)."""

    ys, xs = np.ogrid[:size, :size]
    return (xs - cx) ** 2 + (ys - cy) ** 2 <= radius * radius


def _categories_by_type(rules: CoverageRules) -> Dict[BuildingType, list]:
    lookup: Dict[BuildingType, list] = {}
    for category, emitters in rules.items():
        for building_type in emitters:
            lookup.setdefault(building_type, []).append(category)
    return lookup


def compute_coverage(
    grid: Grid,
    catalog: Catalog = CATALOG,
    rules: Optional[CoverageRules] = None,
) -> CoverageMaps:
    """Return the coverage layers for ``grid``.

    ``rules`` maps each category to the building types that emit it and
    defaults to :data:`config.COVERAGE_EMITTERS`.
    """

    rules = config.COVERAGE_EMITTERS if rules is None else rules
    size = grid.size
    layers = {category: np.zeros((size, size), dtype=bool) for category in rules}
    categories_by_type = _categories_by_type(rules)

    for tile in grid:
        categories = categories_by_type.get(tile.building_type)
        if not categories:
            continue
        base_radius = catalog[tile.building_type].service_radius
        if base_radius is None:
            continue
        mask = disc_mask(size, tile.x, tile.y, effective_radius(base_radius, tile.level))
        for category in categories:
            layers[category] |= mask

    return CoverageMaps(layers=layers)


# ---------------------------------------------------------------------------
# Industrial proximity


def industrial_mask(grid: Grid, industrial_types: frozenset = config.INDUSTRIAL_TYPES) -> np.ndarray:
    mask = np.zeros((grid.size, grid.size), dtype=bool)
    for tile in grid:
        if tile.building_type in industrial_types:
            mask[tile.y, tile.x] = True
    return mask


def has_industrial_nearby(
    mask: np.ndarray,
    x: int,
    y: int,
    radius: int = config.INDUSTRIAL_RADIUS,
) -> bool:
    """True if any industrial tile lies in the square window around (x, y)."""

    window = mask[max(0, y - radius) : y + radius + 1, max(0, x - radius) : x + radius + 1]
    return bool(window.any())
