"""Mana and essence supply/demand allocation."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Tuple

from .building_catalog import CATALOG, Catalog
from .building_types import is_structure
from .city_models import Grid

Position = Tuple[int, int]


@dataclass
class UtilityAllocation:
    """Outcome of one allocation pass over a grid."""

    mana_supply: float = 0.0
    essence_supply: float = 0.0
    mana_used: float = 0.0
    essence_used: float = 0.0
    mana_used_by_tile: Dict[Position, float] = field(default_factory=dict)
    essence_used_by_tile: Dict[Position, float] = field(default_factory=dict)
    has_mana: Dict[Position, bool] = field(default_factory=dict)
    has_essence: Dict[Position, bool] = field(default_factory=dict)

    def satisfied(self, x: int, y: int) -> Tuple[bool, bool]:
        """Return ``(has_mana, has_essence)`` for the tile at (x, y)."""

        return self.has_mana.get((x, y), True), self.has_essence.get((x, y), True)


def total_supply(grid: Grid, catalog: Catalog = CATALOG) -> Tuple[float, float]:
    mana = 0.0
    essence = 0.0
    for tile in grid:
        entry = catalog[tile.building_type]
        if not entry.is_utility:
            continue
        mana += entry.mana_output * tile.level
        essence += entry.essence_output * tile.level
    return mana, essence


def allocate(grid: Grid, catalog: Catalog = CATALOG) -> UtilityAllocation:
    """Distribute the grid's mana and essence supply over its consumers.

    Consumers are served greedily in row-major order. A tile whose demand
    would exceed what is left goes without and its demand is not counted,
    so a smaller tile further along may still be served. Earlier tiles win
    whenever supply is short; nothing is rebalanced afterwards.
    """

    mana_supply, essence_supply = total_supply(grid, catalog)
    result = UtilityAllocation(mana_supply=mana_supply, essence_supply=essence_supply)

    for tile in grid:
        position = (tile.x, tile.y)
        if not is_structure(tile.building_type):
            result.has_mana[position] = True
            result.has_essence[position] = True
            continue

        entry = catalog[tile.building_type]
        mana_req = entry.mana_req * tile.level
        essence_req = entry.essence_req * tile.level

        has_mana = result.mana_used + mana_req <= mana_supply
        has_essence = result.essence_used + essence_req <= essence_supply
        if has_mana:
            result.mana_used += mana_req
            result.mana_used_by_tile[position] = mana_req
        if has_essence:
            result.essence_used += essence_req
            result.essence_used_by_tile[position] = essence_req

        result.has_mana[position] = has_mana
        result.has_essence[position] = has_essence

    return result
