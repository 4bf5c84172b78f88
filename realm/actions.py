"""Player actions that change what is built on a tile.

Every action returns an :class:`ActionResult`. Expected refusals (occupied
land, empty treasury, ...) are reported through the result and leave the
grid and stats exactly as they were; only malformed requests such as
coordinates outside the grid raise.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from . import config
from .building_catalog import CATALOG, Catalog
from .building_types import BuildingType, is_structure, normalise_building_type
from .city_models import CityStats, Grid


class ActionError(str, Enum):
    ALREADY_OCCUPIED = "already_occupied"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    NOT_UPGRADABLE = "not_upgradable"
    MAX_LEVEL_REACHED = "max_level_reached"
    ALREADY_EMPTY = "already_empty"


class Severity(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class ActionKind(str, Enum):
    BUILD = "build"
    UPGRADE = "upgrade"
    BULLDOZE = "bulldoze"


@dataclass(frozen=True)
class ActionResult:
    """Outcome of an action, consumed by the presentation layer."""

    kind: ActionKind
    success: bool
    grid: Grid
    stats: CityStats
    message: str
    severity: Severity
    error: Optional[ActionError] = None
    building_type: BuildingType = BuildingType.NONE
    level: int = 1
    cost: int = 0

    def to_payload(self) -> Dict[str, object]:
        return {
            "action": self.kind.value,
            "success": self.success,
            "message": self.message,
            "type": self.severity.value,
            "error": self.error.value if self.error else None,
            "building_type": self.building_type.value,
            "level": self.level,
            "cost": self.cost,
        }


def _refuse(
    kind: ActionKind,
    grid: Grid,
    stats: CityStats,
    error: ActionError,
    message: str,
    severity: Severity,
    building_type: BuildingType,
    level: int,
    cost: int = 0,
) -> ActionResult:
    return ActionResult(
        kind=kind,
        success=False,
        grid=grid,
        stats=stats,
        message=message,
        severity=severity,
        error=error,
        building_type=building_type,
        level=level,
        cost=cost,
    )


def upgrade_cost(
    building_type: BuildingType, current_level: int, catalog: Catalog = CATALOG
) -> int:
    return math.floor(catalog[building_type].cost * current_level * config.UPGRADE_COST_MULTIPLIER)


# ---------------------------------------------------------------------------


def build_tile(
    grid: Grid,
    stats: CityStats,
    x: int,
    y: int,
    building_type: BuildingType,
    catalog: Catalog = CATALOG,
) -> ActionResult:
    if building_type == BuildingType.NONE:
        raise ValueError("Clearing land is a bulldoze action, not a build")
    tile = grid.tile(x, y)
    entry = catalog[building_type]

    if not tile.is_empty:
        return _refuse(
            ActionKind.BUILD,
            grid,
            stats,
            ActionError.ALREADY_OCCUPIED,
            "That land is already occupied.",
            Severity.NEUTRAL,
            building_type,
            tile.level,
        )

    if stats.money < entry.cost:
        return _refuse(
            ActionKind.BUILD,
            grid,
            stats,
            ActionError.INSUFFICIENT_FUNDS,
            f"Thy treasury needs {entry.cost}g to establish this {entry.name}.",
            Severity.NEGATIVE,
            building_type,
            tile.level,
            entry.cost,
        )

    new_grid = grid.with_tile(tile.clone(building_type=building_type, level=1))
    new_stats = stats.clone(money=stats.money - entry.cost)
    return ActionResult(
        kind=ActionKind.BUILD,
        success=True,
        grid=new_grid,
        stats=new_stats,
        message=f"Established {entry.name}.",
        severity=Severity.POSITIVE,
        building_type=building_type,
        level=1,
        cost=entry.cost,
    )


def upgrade_tile(
    grid: Grid, stats: CityStats, x: int, y: int, catalog: Catalog = CATALOG
) -> ActionResult:
    tile = grid.tile(x, y)
    building_type = tile.building_type

    if not is_structure(building_type):
        return _refuse(
            ActionKind.UPGRADE,
            grid,
            stats,
            ActionError.NOT_UPGRADABLE,
            "Only structures can be enhanced.",
            Severity.NEUTRAL,
            building_type,
            tile.level,
        )

    if tile.level >= config.MAX_LEVEL:
        return _refuse(
            ActionKind.UPGRADE,
            grid,
            stats,
            ActionError.MAX_LEVEL_REACHED,
            "Structure is already at max magical resonance.",
            Severity.NEUTRAL,
            building_type,
            tile.level,
        )

    cost = upgrade_cost(building_type, tile.level, catalog)
    if stats.money < cost:
        return _refuse(
            ActionKind.UPGRADE,
            grid,
            stats,
            ActionError.INSUFFICIENT_FUNDS,
            f"The treasury lacks the {cost}g required for this rite.",
            Severity.NEGATIVE,
            building_type,
            tile.level,
            cost,
        )

    level = tile.level + 1
    new_grid = grid.with_tile(tile.clone(level=level))
    new_stats = stats.clone(money=stats.money - cost)
    return ActionResult(
        kind=ActionKind.UPGRADE,
        success=True,
        grid=new_grid,
        stats=new_stats,
        message=f"{catalog[building_type].name} enhanced to Tier {level}.",
        severity=Severity.POSITIVE,
        building_type=building_type,
        level=level,
        cost=cost,
    )


def bulldoze_tile(grid: Grid, stats: CityStats, x: int, y: int) -> ActionResult:
    tile = grid.tile(x, y)

    if tile.is_empty:
        return _refuse(
            ActionKind.BULLDOZE,
            grid,
            stats,
            ActionError.ALREADY_EMPTY,
            "The land is already clear.",
            Severity.NEUTRAL,
            BuildingType.NONE,
            tile.level,
        )

    # Demolition never pushes the treasury below zero.
    money = max(0, stats.money - config.BULLDOZE_FEE)
    new_grid = grid.with_tile(tile.clone(building_type=BuildingType.NONE, level=1))
    new_stats = stats.clone(money=money)
    return ActionResult(
        kind=ActionKind.BULLDOZE,
        success=True,
        grid=new_grid,
        stats=new_stats,
        message="Tile cleared by Royal decree.",
        severity=Severity.NEUTRAL,
        building_type=tile.building_type,
        level=1,
        cost=stats.money - money,
    )


def execute(
    tool: BuildingType | str,
    grid: Grid,
    stats: CityStats,
    x: int,
    y: int,
    catalog: Catalog = CATALOG,
) -> ActionResult:
    """Apply the currently selected ``tool`` to the tile at (x, y)."""

    if isinstance(tool, str) and not isinstance(tool, BuildingType):
        if tool.strip().lower() == config.UPGRADE_TOOL.lower():
            return upgrade_tile(grid, stats, x, y, catalog)
    building_type = normalise_building_type(tool)
    if building_type == BuildingType.NONE:
        return bulldoze_tile(grid, stats, x, y)
    return build_tile(grid, stats, x, y, building_type, catalog)
