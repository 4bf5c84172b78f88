"""Tick orchestration: one simulated step over a grid and its stats."""
from __future__ import annotations

import logging
import math
from typing import List, Tuple

from . import config
from .allocation import allocate
from .building_catalog import CATALOG, Catalog
from .building_types import BuildingType, is_structure
from .city_models import CityStats, Grid, Tile
from .coverage import compute_coverage, has_industrial_nearby, industrial_mask
from .scoring import score_tile


logger = logging.getLogger(__name__)


def total_maintenance(grid: Grid, catalog: Catalog = CATALOG) -> float:
    return sum(catalog[tile.building_type].maintenance * tile.level for tile in grid)


def advance_clock(time: float, step: float = config.TIME_STEP) -> float:
    return (time + step) % config.HOURS_PER_DAY


def calculate_tick(
    grid: Grid, stats: CityStats, catalog: Catalog = CATALOG
) -> Tuple[Grid, CityStats]:
    """Return the grid and stats one tick after ``grid`` / ``stats``.

    Building types and levels are carried over untouched; only the operating
    state of each tile (utilities, coverage, happiness) is recomputed.
    """

    coverage = compute_coverage(grid, catalog)
    allocation = allocate(grid, catalog)
    industry = industrial_mask(grid)
    maintenance = total_maintenance(grid, catalog)

    income = 0.0
    growth = 0.0
    residential_happiness = 0
    residential_count = 0

    rows: List[List[Tile]] = []
    for source_row in grid.rows:
        row: List[Tile] = []
        for tile in source_row:
            flags = coverage.flags_at(tile.x, tile.y)
            if not is_structure(tile.building_type):
                row.append(
                    tile.clone(has_mana=True, has_essence=True, coverage=flags, happiness=100)
                )
                continue

            has_mana, has_essence = allocation.satisfied(tile.x, tile.y)
            is_residential = tile.building_type == BuildingType.RESIDENTIAL
            nearby = is_residential and has_industrial_nearby(industry, tile.x, tile.y)
            score = score_tile(
                tile, catalog[tile.building_type], has_mana, has_essence, flags, nearby
            )
            income += score.income
            growth += score.population
            if is_residential:
                residential_happiness += score.happiness
                residential_count += 1

            row.append(
                tile.clone(
                    has_mana=has_mana,
                    has_essence=has_essence,
                    coverage=flags,
                    happiness=score.happiness,
                )
            )
        rows.append(row)

    average_happiness = (
        residential_happiness / residential_count if residential_count else 100
    )

    new_stats = stats.clone(
        money=stats.money + math.floor(income - maintenance),
        population=max(0, stats.population + math.floor(growth)),
        happiness=math.floor(average_happiness),
        mana_supply=allocation.mana_supply,
        essence_supply=allocation.essence_supply,
        mana_usage=allocation.mana_used,
        essence_usage=allocation.essence_used,
        income_total=math.floor(income),
        maintenance_total=math.floor(maintenance),
        day=stats.day + 1,
        time=advance_clock(stats.time),
    )

    logger.debug(
        "Tick day=%s money=%s income=%.1f maintenance=%.1f population=%s happiness=%s mana=%.0f/%.0f essence=%.0f/%.0f",
        new_stats.day,
        new_stats.money,
        income,
        maintenance,
        new_stats.population,
        new_stats.happiness,
        allocation.mana_used,
        allocation.mana_supply,
        allocation.essence_used,
        allocation.essence_supply,
    )
    return Grid(rows), new_stats
