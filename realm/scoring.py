"""Happiness and economic output of individual tiles."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from . import config
from .building_models import BuildingCatalogEntry
from .building_types import BuildingType
from .city_models import Tile


@dataclass(frozen=True)
class TileScore:
    happiness: int
    effectiveness: float
    income: float
    population: float


def clamp_happiness(value: float) -> int:
    return int(max(config.HAPPINESS_MIN, min(config.HAPPINESS_MAX, value)))


def effectiveness(happiness: float, has_mana: bool, has_essence: bool) -> float:
    """Output multiplier in [EFFECTIVENESS_FLOOR, 1].

    Tiles missing either utility are throttled to the floor but still
    produce something.
    """

    if not (has_mana and has_essence):
        return config.EFFECTIVENESS_FLOOR
    return config.EFFECTIVENESS_BASE + (happiness / 100.0) * config.EFFECTIVENESS_SPAN


def score_happiness(
    building_type: BuildingType,
    has_mana: bool,
    has_essence: bool,
    coverage_flags: Mapping[str, bool],
    industrial_nearby: bool,
    coverage_effects: Optional[Mapping[str, Tuple[int, int]]] = None,
) -> int:
    effects = config.COVERAGE_HAPPINESS if coverage_effects is None else coverage_effects

    happiness = config.BASE_HAPPINESS
    if not has_mana:
        happiness -= config.MISSING_MANA_PENALTY
    if not has_essence:
        happiness -= config.MISSING_ESSENCE_PENALTY

    if building_type == BuildingType.RESIDENTIAL:
        for category, (bonus, malus) in effects.items():
            happiness += bonus if coverage_flags.get(category, False) else malus
        if industrial_nearby:
            happiness -= config.INDUSTRIAL_PENALTY

    return clamp_happiness(happiness)


def score_tile(
    tile: Tile,
    entry: BuildingCatalogEntry,
    has_mana: bool,
    has_essence: bool,
    coverage_flags: Mapping[str, bool],
    industrial_nearby: bool,
) -> TileScore:
    """Score a built, non-road tile."""

    happiness = score_happiness(
        tile.building_type, has_mana, has_essence, coverage_flags, industrial_nearby
    )
    factor = effectiveness(happiness, has_mana, has_essence)
    return TileScore(
        happiness=happiness,
        effectiveness=factor,
        income=entry.income_gen * tile.level * factor,
        population=entry.pop_gen * tile.level * factor,
    )
