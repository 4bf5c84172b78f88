"""Centralised configuration for the realm simulation."""
from __future__ import annotations

from typing import Dict, FrozenSet, Tuple

from .building_types import BuildingType

# ---------------------------------------------------------------------------
# Grid and session

GRID_SIZE: int = 15
MAX_LEVEL: int = 3
TICK_INTERVAL_SEC: float = 2.5

INITIAL_MONEY: int = 3000
INITIAL_POPULATION: int = 0
INITIAL_DAY: int = 1
INITIAL_TIME: float = 10.0

# In-game hours advanced per tick; the clock wraps at 24.
TIME_STEP: float = 0.5
HOURS_PER_DAY: float = 24.0

NEWS_FEED_LIMIT = 10

# ---------------------------------------------------------------------------
# Actions

# Selecting this tool upgrades the clicked structure instead of building.
UPGRADE_TOOL = "Enhance"

UPGRADE_COST_MULTIPLIER: float = 1.5
BULLDOZE_FEE: int = 20

# ---------------------------------------------------------------------------
# Happiness and output

BASE_HAPPINESS: int = 75
MISSING_MANA_PENALTY: int = 40
MISSING_ESSENCE_PENALTY: int = 40

HAPPINESS_MIN: int = 0
HAPPINESS_MAX: int = 100

INDUSTRIAL_TYPES: FrozenSet[BuildingType] = frozenset(
    {
        BuildingType.INDUSTRIAL,
        BuildingType.LUMBER_MILL,
        BuildingType.WINDMILL,
    }
)
INDUSTRIAL_RADIUS: int = 3
INDUSTRIAL_PENALTY: int = 30

# effectiveness = BASE + happiness / 100 * SPAN when both utilities flow.
EFFECTIVENESS_BASE: float = 0.2
EFFECTIVENESS_SPAN: float = 0.8
EFFECTIVENESS_FLOOR: float = 0.1

# ---------------------------------------------------------------------------
# Coverage

GUARDS = "guards"
MAGES = "mages"
WISDOM = "wisdom"
NATURE = "nature"
SWEETS = "sweets"

COVERAGE_EMITTERS: Dict[str, FrozenSet[BuildingType]] = {
    GUARDS: frozenset({BuildingType.POLICE_STATION}),
    MAGES: frozenset({BuildingType.FIRE_STATION}),
    WISDOM: frozenset(
        {BuildingType.SCHOOL, BuildingType.LIBRARY, BuildingType.MAGIC_ACADEMY}
    ),
    NATURE: frozenset({BuildingType.PARK, BuildingType.LUMINA_BLOOM}),
    SWEETS: frozenset({BuildingType.BAKERY}),
}

# (bonus when covered, delta when not covered) applied to residential tiles.
COVERAGE_HAPPINESS: Dict[str, Tuple[int, int]] = {
    GUARDS: (15, -20),
    MAGES: (15, -15),
    WISDOM: (20, 0),
    NATURE: (20, 0),
    SWEETS: (12, 0),
}

COVERAGE_CATEGORIES: Tuple[str, ...] = tuple(COVERAGE_EMITTERS)
