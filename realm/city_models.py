"""Grid, tile and city statistics records.

All records are immutable: the simulation and the action engine build new
tiles, grids and stats instead of editing the ones they receive, so any
previous snapshot stays valid for as long as a caller holds on to it.
"""
from __future__ import annotations

from collections import Counter
from dataclasses import asdict, dataclass, field, replace
from enum import Enum
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from . import config
from .building_types import BuildingType, normalise_building_type


class GridError(ValueError):
    """Raised when a grid or tile violates its structural invariants."""


class Weather(str, Enum):
    CLEAR = "clear"
    RAIN = "rain"
    STORM = "storm"


def _empty_coverage() -> Dict[str, bool]:
    return {category: False for category in config.COVERAGE_CATEGORIES}


@dataclass(frozen=True, slots=True)
class Tile:
    """Single grid cell."""

    x: int
    y: int
    building_type: BuildingType = BuildingType.NONE
    level: int = 1
    has_mana: bool = True
    has_essence: bool = True
    coverage: Mapping[str, bool] = field(default_factory=_empty_coverage)
    happiness: int = 100

    def __post_init__(self) -> None:
        if not 1 <= self.level <= config.MAX_LEVEL:
            raise GridError(
                f"Tile ({self.x}, {self.y}) level {self.level} outside 1..{config.MAX_LEVEL}"
            )
        if not config.HAPPINESS_MIN <= self.happiness <= config.HAPPINESS_MAX:
            raise GridError(f"Tile ({self.x}, {self.y}) happiness {self.happiness} out of range")

    # ------------------------------------------------------------------
    @property
    def is_empty(self) -> bool:
        return self.building_type == BuildingType.NONE

    @property
    def is_road(self) -> bool:
        return self.building_type == BuildingType.ROAD

    @property
    def has_guards(self) -> bool:
        return bool(self.coverage.get(config.GUARDS, False))

    @property
    def has_magic_safety(self) -> bool:
        return bool(self.coverage.get(config.MAGES, False))

    @property
    def has_wisdom(self) -> bool:
        return bool(self.coverage.get(config.WISDOM, False))

    @property
    def has_nature(self) -> bool:
        return bool(self.coverage.get(config.NATURE, False))

    @property
    def has_sweets(self) -> bool:
        return bool(self.coverage.get(config.SWEETS, False))

    def clone(self, **changes: object) -> "Tile":
        return replace(self, **changes)

    # ------------------------------------------------------------------
    def to_dict(self) -> Dict[str, object]:
        return {
            "x": self.x,
            "y": self.y,
            "building_type": self.building_type.value,
            "level": self.level,
            "has_mana": self.has_mana,
            "has_essence": self.has_essence,
            "coverage": dict(self.coverage),
            "happiness": self.happiness,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> "Tile":
        coverage = _empty_coverage()
        raw_coverage = data.get("coverage")
        if isinstance(raw_coverage, Mapping):
            coverage.update({str(key): bool(value) for key, value in raw_coverage.items()})
        return cls(
            x=int(data["x"]),
            y=int(data["y"]),
            building_type=normalise_building_type(data.get("building_type", BuildingType.NONE)),
            level=int(data.get("level", 1)),
            has_mana=bool(data.get("has_mana", True)),
            has_essence=bool(data.get("has_essence", True)),
            coverage=coverage,
            happiness=int(data.get("happiness", 100)),
        )


class Grid:
    """Fixed-size square grid of tiles, addressed as ``tile(x, y)``."""

    __slots__ = ("_rows",)

    def __init__(self, rows: Sequence[Sequence[Tile]]) -> None:
        self._rows: Tuple[Tuple[Tile, ...], ...] = tuple(tuple(row) for row in rows)
        self._validate()

    def _validate(self) -> None:
        size = len(self._rows)
        if size == 0:
            raise GridError("Grid must contain at least one row")
        for y, row in enumerate(self._rows):
            if len(row) != size:
                raise GridError(f"Row {y} has {len(row)} tiles, expected {size}")
            for x, tile in enumerate(row):
                if tile.x != x or tile.y != y:
                    raise GridError(
                        f"Tile at position ({x}, {y}) reports coordinates ({tile.x}, {tile.y})"
                    )

    # ------------------------------------------------------------------
    @property
    def size(self) -> int:
        return len(self._rows)

    @property
    def rows(self) -> Tuple[Tuple[Tile, ...], ...]:
        return self._rows

    def __iter__(self) -> Iterator[Tile]:
        """Iterate tiles in row-major order."""

        for row in self._rows:
            yield from row

    def __len__(self) -> int:
        return self.size * self.size

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return self._rows == other._rows

    def __repr__(self) -> str:
        built = sum(1 for tile in self if not tile.is_empty)
        return f"Grid(size={self.size}, built={built})"

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.size and 0 <= y < self.size

    def tile(self, x: int, y: int) -> Tile:
        if not self.in_bounds(x, y):
            raise GridError(f"Coordinates ({x}, {y}) are outside the {self.size}x{self.size} grid")
        return self._rows[y][x]

    def with_tile(self, tile: Tile) -> "Grid":
        """Return a new grid with ``tile`` placed at its own coordinates."""

        if not self.in_bounds(tile.x, tile.y):
            raise GridError(f"Coordinates ({tile.x}, {tile.y}) are outside the grid")
        rows: List[Tuple[Tile, ...]] = list(self._rows)
        row = list(rows[tile.y])
        row[tile.x] = tile
        rows[tile.y] = tuple(row)
        return Grid(rows)

    def building_counts(self) -> Dict[BuildingType, int]:
        counts = Counter(tile.building_type for tile in self if not tile.is_empty)
        return dict(counts)

    # ------------------------------------------------------------------
    def to_list(self) -> List[List[Dict[str, object]]]:
        return [[tile.to_dict() for tile in row] for row in self._rows]

    @classmethod
    def from_list(cls, data: Sequence[Sequence[Mapping[str, object]]]) -> "Grid":
        return cls([[Tile.from_dict(entry) for entry in row] for row in data])


def create_initial_grid(size: int = config.GRID_SIZE) -> Grid:
    """Return an empty ``size`` x ``size`` grid."""

    if size <= 0:
        raise GridError("Grid size must be positive")
    return Grid([[Tile(x=x, y=y) for x in range(size)] for y in range(size)])


@dataclass(frozen=True)
class CityStats:
    """City-wide aggregates, recomputed or advanced every tick."""

    money: int = config.INITIAL_MONEY
    population: int = config.INITIAL_POPULATION
    day: int = config.INITIAL_DAY
    happiness: int = 100
    mana_supply: float = 0.0
    essence_supply: float = 0.0
    mana_usage: float = 0.0
    essence_usage: float = 0.0
    maintenance_total: int = 0
    income_total: int = 0
    weather: Weather = Weather.CLEAR
    time: float = config.INITIAL_TIME

    def clone(self, **changes: object) -> "CityStats":
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, object]:
        data = asdict(self)
        data["weather"] = self.weather.value
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> "CityStats":
        defaults = cls()
        weather: Optional[object] = data.get("weather", defaults.weather.value)
        return cls(
            money=int(data.get("money", defaults.money)),
            population=max(0, int(data.get("population", defaults.population))),
            day=int(data.get("day", defaults.day)),
            happiness=int(data.get("happiness", defaults.happiness)),
            mana_supply=float(data.get("mana_supply", 0.0)),
            essence_supply=float(data.get("essence_supply", 0.0)),
            mana_usage=float(data.get("mana_usage", 0.0)),
            essence_usage=float(data.get("essence_usage", 0.0)),
            maintenance_total=int(data.get("maintenance_total", 0)),
            income_total=int(data.get("income_total", 0)),
            weather=Weather(weather),
            time=float(data.get("time", defaults.time)) % config.HOURS_PER_DAY,
        )


def initial_stats() -> CityStats:
    return CityStats()
