import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from realm import config
from realm.actions import (
    ActionError,
    ActionKind,
    Severity,
    build_tile,
    bulldoze_tile,
    execute,
    upgrade_cost,
    upgrade_tile,
)
from realm.building_types import BuildingType
from realm.city_models import GridError, create_initial_grid, initial_stats


@pytest.fixture
def grid():
    return create_initial_grid(5)


@pytest.fixture
def stats():
    return initial_stats()


def test_build_on_empty_land(grid, stats):
    result = build_tile(grid, stats, 2, 3, BuildingType.RESIDENTIAL)

    assert result.success is True
    assert result.kind == ActionKind.BUILD
    assert result.severity == Severity.POSITIVE
    assert result.grid.tile(2, 3).building_type is BuildingType.RESIDENTIAL
    assert result.grid.tile(2, 3).level == 1
    assert result.stats.money == stats.money - 120
    assert result.cost == 120
    assert result.message == "Established Cottage."
    assert grid.tile(2, 3).is_empty


def test_build_without_funds_is_refused(grid):
    poor = initial_stats().clone(money=50)

    result = build_tile(grid, poor, 0, 0, BuildingType.RESIDENTIAL)

    assert result.success is False
    assert result.error == ActionError.INSUFFICIENT_FUNDS
    assert result.severity == Severity.NEGATIVE
    assert result.grid is grid
    assert result.stats == poor
    assert "120g" in result.message


def test_build_on_occupied_land_is_refused(grid, stats):
    built = build_tile(grid, stats, 1, 1, BuildingType.ROAD)
    result = build_tile(built.grid, built.stats, 1, 1, BuildingType.PARK)

    assert result.success is False
    assert result.error == ActionError.ALREADY_OCCUPIED
    assert result.severity == Severity.NEUTRAL
    assert result.grid == built.grid
    assert result.stats == built.stats


def test_build_with_exact_funds_succeeds(grid):
    result = build_tile(grid, initial_stats().clone(money=120), 0, 0, BuildingType.RESIDENTIAL)
    assert result.success is True
    assert result.stats.money == 0


def test_build_rejects_empty_type(grid, stats):
    with pytest.raises(ValueError):
        build_tile(grid, stats, 0, 0, BuildingType.NONE)


def test_upgrade_until_max_level(grid, stats):
    built = build_tile(grid, stats, 2, 2, BuildingType.RESIDENTIAL)

    first = upgrade_tile(built.grid, built.stats, 2, 2)
    assert first.success is True
    assert first.grid.tile(2, 2).level == 2
    assert first.stats.money == built.stats.money - 180
    assert first.message == "Cottage enhanced to Tier 2."

    second = upgrade_tile(first.grid, first.stats, 2, 2)
    assert second.grid.tile(2, 2).level == config.MAX_LEVEL
    assert second.stats.money == first.stats.money - 360

    third = upgrade_tile(second.grid, second.stats, 2, 2)
    assert third.success is False
    assert third.error == ActionError.MAX_LEVEL_REACHED
    assert third.severity == Severity.NEUTRAL
    assert third.grid is second.grid
    assert third.stats == second.stats


def test_upgrade_cost_formula():
    assert upgrade_cost(BuildingType.RESIDENTIAL, 1) == 180
    assert upgrade_cost(BuildingType.ROAD, 1) == 15
    assert upgrade_cost(BuildingType.BAKERY, 2) == 600


def test_upgrade_without_funds(grid, stats):
    built = build_tile(grid, stats, 0, 0, BuildingType.POWER_PLANT)
    broke = built.stats.clone(money=10)

    result = upgrade_tile(built.grid, broke, 0, 0)

    assert result.success is False
    assert result.error == ActionError.INSUFFICIENT_FUNDS
    assert result.severity == Severity.NEGATIVE
    assert result.cost == 1200
    assert result.stats == broke


@pytest.mark.parametrize("building_type", [BuildingType.NONE, BuildingType.ROAD])
def test_only_structures_can_be_upgraded(grid, stats, building_type):
    if building_type != BuildingType.NONE:
        grid = build_tile(grid, stats, 0, 0, building_type).grid
    result = upgrade_tile(grid, stats, 0, 0)

    assert result.success is False
    assert result.error == ActionError.NOT_UPGRADABLE
    assert result.severity == Severity.NEUTRAL


def test_bulldoze_charges_fee_and_resets_level(grid, stats):
    built = build_tile(grid, stats, 3, 3, BuildingType.BAKERY)
    upgraded = upgrade_tile(built.grid, built.stats, 3, 3)

    result = bulldoze_tile(upgraded.grid, upgraded.stats, 3, 3)

    assert result.success is True
    assert result.kind == ActionKind.BULLDOZE
    assert result.grid.tile(3, 3).is_empty
    assert result.grid.tile(3, 3).level == 1
    assert result.stats.money == upgraded.stats.money - config.BULLDOZE_FEE
    assert result.building_type is BuildingType.BAKERY


def test_bulldoze_never_overdraws(grid, stats):
    built = build_tile(grid, stats, 0, 0, BuildingType.ROAD)
    result = bulldoze_tile(built.grid, built.stats.clone(money=5), 0, 0)

    assert result.success is True
    assert result.stats.money == 0
    assert result.cost == 5


def test_bulldoze_empty_land_is_refused(grid, stats):
    result = bulldoze_tile(grid, stats, 4, 4)
    assert result.success is False
    assert result.error == ActionError.ALREADY_EMPTY
    assert result.grid is grid
    assert result.stats is stats


def test_out_of_bounds_raises(grid, stats):
    with pytest.raises(GridError):
        build_tile(grid, stats, 5, 0, BuildingType.ROAD)
    with pytest.raises(GridError):
        bulldoze_tile(grid, stats, 0, -1)


def test_execute_dispatches_on_tool(grid, stats):
    built = execute("Cottage", grid, stats, 1, 1)
    assert built.kind == ActionKind.BUILD and built.success

    upgraded = execute("enhance", built.grid, built.stats, 1, 1)
    assert upgraded.kind == ActionKind.UPGRADE and upgraded.success

    cleared = execute(BuildingType.NONE, upgraded.grid, upgraded.stats, 1, 1)
    assert cleared.kind == ActionKind.BULLDOZE and cleared.success


def test_execute_unknown_tool_raises(grid, stats):
    with pytest.raises(KeyError):
        execute("Skyscraper", grid, stats, 0, 0)


def test_result_payload(grid, stats):
    payload = execute("Tavern", grid, stats, 0, 0).to_payload()
    assert payload == {
        "action": "build",
        "success": True,
        "message": "Established Tavern.",
        "type": "positive",
        "error": None,
        "building_type": "Tavern",
        "level": 1,
        "cost": 250,
    }


def test_execute_without_tool_raises(grid, stats):
    built = execute("Cobblestone", grid, stats, 0, 0)
    with pytest.raises(KeyError):
        execute(None, built.grid, built.stats, 0, 0)
