import json
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from realm.building_types import BuildingType
from realm.city_models import Weather, create_initial_grid, initial_stats
from realm.game_state import get_game_session
from realm.persistence import (
    SAVE_KEY,
    SAVE_VERSION,
    clear_store,
    deserialise_state,
    load_from_store,
    load_game,
    save_game,
    save_to_store,
    serialise_state,
)


@pytest.fixture(autouse=True)
def reset_session():
    session = get_game_session()
    session.reset()
    session.start()
    yield
    get_game_session().reset()


def _sample_city():
    grid = create_initial_grid(6)
    grid = grid.with_tile(grid.tile(2, 4).clone(building_type=BuildingType.LIBRARY, level=3))
    stats = initial_stats().clone(money=-75, day=12, weather=Weather.STORM, time=18.5)
    return grid, stats


def test_store_round_trip():
    grid, stats = _sample_city()
    store = {}

    save_to_store(store, grid, stats)
    restored = load_from_store(store)

    assert SAVE_KEY in store
    assert restored is not None
    restored_grid, restored_stats = restored
    assert restored_grid == grid
    assert restored_stats == stats


def test_missing_entry_loads_nothing():
    assert load_from_store({}) is None


@pytest.mark.parametrize(
    "text",
    [
        "not json at all",
        json.dumps({"version": SAVE_VERSION + 1, "grid": [], "stats": {}}),
        json.dumps({"version": SAVE_VERSION, "stats": {}}),
        json.dumps({"version": SAVE_VERSION, "grid": [[{"x": 1, "y": 0}]], "stats": {}}),
    ],
)
def test_corrupt_entries_are_discarded(text):
    assert deserialise_state(text) is None
    assert load_from_store({SAVE_KEY: text}) is None


def test_clear_store():
    grid, stats = _sample_city()
    store = {"other": "kept"}
    save_to_store(store, grid, stats)

    clear_store(store)
    clear_store(store)

    assert store == {"other": "kept"}


def test_serialised_form_is_versioned_json():
    grid, stats = _sample_city()
    data = json.loads(serialise_state(grid, stats))

    assert data["version"] == SAVE_VERSION
    assert data["stats"]["weather"] == "storm"
    assert data["grid"][4][2]["building_type"] == "GreatLibrary"


def test_save_and_load_session_file(tmp_path):
    session = get_game_session()
    session.apply_tool("Cottage", 1, 1)
    session.tick()
    expected_grid, expected_stats = session.grid, session.stats
    path = tmp_path / "city.json"

    save_game(str(path))
    session.reset()
    load_game(str(path))

    assert session.grid == expected_grid
    assert session.stats == expected_stats


def test_load_game_rejects_other_versions(tmp_path):
    path = tmp_path / "old.json"
    path.write_text(json.dumps({"version": 0, "grid": [], "stats": {}}), encoding="utf-8")

    with pytest.raises(ValueError):
        load_game(str(path))


def test_load_game_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_game(str(tmp_path / "absent.json"))


@pytest.mark.parametrize(
    "content",
    [
        "[1, 2]",
        json.dumps({"version": SAVE_VERSION, "grid": [[{"x": 0, "y": 0}]], "stats": []}),
        json.dumps({"version": SAVE_VERSION, "grid": {"rows": []}, "stats": {}}),
    ],
)
def test_load_game_rejects_malformed_structure(tmp_path, content):
    path = tmp_path / "malformed.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ValueError):
        load_game(str(path))
    assert deserialise_state(content) is None
