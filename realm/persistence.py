"""Persistence helpers to save and load the city."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, MutableMapping, Optional, Tuple

from .city_models import CityStats, Grid
from .game_state import get_game_session


logger = logging.getLogger(__name__)

SAVE_KEY = "skymetropolis_save_v1"
SAVE_VERSION = 1

Snapshot = Tuple[Grid, CityStats]


def state_to_dict(grid: Grid, stats: CityStats) -> Dict[str, Any]:
    return {
        "version": SAVE_VERSION,
        "grid": grid.to_list(),
        "stats": stats.to_dict(),
    }


def state_from_dict(data: object) -> Snapshot:
    if not isinstance(data, Mapping):
        raise ValueError("Save data must be an object")
    if data.get("version") != SAVE_VERSION:
        raise ValueError("Incompatible save version")
    grid_data = data.get("grid")
    stats_data = data.get("stats")
    if not isinstance(stats_data, Mapping):
        raise ValueError("Save stats must be an object")
    if not isinstance(grid_data, list) or not all(
        isinstance(row, list) and all(isinstance(entry, Mapping) for entry in row)
        for row in grid_data
    ):
        raise ValueError("Save grid must be a list of rows of tile objects")
    return Grid.from_list(grid_data), CityStats.from_dict(stats_data)


def serialise_state(grid: Grid, stats: CityStats) -> str:
    return json.dumps(state_to_dict(grid, stats), ensure_ascii=False)


def deserialise_state(text: str) -> Optional[Snapshot]:
    """Return the saved grid and stats, or ``None`` if ``text`` is unusable."""

    try:
        return state_from_dict(json.loads(text))
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        logger.warning("Discarding unreadable save: %s", exc)
        return None


# ---------------------------------------------------------------------------
# Key-value stores


def save_to_store(store: MutableMapping[str, str], grid: Grid, stats: CityStats) -> None:
    store[SAVE_KEY] = serialise_state(grid, stats)


def load_from_store(store: Mapping[str, str]) -> Optional[Snapshot]:
    text = store.get(SAVE_KEY)
    if not text:
        return None
    return deserialise_state(text)


def clear_store(store: MutableMapping[str, str]) -> None:
    store.pop(SAVE_KEY, None)


# ---------------------------------------------------------------------------
# Session files


def save_game(path: str) -> None:
    """Serialise the current session to ``path`` in JSON format."""

    session = get_game_session()
    with session._lock:
        data = state_to_dict(session.grid, session.stats)
    with open(Path(path), "w", encoding="utf-8") as fh:
        json.dump(data, fh, ensure_ascii=False, indent=2)
    logger.info("Game saved to %s", path)


def load_game(path: str) -> None:
    """Restore a previously saved session from ``path``."""

    with open(Path(path), "r", encoding="utf-8") as fh:
        data = json.load(fh)
    grid, stats = state_from_dict(data)
    get_game_session().load_state(grid, stats)
