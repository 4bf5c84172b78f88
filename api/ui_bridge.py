"""Public API between the UI layer and the simulation."""
from __future__ import annotations

import json
from typing import Dict, Mapping

from realm.building_catalog import CATALOG
from realm.city_models import GridError
from realm.game_state import (
    GoalNotCompletedError,
    NoActiveGoalError,
    SessionNotStartedError,
    get_game_session,
)
from realm.goals import goal_from_payload, news_from_payload
from realm.persistence import load_game as realm_load_game, save_game as realm_save_game
from realm.scheduler import ensure_tick_loop, stop_tick_loop


# ---------------------------------------------------------------------------
# Response helpers


def _success_response(**payload: object) -> Dict[str, object]:
    response: Dict[str, object] = {"ok": True}
    response.update(payload)
    return response


def _error_response(
    code: str, message: str, *, http_status: int | None = None
) -> Dict[str, object]:
    payload: Dict[str, object] = {
        "ok": False,
        "error_code": code,
        "error_message": message,
        "error": message,
    }
    if http_status is not None:
        payload["http_status"] = int(http_status)
    return payload


def _should_reset(flag: object) -> bool:
    if flag is None:
        return True
    if isinstance(flag, str):
        return flag.strip().lower() not in {"0", "false", "no"}
    return bool(flag)


def _error_with_metadata(code: str, message: str, http_status: int) -> Dict[str, object]:
    error = _error_response(code, message, http_status=http_status)
    error.update(get_game_session().response_metadata())
    return error


# ---------------------------------------------------------------------------
# Lifecycle


def init_game(force_reset: object = None) -> Dict[str, object]:
    """Initialise or reset the city using configuration defaults."""

    session = get_game_session()
    if _should_reset(force_reset):
        stop_tick_loop()
        session.reset()
    return _success_response(**session.snapshot())


def start_game(run_loop: object = False) -> Dict[str, object]:
    """Mark the session as started, optionally launching the tick loop."""

    session = get_game_session()
    session.start()
    if run_loop is not None and _should_reset(run_loop):
        ensure_tick_loop()
    return _success_response(**session.snapshot())


def tick() -> Dict[str, object]:
    """Run a single simulation tick immediately."""

    session = get_game_session()
    session.tick()
    return _success_response(**session.snapshot())


def get_state() -> Dict[str, object]:
    return _success_response(**get_game_session().snapshot())


def get_catalog() -> Dict[str, object]:
    entries = [CATALOG[building_type].to_payload() for building_type in CATALOG]
    return _success_response(building_types=entries)


# ---------------------------------------------------------------------------
# Tile interactions


def apply_tool(x: int, y: int, tool: str) -> Dict[str, object]:
    """Apply ``tool`` to the tile at (x, y).

    Refused actions (occupied land, empty treasury, ...) still return
    ``ok: True``; the outcome is carried in ``result``.
    """

    session = get_game_session()
    try:
        result = session.apply_tool(tool, int(x), int(y))
    except SessionNotStartedError as exc:
        return _error_with_metadata("not_started", str(exc), 409)
    except GridError as exc:
        return _error_with_metadata("invalid_tile", str(exc), 400)
    except (TypeError, ValueError) as exc:
        return _error_with_metadata("invalid_request", str(exc), 400)
    except KeyError as exc:
        message = exc.args[0] if exc.args else str(exc)
        return _error_with_metadata("invalid_tool", str(message), 400)
    return _success_response(result=result.to_payload(), **session.snapshot())


def set_weather(weather: str) -> Dict[str, object]:
    session = get_game_session()
    try:
        session.set_weather(str(weather or "").strip().lower())
    except ValueError as exc:
        return _error_with_metadata("invalid_weather", str(exc), 400)
    return _success_response(**session.snapshot())


# ---------------------------------------------------------------------------
# Quests and news


def _as_mapping(payload: object) -> Mapping[str, object]:
    if isinstance(payload, str):
        payload = json.loads(payload)
    if not isinstance(payload, Mapping):
        raise ValueError("Payload must be an object")
    return payload


def set_goal(payload: object) -> Dict[str, object]:
    """Install a quest proposed by the advisor; ``None`` clears it."""

    session = get_game_session()
    if payload is None:
        session.set_goal(None)
        return _success_response(**session.snapshot())
    try:
        goal = goal_from_payload(_as_mapping(payload))
    except ValueError as exc:
        return _error_with_metadata("invalid_goal", str(exc), 400)
    session.set_goal(goal)
    return _success_response(**session.snapshot())


def claim_reward() -> Dict[str, object]:
    session = get_game_session()
    try:
        reward = session.claim_goal_reward()
    except NoActiveGoalError as exc:
        return _error_with_metadata("no_active_goal", str(exc), 404)
    except GoalNotCompletedError as exc:
        error = _error_with_metadata(
            "goal_not_completed",
            f"Quest progress {exc.current}/{exc.goal.target_value}",
            409,
        )
        error["current_value"] = exc.current
        error["target_value"] = exc.goal.target_value
        return error
    return _success_response(reward=reward, **session.snapshot())


def add_news(payload: object) -> Dict[str, object]:
    session = get_game_session()
    try:
        item = news_from_payload(_as_mapping(payload))
    except ValueError as exc:
        return _error_with_metadata("invalid_news", str(exc), 400)
    session.add_news(item)
    return _success_response(news=session.list_news(), **session.response_metadata())


# ---------------------------------------------------------------------------
# Persistence wrappers


def save_game(path: str) -> Dict[str, object]:
    try:
        realm_save_game(path)
    except OSError as exc:
        return _error_with_metadata("save_failed", str(exc), 500)
    return _success_response(path=path, **get_game_session().response_metadata())


def load_game(path: str) -> Dict[str, object]:
    try:
        realm_load_game(path)
    except FileNotFoundError:
        return _error_with_metadata("save_missing", "No saved game found", 404)
    except (KeyError, TypeError, ValueError) as exc:
        return _error_with_metadata("load_failed", str(exc), 400)
    return _success_response(**get_game_session().snapshot())
