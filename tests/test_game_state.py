import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from realm import config
from realm.actions import ActionError
from realm.building_types import BuildingType
from realm.city_models import GridError, Weather, create_initial_grid, initial_stats
from realm.game_state import (
    GameSession,
    GoalNotCompletedError,
    NoActiveGoalError,
    SessionNotStartedError,
    get_game_session,
)
from realm.goals import Goal, GoalTarget, NewsItem


@pytest.fixture(autouse=True)
def reset_session():
    session = get_game_session()
    session.reset()
    session.start()
    yield
    session.reset()


def test_session_is_a_singleton():
    assert get_game_session() is GameSession.get_instance()


def test_reset_restores_initial_city():
    session = get_game_session()
    session.apply_tool("Cottage", 0, 0)
    session.tick()
    session.reset()

    assert session.grid == create_initial_grid(config.GRID_SIZE)
    assert session.stats == initial_stats()
    assert session.started is False
    assert session.goal is None
    assert session.list_news() == []


def test_tick_advances_day_and_version():
    session = get_game_session()
    version = session.version

    stats = session.tick()

    assert stats.day == 2
    assert session.stats is stats
    assert session.version == version + 1


def test_successful_build_replaces_state():
    session = get_game_session()
    result = session.apply_tool("Cottage", 4, 5)

    assert result.success is True
    assert session.grid.tile(4, 5).building_type is BuildingType.RESIDENTIAL
    assert session.stats.money == config.INITIAL_MONEY - 120
    # successful builds stay off the news feed
    assert session.list_news() == []


def test_refused_action_is_reported_in_news():
    session = get_game_session()
    session.apply_tool("Cottage", 0, 0)
    grid_before = session.grid
    stats_before = session.stats

    result = session.apply_tool("Tavern", 0, 0)

    assert result.error == ActionError.ALREADY_OCCUPIED
    assert session.grid is grid_before
    assert session.stats is stats_before
    news = session.list_news()
    assert news[-1]["text"] == "That land is already occupied."
    assert news[-1]["type"] == "neutral"


def test_upgrade_is_announced():
    session = get_game_session()
    session.apply_tool("Cottage", 0, 0)
    session.apply_tool(config.UPGRADE_TOOL, 0, 0)

    assert session.grid.tile(0, 0).level == 2
    assert session.list_news()[-1]["type"] == "positive"


def test_apply_tool_out_of_bounds_raises():
    with pytest.raises(GridError):
        get_game_session().apply_tool("Cottage", config.GRID_SIZE, 0)


def test_news_feed_is_bounded():
    session = get_game_session()
    for index in range(config.NEWS_FEED_LIMIT + 5):
        session.add_news(NewsItem(text=f"item {index}"))

    news = session.list_news()
    assert len(news) == config.NEWS_FEED_LIMIT
    assert news[0]["text"] == "item 5"


def test_set_weather():
    session = get_game_session()
    assert session.set_weather("rain") is Weather.RAIN
    assert session.stats.weather is Weather.RAIN
    with pytest.raises(ValueError):
        session.set_weather("fog")


def test_goal_completes_on_tick_and_pays_out():
    session = get_game_session()
    session.apply_tool("Cottage", 0, 0)
    session.set_goal(Goal("Raise two buildings", GoalTarget.BUILDING_COUNT, 2, 500))
    assert session.goal.completed is False

    session.apply_tool("Bakery", 1, 0)
    session.tick()
    assert session.goal.completed is True

    money = session.stats.money
    assert session.claim_goal_reward() == 500
    assert session.stats.money == money + 500
    assert session.goal is None
    assert session.list_news()[-1]["type"] == "positive"


def test_goal_already_met_completes_immediately():
    session = get_game_session()
    session.set_goal(Goal("Hold the treasury", GoalTarget.MONEY, config.INITIAL_MONEY, 100))
    assert session.goal.completed is True
    assert session.goal_progress()["current_value"] == config.INITIAL_MONEY


def test_claim_without_goal_raises():
    with pytest.raises(NoActiveGoalError):
        get_game_session().claim_goal_reward()


def test_claim_unfinished_goal_raises():
    session = get_game_session()
    session.set_goal(Goal("Grow", GoalTarget.POPULATION, 1000, 100))

    with pytest.raises(GoalNotCompletedError) as excinfo:
        session.claim_goal_reward()

    assert excinfo.value.current == 0
    assert session.goal is not None
    assert session.stats.money == config.INITIAL_MONEY


def test_load_state_replaces_city():
    session = get_game_session()
    grid = create_initial_grid(6)
    stats = initial_stats().clone(day=40, money=12)

    session.load_state(grid, stats)

    assert session.grid is grid
    assert session.stats.day == 40
    session.reset()
    assert session.grid.size == config.GRID_SIZE


def test_snapshot_contains_state_and_metadata():
    session = get_game_session()
    session.start()
    snapshot = session.snapshot()

    assert snapshot["started"] is True
    assert len(snapshot["grid"]) == config.GRID_SIZE
    assert snapshot["stats"]["money"] == config.INITIAL_MONEY
    assert snapshot["goal"] is None
    assert snapshot["news"] == []
    assert snapshot["version"] == session.version
    assert snapshot["server_time"].endswith("Z")
    assert len(snapshot["request_id"]) == 32


def test_actions_wait_for_start():
    session = get_game_session()
    session.pause()

    with pytest.raises(SessionNotStartedError):
        session.apply_tool("Cottage", 0, 0)
    assert session.grid.tile(0, 0).is_empty
    assert session.stats.money == config.INITIAL_MONEY
