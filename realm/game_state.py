"""Core singleton owning the current grid and city stats."""

from __future__ import annotations

import logging
import threading
import uuid
from collections import deque
from datetime import datetime, timezone
from typing import Deque, Dict, List, Optional

from . import config
from .actions import ActionKind, ActionResult, Severity, execute
from .building_catalog import CATALOG, Catalog
from .building_types import BuildingType
from .city_models import CityStats, Grid, Weather, create_initial_grid, initial_stats
from .goals import Goal, NewsCategory, NewsItem, goal_current_value, is_goal_met
from .simulation import calculate_tick


logger = logging.getLogger(__name__)


class NoActiveGoalError(Exception):
    """Raised when a reward is claimed while no quest is active."""


class GoalNotCompletedError(Exception):
    """Raised when a reward is claimed for a quest that is not yet fulfilled."""

    def __init__(self, goal: Goal, current: int):
        self.goal = goal
        self.current = current
        super().__init__("GOAL_NOT_COMPLETED")


class SessionNotStartedError(Exception):
    """Raised when a tile action arrives before the game has been started."""


class GameSession:
    """Single writer for the grid/stats pair.

    Ticks and player actions both go through the session lock, so a tick
    never runs against a snapshot an action is replacing and vice versa.
    """

    _instance: Optional["GameSession"] = None

    def __init__(self, catalog: Catalog = CATALOG, grid_size: int = config.GRID_SIZE) -> None:
        self._lock = threading.RLock()
        self.catalog = catalog
        self.grid_size = int(grid_size)
        self.news: Deque[NewsItem] = deque(maxlen=config.NEWS_FEED_LIMIT)
        self._initialise_state()

    # ------------------------------------------------------------------
    @classmethod
    def get_instance(cls) -> "GameSession":
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def reset(self) -> None:
        self._initialise_state()
        logger.info("Session reset grid_size=%s", self.grid_size)

    def _initialise_state(self) -> None:
        with self._lock:
            self.grid: Grid = create_initial_grid(self.grid_size)
            self.stats: CityStats = initial_stats()
            self.started = False
            self.goal: Optional[Goal] = None
            self.news.clear()
            self._tick_count = 0
            self._state_version = 0

    @property
    def version(self) -> int:
        with self._lock:
            return int(self._state_version)

    def start(self) -> None:
        with self._lock:
            self.started = True

    def pause(self) -> None:
        with self._lock:
            self.started = False

    def load_state(self, grid: Grid, stats: CityStats) -> None:
        """Replace the session's grid and stats wholesale."""

        with self._lock:
            self.grid = grid
            self.stats = stats
            self._state_version += 1
        logger.info("Session state loaded day=%s money=%s", stats.day, stats.money)

    # ------------------------------------------------------------------
    def tick(self) -> CityStats:
        with self._lock:
            self.grid, self.stats = calculate_tick(self.grid, self.stats, self.catalog)
            self._tick_count += 1
            self._state_version += 1
            self._check_goal_locked()
            if self._tick_count % 10 == 0:
                logger.debug(
                    "Tick %s summary: day=%s money=%s population=%s happiness=%s",
                    self._tick_count,
                    self.stats.day,
                    self.stats.money,
                    self.stats.population,
                    self.stats.happiness,
                )
            return self.stats

    def apply_tool(self, tool: BuildingType | str, x: int, y: int) -> ActionResult:
        with self._lock:
            if not self.started:
                raise SessionNotStartedError("The game has not been started")
            result = execute(tool, self.grid, self.stats, x, y, self.catalog)
            if result.success:
                self.grid = result.grid
                self.stats = result.stats
                self._state_version += 1
            if not result.success or result.kind == ActionKind.UPGRADE:
                self.add_news(
                    NewsItem(text=result.message, category=_news_category(result.severity))
                )
        logger.debug(
            "Action %s at (%s, %s) success=%s error=%s",
            result.kind.value,
            x,
            y,
            result.success,
            result.error.value if result.error else None,
        )
        return result

    def set_weather(self, weather: Weather | str) -> Weather:
        value = Weather(weather)
        with self._lock:
            self.stats = self.stats.clone(weather=value)
            self._state_version += 1
        return value

    # ------------------------------------------------------------------
    def set_goal(self, goal: Optional[Goal]) -> None:
        with self._lock:
            self.goal = goal
            self._state_version += 1
            if goal is not None:
                self._check_goal_locked()

    def goal_progress(self) -> Optional[Dict[str, object]]:
        with self._lock:
            if self.goal is None:
                return None
            current = goal_current_value(self.goal, self.grid, self.stats)
            payload = self.goal.to_dict()
            payload["current_value"] = current
            return payload

    def claim_goal_reward(self) -> int:
        """Credit the active quest's reward and clear it."""

        with self._lock:
            goal = self.goal
            if goal is None:
                raise NoActiveGoalError("No quest is active")
            if not (goal.completed or is_goal_met(goal, self.grid, self.stats)):
                raise GoalNotCompletedError(goal, goal_current_value(goal, self.grid, self.stats))
            self.stats = self.stats.clone(money=self.stats.money + goal.reward)
            self.goal = None
            self._state_version += 1
        self.add_news(
            NewsItem(
                text=f"Quest fulfilled! {goal.reward}g added to the treasury.",
                category=NewsCategory.POSITIVE,
            )
        )
        logger.info("Goal %s claimed reward=%s", goal.id, goal.reward)
        return goal.reward

    def _check_goal_locked(self) -> None:
        goal = self.goal
        if goal is None or goal.completed:
            return
        if is_goal_met(goal, self.grid, self.stats):
            self.goal = goal.mark_completed()
            self.add_news(
                NewsItem(
                    text=f"Decree fulfilled: {goal.description}",
                    category=NewsCategory.POSITIVE,
                )
            )

    # ------------------------------------------------------------------
    def add_news(self, item: NewsItem) -> None:
        with self._lock:
            self.news.append(item)

    def list_news(self) -> List[Dict[str, object]]:
        with self._lock:
            return [item.to_dict() for item in self.news]

    # ------------------------------------------------------------------
    def snapshot(self) -> Dict[str, object]:
        with self._lock:
            version = int(self._state_version)
            payload: Dict[str, object] = {
                "grid": self.grid.to_list(),
                "stats": self.stats.to_dict(),
                "started": self.started,
                "goal": self.goal_progress(),
                "news": self.list_news(),
            }
        payload.update(self.response_metadata(version))
        return payload

    def response_metadata(self, version: Optional[int] = None) -> Dict[str, object]:
        version_value = self.version if version is None else int(version)
        timestamp = (
            datetime.now(timezone.utc)
            .isoformat(timespec="milliseconds")
            .replace("+00:00", "Z")
        )
        return {
            "request_id": uuid.uuid4().hex,
            "server_time": timestamp,
            "version": version_value,
        }


def _news_category(severity: Severity) -> NewsCategory:
    return NewsCategory(severity.value)


def get_game_session() -> GameSession:
    return GameSession.get_instance()
