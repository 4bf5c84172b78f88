"""Quest and news records exchanged with the advisor layer.

The advisor produces these from a snapshot of the city; the simulation never
waits for it. Completion of a quest is a plain threshold check against the
current stats or grid.
"""
from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Mapping, Optional

from .building_types import BuildingType, is_structure, normalise_building_type
from .city_models import CityStats, Grid


class GoalTarget(str, Enum):
    POPULATION = "population"
    MONEY = "money"
    BUILDING_COUNT = "building_count"
    HAPPINESS = "happiness"


class NewsCategory(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"
    URGENT = "urgent"


def _new_id() -> str:
    return uuid.uuid4().hex[:8]


@dataclass(frozen=True)
class Goal:
    description: str
    target_type: GoalTarget
    target_value: int
    reward: int
    building_type: Optional[BuildingType] = None
    completed: bool = False
    id: str = field(default_factory=_new_id)

    def mark_completed(self) -> "Goal":
        return replace(self, completed=True)

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "description": self.description,
            "target_type": self.target_type.value,
            "target_value": self.target_value,
            "building_type": self.building_type.value if self.building_type else None,
            "reward": self.reward,
            "completed": self.completed,
        }


@dataclass(frozen=True)
class NewsItem:
    text: str
    category: NewsCategory = NewsCategory.NEUTRAL
    timestamp: float = field(default_factory=time.time)
    id: str = field(default_factory=_new_id)

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "text": self.text,
            "type": self.category.value,
            "timestamp": self.timestamp,
        }


# ---------------------------------------------------------------------------
# Advisor payload parsing


def goal_from_payload(payload: Mapping[str, object]) -> Goal:
    """Build a :class:`Goal` from an advisor response.

    Accepts both ``targetType`` style and ``target_type`` style keys. Raises
    :class:`ValueError` when a required field is missing or invalid.
    """

    def pick(*keys: str) -> object:
        for key in keys:
            if key in payload and payload[key] is not None:
                return payload[key]
        return None

    description = pick("description")
    raw_target = pick("target_type", "targetType")
    raw_value = pick("target_value", "targetValue")
    raw_reward = pick("reward")
    if description is None or raw_target is None or raw_value is None or raw_reward is None:
        raise ValueError("Goal payload requires description, target type, target value and reward")

    target_type = GoalTarget(str(raw_target))
    building_type: Optional[BuildingType] = None
    raw_building = pick("building_type", "buildingType")
    if raw_building is not None:
        try:
            building_type = normalise_building_type(raw_building)
        except KeyError as exc:
            raise ValueError(str(exc)) from exc

    try:
        target_value = int(raw_value)
        reward = int(raw_reward)
    except (TypeError, ValueError) as exc:
        raise ValueError("Goal target value and reward must be integers") from exc

    goal_id = pick("id")
    return Goal(
        description=str(description),
        target_type=target_type,
        target_value=target_value,
        reward=reward,
        building_type=building_type,
        completed=bool(pick("completed") or False),
        id=str(goal_id) if goal_id is not None else _new_id(),
    )


def news_from_payload(payload: Mapping[str, object]) -> NewsItem:
    text = payload.get("text")
    if not text:
        raise ValueError("News payload requires text")
    category = NewsCategory(str(payload.get("type") or payload.get("category") or "neutral"))
    timestamp = payload.get("timestamp")
    return NewsItem(
        text=str(text),
        category=category,
        timestamp=float(timestamp) if timestamp is not None else time.time(),
    )


# ---------------------------------------------------------------------------
# Completion


def goal_current_value(goal: Goal, grid: Grid, stats: CityStats) -> int:
    if goal.target_type == GoalTarget.POPULATION:
        return int(stats.population)
    if goal.target_type == GoalTarget.MONEY:
        return int(stats.money)
    if goal.target_type == GoalTarget.HAPPINESS:
        return int(stats.happiness)
    if goal.building_type is not None:
        return sum(1 for tile in grid if tile.building_type == goal.building_type)
    return sum(1 for tile in grid if is_structure(tile.building_type))


def is_goal_met(goal: Goal, grid: Grid, stats: CityStats) -> bool:
    return goal_current_value(goal, grid, stats) >= goal.target_value
