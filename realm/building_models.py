"""Data models for the building catalogue."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from .building_types import BuildingType


@dataclass(frozen=True, slots=True)
class BuildingCatalogEntry:
    """Catalogue entry describing the economics of a building type."""

    type: BuildingType
    cost: int
    maintenance: float
    name: str
    description: str = ""
    pop_gen: float = 0.0
    income_gen: float = 0.0
    mana_req: float = 0.0
    essence_req: float = 0.0
    service_radius: Optional[int] = None
    is_utility: bool = False
    mana_output: float = 0.0
    essence_output: float = 0.0

    @property
    def emits_coverage(self) -> bool:
        return self.service_radius is not None

    def requirements(self, level: int) -> Dict[str, float]:
        """Utility demand of a tile of this type at ``level``."""

        return {
            "mana": self.mana_req * level,
            "essence": self.essence_req * level,
        }

    def to_payload(self) -> Dict[str, object]:
        return {
            "type": self.type.value,
            "cost": self.cost,
            "maintenance": self.maintenance,
            "name": self.name,
            "description": self.description,
            "pop_gen": self.pop_gen,
            "income_gen": self.income_gen,
            "mana_req": self.mana_req,
            "essence_req": self.essence_req,
            "service_radius": self.service_radius,
            "is_utility": self.is_utility,
        }
