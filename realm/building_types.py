"""Building type definitions for the realm simulation."""
from __future__ import annotations

from enum import Enum
from typing import Dict, List


class BuildingType(str, Enum):
    """Enumeration of every structure a tile can hold."""

    NONE = "None"
    ROAD = "Cobblestone"
    RESIDENTIAL = "Cottage"
    COMMERCIAL = "Tavern"
    INDUSTRIAL = "Mine"
    PARK = "EnchantedForest"
    POWER_PLANT = "WizardTower"
    WATER_TOWER = "AncientWell"
    LANDMARK = "GreatCastle"
    POLICE_STATION = "GuardPost"
    FIRE_STATION = "MageSanctum"
    SCHOOL = "AlchemyAcademy"
    LUMBER_MILL = "LumberMill"
    BAKERY = "Bakery"
    LIBRARY = "GreatLibrary"
    LUMINA_BLOOM = "LuminaBloom"
    WINDMILL = "Windmill"
    MARKET_SQUARE = "MarketSquare"
    MAGIC_ACADEMY = "MagicAcademy"
    GRAND_OBSERVATORY = "GrandObservatory"


ALL_BUILDING_TYPES: List[BuildingType] = list(BuildingType)

_TYPE_BY_ID: Dict[str, BuildingType] = {entry.value: entry for entry in ALL_BUILDING_TYPES}
_TYPE_BY_NAME: Dict[str, BuildingType] = {entry.name: entry for entry in ALL_BUILDING_TYPES}
_TYPE_LOOKUP: Dict[str, BuildingType] = {
    key.lower(): entry
    for mapping in (_TYPE_BY_ID, _TYPE_BY_NAME)
    for key, entry in mapping.items()
}


def building_type_from_id(identifier: str) -> BuildingType:
    """Return the building type associated with ``identifier``.

    Both the stored identifier (``"Cottage"``) and the enum name
    (``"RESIDENTIAL"``) are accepted regardless of capitalisation. A
    :class:`KeyError` is raised if the identifier is unknown.
    """

    building_type = _TYPE_LOOKUP.get(str(identifier).strip().lower())
    if building_type is None:
        raise KeyError(f"Unknown building type: {identifier}")
    return building_type


def normalise_building_type(value: BuildingType | str) -> BuildingType:
    """Coerce ``value`` into a :class:`BuildingType` instance."""

    if isinstance(value, BuildingType):
        return value
    if not isinstance(value, str):
        raise KeyError(f"Unknown building type: {value!r}")
    return building_type_from_id(value)


def is_structure(building_type: BuildingType) -> bool:
    """True for tiles that hold an actual building (not empty, not road)."""

    return building_type not in (BuildingType.NONE, BuildingType.ROAD)


__all__ = [
    "ALL_BUILDING_TYPES",
    "BuildingType",
    "building_type_from_id",
    "is_structure",
    "normalise_building_type",
]
