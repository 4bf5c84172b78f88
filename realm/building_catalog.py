"""Catalogue of building economics."""

from __future__ import annotations

from dataclasses import replace
from types import MappingProxyType
from typing import Dict, Iterable, Mapping

from .building_models import BuildingCatalogEntry
from .building_types import ALL_BUILDING_TYPES, BuildingType, building_type_from_id


Catalog = Mapping[BuildingType, BuildingCatalogEntry]


DEFAULT_BUILDING_DATA = {
    "building_types": [
        {"id": "None", "name": "Bulldoze", "description": "Clear tile", "cost": 0, "maintenance": 0},
        {"id": "Cobblestone", "name": "Cobblestone Road", "description": "Connects the realm", "cost": 10, "maintenance": 0},
        {
            "id": "Cottage",
            "name": "Cottage",
            "description": "Homes for villagers",
            "cost": 120,
            "maintenance": 1,
            "pop_gen": 5,
            "mana_req": 1,
            "essence_req": 1,
        },
        {
            "id": "Tavern",
            "name": "Tavern",
            "description": "Coin from weary travellers",
            "cost": 250,
            "maintenance": 3,
            "income_gen": 20,
            "mana_req": 2,
            "essence_req": 1,
        },
        {
            "id": "Mine",
            "name": "Mine",
            "description": "Rich veins, loud and dusty",
            "cost": 500,
            "maintenance": 8,
            "income_gen": 50,
            "mana_req": 5,
            "essence_req": 3,
        },
        {
            "id": "EnchantedForest",
            "name": "Enchanted Forest",
            "description": "Nature soothes nearby homes",
            "cost": 150,
            "maintenance": 2,
            "pop_gen": 1,
            "essence_req": 2,
            "service_radius": 3,
        },
        {
            "id": "WizardTower",
            "name": "Wizard Tower",
            "description": "+120 Mana per tier",
            "cost": 800,
            "maintenance": 15,
            "essence_req": 2,
            "is_utility": True,
            "mana_output": 120,
        },
        {
            "id": "AncientWell",
            "name": "Ancient Well",
            "description": "+100 Essence per tier",
            "cost": 600,
            "maintenance": 10,
            "mana_req": 2,
            "is_utility": True,
            "essence_output": 100,
        },
        {
            "id": "GreatCastle",
            "name": "Great Castle",
            "description": "High prestige",
            "cost": 2500,
            "maintenance": 25,
            "income_gen": 100,
            "mana_req": 10,
            "essence_req": 5,
        },
        {
            "id": "GuardPost",
            "name": "Guard Post",
            "description": "Keeps the peace",
            "cost": 400,
            "maintenance": 12,
            "mana_req": 3,
            "essence_req": 1,
            "service_radius": 4,
        },
        {
            "id": "MageSanctum",
            "name": "Mage Sanctum",
            "description": "Wards against fire and curses",
            "cost": 400,
            "maintenance": 12,
            "mana_req": 3,
            "essence_req": 2,
            "service_radius": 4,
        },
        {
            "id": "AlchemyAcademy",
            "name": "Alchemy Academy",
            "description": "Wisdom for the young",
            "cost": 600,
            "maintenance": 15,
            "mana_req": 4,
            "essence_req": 2,
            "service_radius": 3,
        },
        {
            "id": "LumberMill",
            "name": "Lumber Mill",
            "description": "Timber for coin, sawdust for all",
            "cost": 350,
            "maintenance": 5,
            "income_gen": 30,
            "mana_req": 3,
            "essence_req": 1,
        },
        {
            "id": "Bakery",
            "name": "Bakery",
            "description": "Sweet smells lift spirits",
            "cost": 200,
            "maintenance": 3,
            "income_gen": 15,
            "mana_req": 2,
            "essence_req": 2,
            "service_radius": 2,
        },
        {
            "id": "GreatLibrary",
            "name": "Great Library",
            "description": "Tomes of ancient wisdom",
            "cost": 900,
            "maintenance": 18,
            "mana_req": 4,
            "essence_req": 2,
            "service_radius": 5,
        },
        {
            "id": "LuminaBloom",
            "name": "Lumina Bloom",
            "description": "Glowing flowers",
            "cost": 300,
            "maintenance": 4,
            "pop_gen": 1,
            "mana_req": 1,
            "essence_req": 1,
            "service_radius": 3,
        },
        {
            "id": "Windmill",
            "name": "Windmill",
            "description": "Grinds grain day and night",
            "cost": 250,
            "maintenance": 3,
            "income_gen": 10,
            "essence_req": 1,
        },
        {
            "id": "MarketSquare",
            "name": "Market Square",
            "description": "Bustling trade",
            "cost": 700,
            "maintenance": 10,
            "income_gen": 60,
            "mana_req": 3,
            "essence_req": 2,
        },
        {
            "id": "MagicAcademy",
            "name": "Magic Academy",
            "description": "Scholars of the arcane",
            "cost": 1200,
            "maintenance": 20,
            "mana_req": 6,
            "essence_req": 3,
            "service_radius": 4,
        },
        {
            "id": "GrandObservatory",
            "name": "Grand Observatory",
            "description": "Reads fortune in the stars",
            "cost": 3000,
            "maintenance": 30,
            "income_gen": 150,
            "mana_req": 12,
            "essence_req": 6,
        },
    ]
}


def build_catalog(entries: Iterable[Mapping[str, object]]) -> Catalog:
    """Return an immutable catalogue built from raw ``entries``.

    Every :class:`BuildingType` must be described exactly once so the
    simulation passes can look any tile up without a fallback.
    """

    catalogue: Dict[BuildingType, BuildingCatalogEntry] = {}
    for entry in entries:
        building_type = building_type_from_id(str(entry["id"]))
        if building_type in catalogue:
            raise ValueError(f"Duplicate catalogue entry for {building_type.value}")
        radius = entry.get("service_radius")
        catalogue[building_type] = BuildingCatalogEntry(
            type=building_type,
            cost=int(entry.get("cost", 0)),
            maintenance=float(entry.get("maintenance", 0.0)),
            name=str(entry.get("name", building_type.value)),
            description=str(entry.get("description", "")),
            pop_gen=float(entry.get("pop_gen", 0.0)),
            income_gen=float(entry.get("income_gen", 0.0)),
            mana_req=float(entry.get("mana_req", 0.0)),
            essence_req=float(entry.get("essence_req", 0.0)),
            service_radius=None if radius is None else int(radius),
            is_utility=bool(entry.get("is_utility", False)),
            mana_output=float(entry.get("mana_output", 0.0)),
            essence_output=float(entry.get("essence_output", 0.0)),
        )

    missing = [entry.value for entry in ALL_BUILDING_TYPES if entry not in catalogue]
    if missing:
        raise ValueError(f"Catalogue is missing building types: {', '.join(missing)}")
    return MappingProxyType(catalogue)


def load_default_catalog() -> Catalog:
    """Return the default catalogue shipped with the game."""

    return build_catalog(DEFAULT_BUILDING_DATA["building_types"])


def with_overrides(catalog: Catalog, building_type: BuildingType, **changes: object) -> Catalog:
    """Return a copy of ``catalog`` with one entry's fields replaced."""

    updated = dict(catalog)
    updated[building_type] = replace(catalog[building_type], **changes)
    return MappingProxyType(updated)


CATALOG: Catalog = load_default_catalog()
