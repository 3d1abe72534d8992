"""Furniture: static fixtures placed on map tiles.

Only liquid storage matters to the plumbing network, so a furniture
kind carries just its identifier and keg capacity.
"""

from __future__ import annotations

from dataclasses import dataclass

NULL_FURNITURE_ID = "f_null"
PLUMBED_TANK_ID = "f_standing_tank_plumbed"


@dataclass(frozen=True)
class FurnitureType:
    """A kind of furniture.

    Attributes:
        furn_id: Unique identifier.
        keg_capacity: Liquid capacity in millilitres (0 for non-containers).
    """

    furn_id: str
    keg_capacity: int = 0


def default_furniture_types(
    tank_id: str = PLUMBED_TANK_ID,
    tank_capacity: int = 300_000,
) -> dict[str, FurnitureType]:
    """Return the built-in furniture catalogue.

    Args:
        tank_id: Identifier used for plumbed standing tanks.
        tank_capacity: Capacity of a plumbed tank in millilitres.
    """
    types = {
        NULL_FURNITURE_ID: FurnitureType(NULL_FURNITURE_ID),
        "f_standing_tank": FurnitureType("f_standing_tank", keg_capacity=300_000),
        "f_table": FurnitureType("f_table"),
    }
    # Configured tank wins over a built-in entry with the same id
    types[tank_id] = FurnitureType(tank_id, keg_capacity=tank_capacity)
    return types
