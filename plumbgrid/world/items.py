"""Items: stacks of a single kind sitting on a map tile.

Liquids are counted in charges; each item kind knows how many
millilitres one charge occupies, so volume and charge count convert
in both directions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Phase(Enum):
    """Physical state of an item's material."""

    SOLID = "solid"
    LIQUID = "liquid"
    GAS = "gas"


@dataclass(frozen=True)
class ItemType:
    """Static description of an item kind.

    Attributes:
        type_id: Unique identifier, e.g. ``"water_clean"``.
        phase: Physical state of the material.
        volume_per_charge: Millilitres occupied by one charge.
    """

    type_id: str
    phase: Phase = Phase.SOLID
    volume_per_charge: int = 250


@dataclass
class Item:
    """A stack of one item kind.

    Attributes:
        itype: The kind of item.
        charges: Number of charges in the stack.
    """

    itype: ItemType
    charges: int = 1

    @property
    def type_id(self) -> str:
        return self.itype.type_id

    @property
    def volume(self) -> int:
        """Total volume of the stack in millilitres."""
        return self.charges * self.itype.volume_per_charge

    def made_of(self, phase: Phase) -> bool:
        """Return True if the item's material is in ``phase``."""
        return self.itype.phase is phase


def default_item_types() -> dict[str, ItemType]:
    """Return the built-in item catalogue."""
    return {
        "water": ItemType("water", Phase.LIQUID, 250),
        "water_clean": ItemType("water_clean", Phase.LIQUID, 250),
        "water_sewage": ItemType("water_sewage", Phase.LIQUID, 250),
        "rock": ItemType("rock", Phase.SOLID, 500),
    }


@dataclass
class ItemFactory:
    """Spawns items by kind from a catalogue.

    Attributes:
        item_types: Known item kinds keyed by ``type_id``.
    """

    item_types: dict[str, ItemType] = field(default_factory=default_item_types)

    def find_type(self, type_id: str) -> ItemType:
        """Look up an item kind.

        Raises:
            KeyError: If ``type_id`` is not in the catalogue.
        """
        try:
            return self.item_types[type_id]
        except KeyError:
            msg = f"unknown item type {type_id!r}"
            raise KeyError(msg) from None

    def spawn(self, type_id: str, charges: int = 1) -> Item:
        """Create a stack of ``charges`` charges of ``type_id``."""
        return Item(itype=self.find_type(type_id), charges=charges)

    def spawn_volume(self, type_id: str, volume: int) -> Item:
        """Create a stack of ``type_id`` holding as much of ``volume`` as fits.

        The charge count is rounded down to whole charges, so any
        remainder smaller than one charge is lost.  A volume below one
        charge yields a stack with zero charges.

        Args:
            type_id: Kind of item to spawn.
            volume: Target volume in millilitres.

        Returns:
            A new Item whose volume is at most ``volume``.
        """
        itype = self.find_type(type_id)
        return Item(itype=itype, charges=volume // itype.volume_per_charge)
