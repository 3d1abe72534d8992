"""MapBuffer: in-memory store of resident submaps.

A submap is a square grid of tiles, each with one piece of furniture and
a pile of items.  Furniture is kept in a NumPy object array so that
searching a submap for a furniture kind is a single vectorised compare.
Submaps that are not loaded are simply absent from the buffer; callers
must treat a missing submap as "no data", not as an error.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from plumbgrid.world.coords import Point, Tripoint
from plumbgrid.world.furniture import (
    NULL_FURNITURE_ID,
    FurnitureType,
    default_furniture_types,
)

if TYPE_CHECKING:
    from plumbgrid.world.items import Item


@dataclass
class Submap:
    """A square block of map tiles.

    Attributes:
        size: Tiles per side.
        furniture: Furniture ids indexed as ``furniture[y, x]``.
        items: Item piles keyed by in-submap position; absent means empty.
    """

    size: int = 12
    furniture: NDArray[np.object_] = field(init=False, repr=False)
    items: dict[Point, list[Item]] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        """Fill the grid with null furniture."""
        self.furniture = np.full((self.size, self.size), NULL_FURNITURE_ID, dtype=object)

    def _check_bounds(self, pos: Point) -> None:
        if not (0 <= pos.x < self.size and 0 <= pos.y < self.size):
            msg = f"({pos.x}, {pos.y}) out of bounds for {self.size}x{self.size} submap"
            raise IndexError(msg)

    def get_furn(self, pos: Point) -> str:
        """Return the furniture id at ``pos``.

        Raises:
            IndexError: If ``pos`` is outside the submap.
        """
        self._check_bounds(pos)
        return str(self.furniture[pos.y, pos.x])

    def set_furn(self, pos: Point, furn_id: str) -> None:
        """Place furniture ``furn_id`` at ``pos``, replacing what was there."""
        self._check_bounds(pos)
        self.furniture[pos.y, pos.x] = furn_id

    def find_furniture(self, furn_id: str) -> list[Point]:
        """Return every position holding ``furn_id``, in row-major order."""
        ys, xs = np.nonzero(self.furniture == furn_id)
        return [Point(int(x), int(y)) for y, x in zip(ys, xs)]

    def get_items(self, pos: Point) -> list[Item]:
        """Return the mutable item pile at ``pos``."""
        self._check_bounds(pos)
        return self.items.setdefault(pos, [])


@dataclass
class MapBuffer:
    """All currently resident submaps, keyed by absolute submap coordinate.

    Attributes:
        submap_size: Tiles per side for submaps created by this buffer.
        furniture_types: Furniture catalogue used to resolve capacities.
        submaps: Resident submaps.
    """

    submap_size: int = 12
    furniture_types: dict[str, FurnitureType] = field(
        default_factory=default_furniture_types,
    )
    submaps: dict[Tripoint, Submap] = field(default_factory=dict, repr=False)

    def lookup_submap(self, p: Tripoint) -> Submap | None:
        """Return the submap at ``p``, or None if it is not resident."""
        return self.submaps.get(p)

    def add_submap(self, p: Tripoint) -> Submap:
        """Return the submap at ``p``, creating an empty one if needed."""
        sm = self.submaps.get(p)
        if sm is None:
            sm = Submap(size=self.submap_size)
            self.submaps[p] = sm
        return sm

    def unload(self, p: Tripoint) -> None:
        """Drop the submap at ``p`` from memory, if present."""
        self.submaps.pop(p, None)

    def furniture_type(self, furn_id: str) -> FurnitureType:
        """Look up a furniture kind.

        Raises:
            KeyError: If ``furn_id`` is not in the catalogue.
        """
        try:
            return self.furniture_types[furn_id]
        except KeyError:
            msg = f"unknown furniture type {furn_id!r}"
            raise KeyError(msg) from None
