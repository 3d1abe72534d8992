"""The six cardinal directions of the 3D grid.

``DIRECTION_OFFSETS`` is the one table mapping a direction index to its
unit offset.  Connection bitsets are encoded against it and traversal
decodes against it, so both must only ever go through this module.
"""

from __future__ import annotations

from enum import IntEnum

from plumbgrid.world.coords import Tripoint


class Direction(IntEnum):
    """Bit positions in a connection bitset."""

    NORTH = 0
    EAST = 1
    SOUTH = 2
    WEST = 3
    ABOVE = 4
    BELOW = 5

    def opposite(self) -> Direction:
        """Return the direction pointing back the other way."""
        return Direction(_OPPOSITES[self])


DIRECTION_OFFSETS: tuple[Tripoint, ...] = (
    Tripoint(0, -1, 0),
    Tripoint(1, 0, 0),
    Tripoint(0, 1, 0),
    Tripoint(-1, 0, 0),
    Tripoint(0, 0, 1),
    Tripoint(0, 0, -1),
)

_OPPOSITES = (2, 3, 0, 1, 5, 4)


def direction_of(offset: Tripoint) -> Direction | None:
    """Return the direction whose unit offset equals ``offset``.

    Args:
        offset: Relative coordinate between two cells.

    Returns:
        The matching direction, or None if ``offset`` is not a unit step
        along one axis.
    """
    try:
        return Direction(DIRECTION_OFFSETS.index(offset))
    except ValueError:
        return None
