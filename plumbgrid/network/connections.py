"""ConnectionStore: per-region plumbing adjacency bitsets.

Each region maps local cell coordinates to an integer bitset with one
bit per :class:`~plumbgrid.world.directions.Direction`.  The store does
no validation; keeping bits symmetric is the job of the mutation API in
``plumbing.py``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from plumbgrid.world.coords import Point, Tripoint

ConnectionMap = dict[Tripoint, int]

_EMPTY_CONNECTIONS: Mapping[Tripoint, int] = MappingProxyType({})


@dataclass
class ConnectionStore:
    """Adjacency bitsets for every region that has any plumbing.

    Attributes:
        regions_map: Connection map per region coordinate.
    """

    regions_map: dict[Point, ConnectionMap] = field(default_factory=dict)

    def connections_for(self, region: Point) -> ConnectionMap:
        """Return the mutable connection map of ``region``, creating it."""
        return self.regions_map.setdefault(region, {})

    def connections_view(self, region: Point) -> Mapping[Tripoint, int]:
        """Return a read-only view of ``region``'s connections.

        Regions without any recorded edges share one immutable empty
        mapping; nothing is allocated for them.
        """
        connections = self.regions_map.get(region)
        if connections is None:
            return _EMPTY_CONNECTIONS
        return MappingProxyType(connections)

    def bitset_at(self, region: Point, local: Tripoint) -> int:
        """Return the bitset of a cell, 0 if it has never been connected."""
        return self.connections_view(region).get(local, 0)

    def set_bit(self, region: Point, local: Tripoint, index: int, value: bool) -> None:
        """Set or clear one direction bit on a cell.

        A cell whose bitset drops to zero is removed from the map.

        Args:
            region: Region the cell belongs to.
            local: Cell coordinate relative to the region.
            index: Direction index of the bit.
            value: True to set the bit, False to clear it.
        """
        connections = self.connections_for(region)
        bits = connections.get(local, 0)
        bits = bits | (1 << index) if value else bits & ~(1 << index)
        if bits:
            connections[local] = bits
        else:
            connections.pop(local, None)

    def regions(self) -> list[Point]:
        """Regions that currently hold at least one connected cell."""
        return [region for region, conns in self.regions_map.items() if conns]

    def clear(self) -> None:
        """Forget every connection in every region."""
        self.regions_map.clear()


def bit_is_set(bits: int, index: int) -> bool:
    """Return True if bit ``index`` of ``bits`` is set."""
    return bool(bits >> index & 1)
