"""Connectivity queries over a ConnectionStore.

Stateless functions: they read adjacency bitsets and never modify them.
Separated from ``connections.py`` so traversal can change without
touching the storage layout.
"""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING

from plumbgrid.network.connections import bit_is_set
from plumbgrid.world.directions import DIRECTION_OFFSETS

if TYPE_CHECKING:
    from plumbgrid.network.connections import ConnectionStore
    from plumbgrid.world.coords import Projection, Tripoint


def connection_bitset_at(
    store: ConnectionStore,
    projection: Projection,
    p: Tripoint,
) -> int:
    """Return the bitset of the absolute cell ``p`` (0 if unconnected)."""
    region, local = projection.omt_to_om(p)
    return store.bitset_at(region, local)


def neighbors_of(
    store: ConnectionStore,
    projection: Projection,
    p: Tripoint,
) -> list[Tripoint]:
    """Return the relative offsets of every cell directly connected to ``p``.

    Offsets come out in direction-table order.

    Args:
        store: Adjacency bitsets.
        projection: Converts ``p`` to its region-local form.
        p: Absolute cell coordinate.

    Returns:
        Unit offsets, one per set bit.
    """
    bits = connection_bitset_at(store, projection, p)
    return [
        offset for i, offset in enumerate(DIRECTION_OFFSETS) if bit_is_set(bits, i)
    ]


def component_of(
    store: ConnectionStore,
    projection: Projection,
    seed: Tripoint,
) -> set[Tripoint]:
    """Return every cell reachable from ``seed``, ``seed`` included.

    Breadth-first flood fill.  Each reachable cell is expanded exactly
    once; there is no size cap, a component is as large as the pipes
    built into the world.

    Args:
        store: Adjacency bitsets.
        projection: Converts cells to their region-local form.
        seed: Absolute cell to start from.

    Returns:
        The connected component containing ``seed``.
    """
    visited: set[Tripoint] = {seed}
    frontier: deque[Tripoint] = deque([seed])

    while frontier:
        cell = frontier.popleft()
        for offset in neighbors_of(store, projection, cell):
            other = cell + offset
            if other not in visited:
                visited.add(other)
                frontier.append(other)

    return visited
