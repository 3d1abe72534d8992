"""PlumbingGrid: the plumbing network service.

Owns all plumbing state for one loaded world and is the only thing
callers talk to:

1. ``ConnectionStore``: which cells are piped to which neighbours.
2. ``StorageTracker``: cached water storage per connected network.

Adding or removing a pipe updates the store and then rebuilds the
storage groups on both ends.  Content changes (a tank filled or emptied
by someone else) only invalidate the cached summary.  ``clear`` resets
everything and is meant for world reload boundaries.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

import structlog

from plumbgrid.config import PlumbingConfig
from plumbgrid.network.connections import ConnectionMap, ConnectionStore, bit_is_set
from plumbgrid.network.connectivity import component_of, neighbors_of
from plumbgrid.network.storage import StorageTracker, WaterStorageStats
from plumbgrid.world.coords import Point, Projection, Tripoint
from plumbgrid.world.directions import direction_of
from plumbgrid.world.furniture import default_furniture_types
from plumbgrid.world.items import ItemFactory
from plumbgrid.world.mapbuffer import MapBuffer

logger = structlog.get_logger()


@dataclass
class PlumbingGrid:
    """Plumbing connectivity and water storage for one world.

    Attributes:
        config: Loaded plumbing configuration.
        mapbuffer: Resident submaps holding tanks and items.
        items: Item catalogue used when draining.
        projection: Coordinate conversions, derived from ``config``.
        connections: Adjacency bitsets per region.
        tracker: Storage group arena.
    """

    config: PlumbingConfig
    mapbuffer: MapBuffer
    items: ItemFactory = field(default_factory=ItemFactory)
    projection: Projection = field(init=False)
    connections: ConnectionStore = field(init=False)
    tracker: StorageTracker = field(init=False)

    def __post_init__(self) -> None:
        """Build projection, connection store and tracker from config."""
        self.projection = Projection.from_config(self.config)
        self.connections = ConnectionStore()
        self.tracker = StorageTracker(
            store=self.connections,
            projection=self.projection,
            mapbuffer=self.mapbuffer,
            items=self.items,
            tank_furniture=self.config.tank_furniture,
        )

    @classmethod
    def from_config(cls, config: PlumbingConfig) -> PlumbingGrid:
        """Create a grid with an empty map buffer and default catalogues.

        Args:
            config: Plumbing configuration.

        Returns:
            A ready-to-use PlumbingGrid.
        """
        mapbuffer = MapBuffer(
            submap_size=config.submap_size,
            furniture_types=default_furniture_types(
                config.tank_furniture,
                config.tank_capacity,
            ),
        )
        return cls(config=config, mapbuffer=mapbuffer)

    # -- adjacency store ------------------------------------------------

    def connections_for(self, region: Point) -> ConnectionMap:
        """Mutable connection map for ``region``."""
        return self.connections.connections_for(region)

    def connections_view(self, region: Point) -> Mapping[Tripoint, int]:
        """Read-only connection map for ``region``."""
        return self.connections.connections_view(region)

    # -- queries --------------------------------------------------------

    def grid_at(self, p: Tripoint) -> set[Tripoint]:
        """Return every cell piped to ``p``, including ``p`` itself."""
        return component_of(self.connections, self.projection, p)

    def grid_connectivity_at(self, p: Tripoint) -> list[Tripoint]:
        """Return the offsets of the cells directly piped to ``p``."""
        return neighbors_of(self.connections, self.projection, p)

    def water_storage_at(self, p: Tripoint) -> WaterStorageStats:
        """Return the combined tank capacity and contents of ``p``'s network."""
        return self.tracker.storage_at(p).stats()

    # -- mutation -------------------------------------------------------

    def add_grid_connection(self, lhs: Tripoint, rhs: Tripoint) -> bool:
        """Pipe two orthogonally adjacent cells together.

        Args:
            lhs: One absolute cell coordinate.
            rhs: The other; must differ from ``lhs`` by one step on one axis.

        Returns:
            True if the connection was made.  False, after logging a
            warning, if the cells are in different regions, are not
            adjacent, or are already connected.
        """
        ends = self._edge_ends(lhs, rhs, "connect")
        if ends is None:
            return False
        (lhs_region, lhs_local, lhs_i), (rhs_region, rhs_local, rhs_i) = ends

        lhs_set, rhs_set = self._edge_bits(ends)
        if lhs_set and rhs_set:
            logger.warning(
                "Tried to connect two points that are already connected",
                lhs=lhs,
                rhs=rhs,
            )
            return False

        self.connections.set_bit(lhs_region, lhs_local, lhs_i, True)
        self.connections.set_bit(rhs_region, rhs_local, rhs_i, True)
        self.on_structure_changed(self.projection.omt_to_ms(lhs))
        self.on_structure_changed(self.projection.omt_to_ms(rhs))
        return True

    def remove_grid_connection(self, lhs: Tripoint, rhs: Tripoint) -> bool:
        """Remove the pipe between two orthogonally adjacent cells.

        Returns:
            True if the connection was removed.  False, after logging a
            warning, if the cells are in different regions, are not
            adjacent, or are not connected.
        """
        ends = self._edge_ends(lhs, rhs, "disconnect")
        if ends is None:
            return False
        (lhs_region, lhs_local, lhs_i), (rhs_region, rhs_local, rhs_i) = ends

        lhs_set, rhs_set = self._edge_bits(ends)
        if not lhs_set and not rhs_set:
            logger.warning(
                "Tried to disconnect two points with no connection to each other",
                lhs=lhs,
                rhs=rhs,
            )
            return False

        self.connections.set_bit(lhs_region, lhs_local, lhs_i, False)
        self.connections.set_bit(rhs_region, rhs_local, rhs_i, False)
        self.on_structure_changed(self.projection.omt_to_ms(lhs))
        self.on_structure_changed(self.projection.omt_to_ms(rhs))
        return True

    def _edge_ends(
        self,
        lhs: Tripoint,
        rhs: Tripoint,
        verb: str,
    ) -> tuple[tuple[Point, Tripoint, int], tuple[Point, Tripoint, int]] | None:
        """Validate an edge and resolve both ends to (region, local, bit).

        Returns None, after logging why, if the edge is not allowed.
        """
        lhs_region, lhs_local = self.projection.omt_to_om(lhs)
        rhs_region, rhs_local = self.projection.omt_to_om(rhs)
        if lhs_region != rhs_region:
            logger.warning(
                "Rejected plumbing edge across different regions",
                operation=verb,
                lhs=lhs,
                rhs=rhs,
            )
            return None

        lhs_dir = direction_of(rhs - lhs)
        if lhs_dir is None:
            logger.warning(
                "Rejected plumbing edge between non-adjacent points",
                operation=verb,
                lhs=lhs,
                rhs=rhs,
            )
            return None

        return (
            (lhs_region, lhs_local, int(lhs_dir)),
            (rhs_region, rhs_local, int(lhs_dir.opposite())),
        )

    def _edge_bits(
        self,
        ends: tuple[tuple[Point, Tripoint, int], tuple[Point, Tripoint, int]],
    ) -> tuple[bool, bool]:
        (lhs_region, lhs_local, lhs_i), (rhs_region, rhs_local, rhs_i) = ends
        lhs_set = bit_is_set(self.connections.bitset_at(lhs_region, lhs_local), lhs_i)
        rhs_set = bit_is_set(self.connections.bitset_at(rhs_region, rhs_local), rhs_i)
        assert lhs_set == rhs_set, (
            f"asymmetric plumbing connection between {lhs_local} and {rhs_local} "
            f"in region {lhs_region}"
        )
        return lhs_set, rhs_set

    # -- change notifications ------------------------------------------

    def on_contents_changed(self, p: Tripoint) -> None:
        """Tank contents at tile ``p`` changed; forget the cached summary."""
        self.tracker.invalidate_at(p)

    def on_structure_changed(self, p: Tripoint) -> None:
        """Network shape around tile ``p`` changed; rebuild its group."""
        self.tracker.rebuild_at(p)

    def disconnect_tank(self, p: Tripoint) -> None:
        """Drain the whole network under tile ``p`` onto ``p``."""
        self.tracker.disconnect_tank_at(p)

    def clear(self) -> None:
        """Forget every connection and every storage group."""
        self.connections.clear()
        self.tracker.clear()
        logger.info("Plumbing grid cleared")
