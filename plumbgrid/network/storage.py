"""Water storage aggregation over connected plumbing networks.

A :class:`StorageGroup` covers every submap under one connected
component of the plumbing graph.  It remembers where the plumbed tanks
were when it was built and caches their combined capacity and contents
until told the contents changed.

A :class:`StorageTracker` owns all groups in an arena keyed by integer
id, plus an index from submap coordinate to group id.  Every submap of a
component points at the same id.  When the topology changes the tracker
builds a fresh group and remaps the affected submaps to it; a group is
dropped from the arena once no submap refers to it any more.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import structlog

from plumbgrid.network.connectivity import component_of
from plumbgrid.world.coords import Point, Tripoint
from plumbgrid.world.furniture import PLUMBED_TANK_ID
from plumbgrid.world.items import Phase

if TYPE_CHECKING:
    from plumbgrid.network.connections import ConnectionStore
    from plumbgrid.world.coords import Projection
    from plumbgrid.world.items import ItemFactory
    from plumbgrid.world.mapbuffer import MapBuffer, Submap

logger = structlog.get_logger()


@dataclass(frozen=True)
class WaterStorageStats:
    """Aggregate liquid storage of a network, in millilitres.

    Attributes:
        capacity: Sum of keg capacities of all plumbed tanks.
        stored: Volume of liquid currently held in those tanks.
    """

    capacity: int = 0
    stored: int = 0


@dataclass(frozen=True)
class TankLocation:
    """Where a plumbed tank stands: its submap and in-submap tile."""

    submap: Tripoint
    pos: Point


@dataclass
class StorageGroup:
    """Cached storage summary for one connected component.

    Attributes:
        submaps: Every submap under the component's cells.
        mapbuffer: World store the tanks live in.
        tank_furniture: Furniture id that counts as a plumbed tank.
        tank_locations: Tanks found when the group was built.
        cached_stats: Last computed summary, None while dirty.
    """

    submaps: list[Tripoint]
    mapbuffer: MapBuffer = field(repr=False)
    tank_furniture: str = PLUMBED_TANK_ID
    tank_locations: list[TankLocation] = field(init=False, default_factory=list)
    cached_stats: WaterStorageStats | None = field(init=False, default=None)

    def __post_init__(self) -> None:
        """Scan resident submaps for plumbed tanks."""
        for sm_pos in self.submaps:
            sm = self.mapbuffer.lookup_submap(sm_pos)
            if sm is None:
                continue
            self.tank_locations.extend(
                TankLocation(sm_pos, pos)
                for pos in sm.find_furniture(self.tank_furniture)
            )

    @property
    def is_empty(self) -> bool:
        """True if no tank was found when the group was built."""
        return not self.tank_locations

    @property
    def is_dirty(self) -> bool:
        return self.cached_stats is None

    def invalidate(self) -> None:
        """Drop the cached summary; the next :meth:`stats` call rescans."""
        self.cached_stats = None

    def _present_tanks(self) -> Iterator[tuple[Submap, Point]]:
        # Tanks may have been unloaded or torn down without notice.
        for loc in self.tank_locations:
            sm = self.mapbuffer.lookup_submap(loc.submap)
            if sm is None:
                continue
            if sm.get_furn(loc.pos) != self.tank_furniture:
                continue
            yield sm, loc.pos

    def stats(self) -> WaterStorageStats:
        """Return capacity and stored liquid, recomputing if dirty."""
        if self.cached_stats is not None:
            return self.cached_stats

        capacity = 0
        stored = 0
        for sm, pos in self._present_tanks():
            capacity += self.mapbuffer.furniture_type(self.tank_furniture).keg_capacity
            stored += sum(
                it.volume for it in sm.items.get(pos, []) if it.made_of(Phase.LIQUID)
            )

        self.cached_stats = WaterStorageStats(capacity=capacity, stored=stored)
        return self.cached_stats

    def drain_to(
        self,
        target_sm: Tripoint,
        target_pos: Point,
        items: ItemFactory,
    ) -> None:
        """Empty every tank and pour the liquid out as one stack.

        The first liquid kind met decides the kind of the resulting
        stack; any other liquids are added to it by volume.  Every tank
        tile is cleared, whether or not it held liquid.  If there is any
        liquid, the target tile's items are replaced by the new stack.
        Liquid that does not fill a whole charge of the stack's kind is
        lost; if not even one charge fits, nothing is placed.

        Args:
            target_sm: Submap of the tile to pour onto.
            target_pos: Tile position inside ``target_sm``.
            items: Factory used to spawn the liquid stack.
        """
        total_volume = 0
        liquid_type: str | None = None

        for sm, pos in self._present_tanks():
            pile = sm.items.get(pos)
            if not pile:
                continue
            for it in pile:
                if it.made_of(Phase.LIQUID):
                    if liquid_type is None:
                        liquid_type = it.type_id
                    total_volume += it.volume
            pile.clear()

        self.invalidate()

        if liquid_type is None or total_volume <= 0:
            return

        target = self.mapbuffer.lookup_submap(target_sm)
        if target is None:
            logger.warning(
                "Drain target not resident, liquid lost",
                submap=target_sm,
                pos=target_pos,
                volume=total_volume,
            )
            return

        stack = items.spawn_volume(liquid_type, total_volume)
        if stack.charges <= 0:
            logger.warning(
                "Drained liquid too little for one charge, liquid lost",
                liquid=liquid_type,
                volume=total_volume,
            )
            return

        pile = target.get_items(target_pos)
        pile.clear()
        pile.append(stack)


@dataclass
class StorageTracker:
    """Arena of storage groups indexed by submap coordinate.

    Attributes:
        store: Adjacency bitsets used to discover components.
        projection: Coordinate conversions between map scales.
        mapbuffer: World store scanned for tanks.
        items: Factory used when draining.
        tank_furniture: Furniture id that counts as a plumbed tank.
        groups: Live storage groups by id.
        index: Owning group id for every indexed submap.
    """

    store: ConnectionStore
    projection: Projection
    mapbuffer: MapBuffer
    items: ItemFactory
    tank_furniture: str = PLUMBED_TANK_ID
    groups: dict[int, StorageGroup] = field(default_factory=dict)
    index: dict[Tripoint, int] = field(default_factory=dict)
    _refs: Counter[int] = field(default_factory=Counter, init=False, repr=False)
    _next_id: int = field(default=0, init=False, repr=False)

    def group_id_at(self, sm_pos: Tripoint) -> int | None:
        """Return the id of the group owning ``sm_pos``, if indexed."""
        return self.index.get(sm_pos)

    def storage_at(self, p: Tripoint) -> StorageGroup:
        """Return the storage group for cell ``p``, building it on a miss."""
        sm_pos = self.projection.omt_to_sm(p)
        group_id = self.index.get(sm_pos)
        if group_id is not None:
            return self.groups[group_id]
        return self.build_at(sm_pos)

    def build_at(self, sm_pos: Tripoint) -> StorageGroup:
        """Derive a new group for the component containing ``sm_pos``.

        The component of the submap's cell is expanded to all of its
        submaps, scanned for tanks, and every one of those submaps is
        pointed at the new group.  Groups left without any submap are
        released.

        Args:
            sm_pos: Any submap of the component.

        Returns:
            The newly built group.
        """
        cells = component_of(self.store, self.projection, self.projection.sm_to_omt(sm_pos))
        submaps = [
            smp for cell in sorted(cells) for smp in self.projection.submaps_of(cell)
        ]

        group = StorageGroup(
            submaps=submaps,
            mapbuffer=self.mapbuffer,
            tank_furniture=self.tank_furniture,
        )
        group_id = self._next_id
        self._next_id += 1
        self.groups[group_id] = group

        for smp in submaps:
            old_id = self.index.get(smp)
            if old_id is not None:
                self._release(old_id)
            self.index[smp] = group_id
            self._refs[group_id] += 1

        logger.debug(
            "Built storage group",
            group_id=group_id,
            cells=len(cells),
            tanks=len(group.tank_locations),
        )
        return group

    def _release(self, group_id: int) -> None:
        self._refs[group_id] -= 1
        if self._refs[group_id] <= 0:
            del self._refs[group_id]
            del self.groups[group_id]

    def invalidate_at(self, p: Tripoint) -> None:
        """Mark the group owning tile ``p`` dirty without rebuilding it."""
        sm_pos, _ = self.projection.ms_to_sm(p)
        group_id = self.index.get(sm_pos)
        if group_id is None:
            return
        self.groups[group_id].invalidate()
        logger.debug("Invalidated storage group", group_id=group_id)

    def rebuild_at(self, p: Tripoint) -> None:
        """Rebuild the group for tile ``p`` after a topology change."""
        sm_pos, _ = self.projection.ms_to_sm(p)
        self.build_at(sm_pos)

    def disconnect_tank_at(self, p: Tripoint) -> None:
        """Drain the network under tile ``p`` onto ``p``."""
        group = self.storage_at(self.projection.ms_to_omt(p))
        sm_pos, pos = self.projection.ms_to_sm(p)
        group.drain_to(sm_pos, pos, self.items)

    def group_count(self) -> int:
        """Number of live groups in the arena."""
        return len(self.groups)

    def clear(self) -> None:
        """Drop every group and index entry."""
        self.groups.clear()
        self.index.clear()
        self._refs.clear()
