"""Tests for plumbgrid.world: coordinates, directions, items, map buffer."""

import numpy as np
import pytest

from plumbgrid.world.coords import Point, Projection, Tripoint
from plumbgrid.world.directions import DIRECTION_OFFSETS, Direction, direction_of
from plumbgrid.world.furniture import NULL_FURNITURE_ID, PLUMBED_TANK_ID
from plumbgrid.world.items import ItemFactory, Phase
from plumbgrid.world.mapbuffer import MapBuffer, Submap


class TestTripoint:
    """Tests for Tripoint arithmetic."""

    def test_add_and_sub(self) -> None:
        a = Tripoint(1, 2, 3)
        b = Tripoint(-1, 5, 0)
        assert a + b == Tripoint(0, 7, 3)
        assert a - b == Tripoint(2, -3, 3)

    def test_neg(self) -> None:
        assert -Tripoint(1, -2, 3) == Tripoint(-1, 2, -3)

    def test_hashable_and_ordered(self) -> None:
        points = {Tripoint(1, 0, 0), Tripoint(1, 0, 0), Tripoint(0, 0, 0)}
        assert sorted(points) == [Tripoint(0, 0, 0), Tripoint(1, 0, 0)]


class TestProjection:
    """Tests for conversions between map scales."""

    def test_omt_to_om_positive(self, projection: Projection) -> None:
        region, local = projection.omt_to_om(Tripoint(9, 3, 1))
        assert region == Point(1, 0)
        assert local == Tripoint(1, 3, 1)

    def test_omt_to_om_negative_floors(self, projection: Projection) -> None:
        region, local = projection.omt_to_om(Tripoint(-1, -8, 0))
        assert region == Point(-1, -1)
        assert local == Tripoint(7, 0, 0)

    def test_omt_sm_round_trip(self, projection: Projection) -> None:
        cell = Tripoint(-3, 4, -1)
        assert projection.sm_to_omt(projection.omt_to_sm(cell)) == cell

    def test_ms_to_sm_negative(self, projection: Projection) -> None:
        sm, pos = projection.ms_to_sm(Tripoint(-1, 5, 0))
        assert sm == Tripoint(-1, 1, 0)
        assert pos == Point(3, 1)

    def test_ms_to_omt(self, projection: Projection) -> None:
        # 2 submaps of 4 tiles: a cell is 8 tiles wide
        assert projection.ms_to_omt(Tripoint(15, 8, 0)) == Tripoint(1, 1, 0)
        assert projection.ms_to_omt(Tripoint(-1, 0, 0)) == Tripoint(-1, 0, 0)

    def test_omt_to_ms_is_north_west_tile(self, projection: Projection) -> None:
        assert projection.omt_to_ms(Tripoint(1, 2, 3)) == Tripoint(8, 16, 3)

    def test_submaps_of_order(self, projection: Projection) -> None:
        assert projection.submaps_of(Tripoint(1, 1, 0)) == [
            Tripoint(2, 2, 0),
            Tripoint(3, 2, 0),
            Tripoint(2, 3, 0),
            Tripoint(3, 3, 0),
        ]


class TestDirections:
    """Tests for the direction table."""

    def test_six_unit_offsets(self) -> None:
        assert len(DIRECTION_OFFSETS) == len(Direction) == 6
        for offset in DIRECTION_OFFSETS:
            assert abs(offset.x) + abs(offset.y) + abs(offset.z) == 1

    def test_opposite_cancels(self) -> None:
        for d in Direction:
            assert DIRECTION_OFFSETS[d] + DIRECTION_OFFSETS[d.opposite()] == Tripoint(0, 0, 0)

    def test_direction_of(self) -> None:
        assert direction_of(Tripoint(0, 0, -1)) is Direction.BELOW
        assert direction_of(Tripoint(1, 1, 0)) is None
        assert direction_of(Tripoint(0, 0, 0)) is None


class TestItems:
    """Tests for item kinds and the factory."""

    def test_volume(self) -> None:
        water = ItemFactory().spawn("water_clean", charges=4)
        assert water.volume == 1000
        assert water.made_of(Phase.LIQUID)

    def test_spawn_volume_rounds_down(self) -> None:
        water = ItemFactory().spawn_volume("water", 1100)
        assert water.charges == 4

    def test_unknown_type(self) -> None:
        with pytest.raises(KeyError):
            ItemFactory().spawn("unobtainium")


class TestSubmap:
    """Tests for Submap furniture and item piles."""

    def test_defaults(self) -> None:
        sm = Submap(size=4)
        assert sm.furniture.shape == (4, 4)
        assert np.all(sm.furniture == NULL_FURNITURE_ID)

    def test_find_furniture(self) -> None:
        sm = Submap(size=4)
        sm.set_furn(Point(3, 0), PLUMBED_TANK_ID)
        sm.set_furn(Point(0, 2), PLUMBED_TANK_ID)
        assert sm.find_furniture(PLUMBED_TANK_ID) == [Point(3, 0), Point(0, 2)]

    def test_out_of_bounds(self) -> None:
        sm = Submap(size=4)
        with pytest.raises(IndexError):
            sm.get_furn(Point(4, 0))

    def test_items_pile_is_mutable(self) -> None:
        sm = Submap(size=4)
        sm.get_items(Point(1, 1)).append(ItemFactory().spawn("rock"))
        assert len(sm.get_items(Point(1, 1))) == 1


class TestMapBuffer:
    """Tests for submap residency."""

    def test_lookup_missing(self) -> None:
        assert MapBuffer().lookup_submap(Tripoint(0, 0, 0)) is None

    def test_add_and_unload(self) -> None:
        mb = MapBuffer(submap_size=4)
        sm = mb.add_submap(Tripoint(1, 1, 0))
        assert mb.add_submap(Tripoint(1, 1, 0)) is sm
        assert sm.size == 4
        mb.unload(Tripoint(1, 1, 0))
        assert mb.lookup_submap(Tripoint(1, 1, 0)) is None

    def test_tank_capacity(self) -> None:
        assert MapBuffer().furniture_type(PLUMBED_TANK_ID).keg_capacity == 300_000
