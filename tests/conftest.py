"""Shared fixtures for the plumbgrid test suite."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from plumbgrid.config import PlumbingConfig
from plumbgrid.network.plumbing import PlumbingGrid
from plumbgrid.world.coords import Point, Projection, Tripoint
from plumbgrid.world.mapbuffer import MapBuffer

PlaceTank = Callable[..., Tripoint]


@pytest.fixture
def default_config() -> PlumbingConfig:
    """Default plumbing config (no YAML file needed)."""
    return PlumbingConfig()


@pytest.fixture
def small_config() -> PlumbingConfig:
    """Small map scales so regions and submaps stay cheap to reason about."""
    return PlumbingConfig(region_size=8, submaps_per_cell=2, submap_size=4)


@pytest.fixture
def projection(small_config: PlumbingConfig) -> Projection:
    return Projection.from_config(small_config)


@pytest.fixture
def grid(small_config: PlumbingConfig) -> PlumbingGrid:
    """A plumbing grid over an empty map buffer."""
    return PlumbingGrid.from_config(small_config)


@pytest.fixture
def mapbuffer(grid: PlumbingGrid) -> MapBuffer:
    return grid.mapbuffer


@pytest.fixture
def place_tank(grid: PlumbingGrid) -> PlaceTank:
    """Place a plumbed tank in a cell, optionally pre-filled with liquid.

    Returns the absolute tile coordinate of the tank.
    """

    def _place(
        cell: Tripoint,
        *,
        submap_index: int = 0,
        pos: Point = Point(1, 1),
        liquid: str | None = None,
        charges: int = 0,
    ) -> Tripoint:
        sm_pos = grid.projection.submaps_of(cell)[submap_index]
        sm = grid.mapbuffer.add_submap(sm_pos)
        sm.set_furn(pos, grid.config.tank_furniture)
        if liquid is not None:
            sm.get_items(pos).append(grid.items.spawn(liquid, charges))
        return grid.projection.sm_to_ms(sm_pos, pos)

    return _place
