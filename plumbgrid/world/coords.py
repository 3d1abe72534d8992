"""Coordinates: points and projection between the four map scales.

The world is addressed at four nested scales, coarsest first:

- **om** (overmap): a region, the unit the plumbing store is sharded by.
- **omt** (overmap terrain): a cell, one node of the plumbing graph.
- **sm** (submap): a storage sub-unit; several tile a single cell.
- **ms** (map square): a single tile inside a submap.

Only ``x`` and ``y`` scale between levels; ``z`` is shared by all of them.
Projection uses floor division so negative coordinates land in the
correct parent instead of rounding toward zero.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from plumbgrid.config import PlumbingConfig


@dataclass(frozen=True, order=True)
class Point:
    """A 2D integer coordinate."""

    x: int
    y: int


@dataclass(frozen=True, order=True)
class Tripoint:
    """A 3D integer coordinate with vector arithmetic.

    Attributes:
        x: Column (grows east).
        y: Row (grows south).
        z: Vertical level (grows up).
    """

    x: int
    y: int
    z: int = 0

    def __add__(self, other: Tripoint) -> Tripoint:
        return Tripoint(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Tripoint) -> Tripoint:
        return Tripoint(self.x - other.x, self.y - other.y, self.z - other.z)

    def __neg__(self) -> Tripoint:
        return Tripoint(-self.x, -self.y, -self.z)


@dataclass(frozen=True)
class Projection:
    """Converts coordinates between the om/omt/sm/ms scales.

    Attributes:
        region_size: Cells (omt) per region side.
        submaps_per_cell: Submaps per cell side.
        submap_size: Tiles (ms) per submap side.
    """

    region_size: int = 180
    submaps_per_cell: int = 2
    submap_size: int = 12

    @classmethod
    def from_config(cls, config: PlumbingConfig) -> Projection:
        """Build a projection using the scale factors in ``config``."""
        return cls(
            region_size=config.region_size,
            submaps_per_cell=config.submaps_per_cell,
            submap_size=config.submap_size,
        )

    def omt_to_om(self, p: Tripoint) -> tuple[Point, Tripoint]:
        """Split a global cell coordinate into its region and local cell.

        Args:
            p: Absolute cell coordinate.

        Returns:
            ``(region, local)`` where ``local`` is relative to the region's
            north-west corner and keeps ``p.z``.
        """
        rx, lx = divmod(p.x, self.region_size)
        ry, ly = divmod(p.y, self.region_size)
        return Point(rx, ry), Tripoint(lx, ly, p.z)

    def omt_to_sm(self, p: Tripoint) -> Tripoint:
        """Return the north-west submap of a cell."""
        n = self.submaps_per_cell
        return Tripoint(p.x * n, p.y * n, p.z)

    def sm_to_omt(self, p: Tripoint) -> Tripoint:
        """Return the cell that contains a submap."""
        n = self.submaps_per_cell
        return Tripoint(p.x // n, p.y // n, p.z)

    def ms_to_sm(self, p: Tripoint) -> tuple[Tripoint, Point]:
        """Split a tile coordinate into its submap and in-submap position."""
        sx, lx = divmod(p.x, self.submap_size)
        sy, ly = divmod(p.y, self.submap_size)
        return Tripoint(sx, sy, p.z), Point(lx, ly)

    def sm_to_ms(self, sm: Tripoint, pos: Point | None = None) -> Tripoint:
        """Return the tile at ``pos`` inside ``sm`` (north-west tile if omitted)."""
        pos = pos or Point(0, 0)
        return Tripoint(
            sm.x * self.submap_size + pos.x,
            sm.y * self.submap_size + pos.y,
            sm.z,
        )

    def ms_to_omt(self, p: Tripoint) -> Tripoint:
        """Return the cell that contains a tile."""
        return self.sm_to_omt(self.ms_to_sm(p)[0])

    def omt_to_ms(self, p: Tripoint) -> Tripoint:
        """Return the north-west tile of a cell."""
        return self.sm_to_ms(self.omt_to_sm(p))

    def submaps_of(self, p: Tripoint) -> list[Tripoint]:
        """List every submap tiling a cell in row-major order.

        For the default 2x2 layout this is origin, east, south, south-east.
        """
        base = self.omt_to_sm(p)
        n = self.submaps_per_cell
        return [base + Tripoint(dx, dy, 0) for dy in range(n) for dx in range(n)]
