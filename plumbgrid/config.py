"""Config: load plumbing network parameters from YAML files.

Map scale factors and the furniture kind that counts as a plumbed tank
live in YAML and are parsed into a typed dataclass here, so hosts with a
different map layout can reuse the network unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml

from plumbgrid.world.furniture import PLUMBED_TANK_ID


@dataclass
class PlumbingConfig:
    """Top-level plumbing configuration.

    Attributes:
        region_size: Cells per region side; edges never cross regions.
        submaps_per_cell: Submaps per cell side.
        submap_size: Tiles per submap side.
        tank_furniture: Furniture id recognised as a plumbed water tank.
        tank_capacity: Keg capacity of that tank in millilitres.
    """

    region_size: int = 180
    submaps_per_cell: int = 2
    submap_size: int = 12
    tank_furniture: str = PLUMBED_TANK_ID
    tank_capacity: int = 300_000

    def __post_init__(self) -> None:
        """Reject scale factors that cannot tile a grid."""
        for name in ("region_size", "submaps_per_cell", "submap_size"):
            value = getattr(self, name)
            if value <= 0:
                msg = f"{name} must be positive, got {value}"
                raise ValueError(msg)
        if self.tank_capacity < 0:
            msg = f"tank_capacity must not be negative, got {self.tank_capacity}"
            raise ValueError(msg)

    @classmethod
    def from_yaml(cls, path: str | Path) -> PlumbingConfig:
        """Load configuration from a YAML file.

        Args:
            path: Path to the YAML config file.

        Returns:
            A populated PlumbingConfig instance.

        Raises:
            FileNotFoundError: If the config file does not exist.
            ValueError: If a scale factor is not positive.
        """
        path = Path(path)
        with path.open("r") as f:
            data = yaml.safe_load(f) or {}

        return cls(
            region_size=data.get("region_size", cls.region_size),
            submaps_per_cell=data.get("submaps_per_cell", cls.submaps_per_cell),
            submap_size=data.get("submap_size", cls.submap_size),
            tank_furniture=data.get("tank_furniture", cls.tank_furniture),
            tank_capacity=data.get("tank_capacity", cls.tank_capacity),
        )
