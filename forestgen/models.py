"""Data classes and path management."""

import math
import pathlib
from dataclasses import dataclass, field
from typing import Optional, Tuple

from shapely.geometry import Polygon, box

from .constants import OUTPUT_DIR


class PathManager:
    """Manage output paths for exported forests."""

    @staticmethod
    def get_output_path(filename: str) -> pathlib.Path:
        """Get the output file path (absolute paths pass through)."""
        path = pathlib.Path(filename)
        if path.is_absolute():
            return path
        return OUTPUT_DIR / path


@dataclass(frozen=True)
class ExclusionZone:
    """Axis-aligned rectangle where nothing may be placed.

    Centred at (x, z); *half_length* extends along x and *half_width*
    along z.  The boundary counts as inside.
    """
    x: float = 0.0
    z: float = 0.0
    half_length: float = 0.0
    half_width: float = 0.0

    def contains(self, x: float, z: float) -> bool:
        return (abs(x - self.x) <= self.half_length and
                abs(z - self.z) <= self.half_width)

    def to_polygon(self) -> Polygon:
        """Convert the zone to a shapely polygon in the (x, z) plane."""
        return box(self.x - self.half_length, self.z - self.half_width,
                   self.x + self.half_length, self.z + self.half_width)

    @classmethod
    def coerce(cls, zone) -> "ExclusionZone":
        """Accept an ExclusionZone or a mapping with x/z/half extents.

        Both snake_case and the scene's camelCase keys are understood;
        missing keys default to 0.
        """
        if isinstance(zone, cls):
            return zone
        if isinstance(zone, dict):
            return cls(
                x=float(zone.get('x') or 0.0),
                z=float(zone.get('z') or 0.0),
                half_length=float(zone.get('half_length',
                                           zone.get('halfLength')) or 0.0),
                half_width=float(zone.get('half_width',
                                          zone.get('halfWidth')) or 0.0),
            )
        raise TypeError(
            f"Cannot use {type(zone).__name__} as an exclusion zone")

    def to_dict(self) -> dict:
        return {'x': self.x, 'z': self.z,
                'half_length': self.half_length,
                'half_width': self.half_width}


@dataclass(frozen=True)
class GroundPosition:
    """A point on the ground plane; y is always 0."""
    x: float
    z: float
    y: float = 0.0

    def __iter__(self):
        return iter((self.x, self.y, self.z))

    def distance_to(self, other: "GroundPosition") -> float:
        dx = self.x - other.x
        dz = self.z - other.z
        return math.sqrt(dx * dx + dz * dz)


@dataclass(frozen=True)
class LeafInstance:
    """Local transform and colour of one leaf in a canopy."""
    position: Tuple[float, float, float]
    rotation: Tuple[float, float, float]   # euler radians, XYZ order
    scale: float
    color: Tuple[float, float, float]      # RGB, 0-1

    def to_dict(self) -> dict:
        return {
            'position': list(self.position),
            'rotation': list(self.rotation),
            'scale': self.scale,
            'color': list(self.color),
        }


class CanopyInstanceSet:
    """Ordered, immutable sequence of LeafInstance records.

    Order is generation order and is stable for a given seed.
    """

    __slots__ = ('_leaves',)

    def __init__(self, leaves=()):
        self._leaves = tuple(leaves)

    def __len__(self):
        return len(self._leaves)

    def __iter__(self):
        return iter(self._leaves)

    def __getitem__(self, index):
        return self._leaves[index]

    def __eq__(self, other):
        if not isinstance(other, CanopyInstanceSet):
            return NotImplemented
        return self._leaves == other._leaves

    def __hash__(self):
        return hash(self._leaves)

    def __repr__(self):
        return f"CanopyInstanceSet({len(self._leaves)} leaves)"

    @property
    def lowest_y(self) -> Optional[float]:
        """Smallest local leaf height, or None for an empty canopy."""
        if not self._leaves:
            return None
        return min(leaf.position[1] for leaf in self._leaves)


@dataclass(frozen=True)
class TreeDescriptor:
    index: int
    position: GroundPosition
    derived_seed: int
    scale: float
    canopy: CanopyInstanceSet

    def to_dict(self) -> dict:
        return {
            'index': self.index,
            'position': list(self.position),
            'seed': self.derived_seed,
            'scale': self.scale,
            'leaves': [leaf.to_dict() for leaf in self.canopy],
        }


@dataclass(frozen=True)
class ForestParams:
    """Everything that determines a forest; hashable so it can key a cache."""
    count: int
    radius: float
    min_distance: float
    tree_scale: float
    leaf_count: int
    exclusion_zones: Tuple[ExclusionZone, ...] = field(default_factory=tuple)
    seed: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            'count': self.count,
            'radius': self.radius,
            'min_distance': self.min_distance,
            'tree_scale': self.tree_scale,
            'leaf_count': self.leaf_count,
            'exclusion_zones': [z.to_dict() for z in self.exclusion_zones],
            'seed': self.seed,
        }
