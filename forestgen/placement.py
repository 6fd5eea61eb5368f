"""Tree placement inside a disc via bounded rejection sampling.

Not a true Poisson-disc sampler: candidates are drawn uniformly over the
disc and rejected against exclusion zones and already-accepted points,
up to ``target * attempt_factor`` attempts.  Dense requests come back
short rather than failing; the shortfall is reported on the result.
"""

import logging
import math
from dataclasses import dataclass
from typing import Tuple

from shapely.geometry import Point
from shapely.ops import unary_union

from .constants import ATTEMPT_FACTOR
from .models import ExclusionZone, GroundPosition

logger = logging.getLogger(__name__)

_TWO_PI = math.pi * 2


@dataclass(frozen=True)
class PlacementResult:
    """Accepted positions plus the bookkeeping needed to spot under-fill."""
    positions: Tuple[GroundPosition, ...]
    requested: int
    attempts: int
    max_attempts: int

    def __len__(self):
        return len(self.positions)

    def __iter__(self):
        return iter(self.positions)

    def __getitem__(self, index):
        return self.positions[index]

    @property
    def filled(self) -> bool:
        return len(self.positions) >= self.requested

    @property
    def shortfall(self) -> int:
        """Requested minus placed; 0 when the request was met."""
        return self.requested - len(self.positions)

    @property
    def exhausted(self) -> bool:
        """True when sampling stopped because the attempt cap was hit."""
        return not self.filled and self.attempts >= self.max_attempts


def _clamp_count(value) -> int:
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return 0


class AreaPlacementSampler:
    """Place up to *target_count* ground points inside a disc.

    Parameters
    ----------
    attempt_factor : int
        Candidate draws allowed per requested point.  The default (200)
        is a heuristic with no feasibility guarantee.
    """

    def __init__(self, attempt_factor: int = ATTEMPT_FACTOR):
        self.attempt_factor = max(0, int(attempt_factor))

    def sample(self, target_count, radius, min_distance,
               exclusion_zones, rng) -> PlacementResult:
        """Draw positions from *rng* until *target_count* are accepted.

        Each attempt consumes exactly two draws (angle, then radius).  The
        radius uses sqrt() so density is uniform over area, not over
        distance from the centre.
        """
        target = _clamp_count(target_count)
        radius = max(0.0, float(radius))
        min_distance = max(0.0, float(min_distance))
        zones = [ExclusionZone.coerce(z) for z in exclusion_zones or ()]
        max_attempts = target * self.attempt_factor

        accepted = []
        attempts = 0
        while len(accepted) < target and attempts < max_attempts:
            attempts += 1
            angle = rng() * _TWO_PI
            r = math.sqrt(rng()) * radius
            x = math.cos(angle) * r
            z = math.sin(angle) * r

            if any(zone.contains(x, z) for zone in zones):
                continue

            too_close = False
            for px, pz in accepted:
                dx = px - x
                dz = pz - z
                if math.sqrt(dx * dx + dz * dz) < min_distance:
                    too_close = True
                    break
            if too_close:
                continue

            accepted.append((x, z))

        result = PlacementResult(
            positions=tuple(GroundPosition(x, z) for x, z in accepted),
            requested=target,
            attempts=attempts,
            max_attempts=max_attempts,
        )
        if result.shortfall:
            logger.warning(
                f"Placement under-filled: requested {target}, placed "
                f"{len(result)} after {attempts} attempts "
                f"(radius={radius}, min_distance={min_distance}, "
                f"{len(zones)} exclusion zones)")
        else:
            logger.debug(f"Placed {len(result)} points in {attempts} attempts")
        return result


def estimate_capacity(radius, min_distance, exclusion_zones=()) -> int:
    """Rough upper bound on how many points fit the disc.

    Usable area is the disc minus the union of the exclusion zones; each
    point claims one hexagonal packing cell of diameter *min_distance*.
    Rejection sampling typically reaches well under this bound.
    """
    radius = max(0.0, float(radius))
    coerced = [ExclusionZone.coerce(z) for z in exclusion_zones or ()]
    if radius == 0.0:
        # Every candidate lands on the origin.
        return 0 if any(z.contains(0.0, 0.0) for z in coerced) else 1
    disc = Point(0.0, 0.0).buffer(radius, quad_segs=64)
    zones = [z.to_polygon() for z in coerced]
    usable = disc.difference(unary_union(zones)) if zones else disc
    if usable.is_empty:
        return 0
    if min_distance <= 0:
        return 2 ** 31 - 1
    cell_area = (math.sqrt(3) / 2.0) * min_distance * min_distance
    return max(1, int(usable.area / cell_area))
