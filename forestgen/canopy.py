"""Per-tree leaf canopy: instance transforms and colours.

Leaves are scattered around the trunk axis just above the trunk top.  The
radial distance multiplies two uniform draws, which piles leaves towards
the centre and gives a rounder silhouette than uniform-area sampling.
Unlike tree placement nothing is rejected, so a canopy always holds
exactly the requested number of leaves.
"""

import colorsys
import logging
import math

from . import constants as C
from .models import CanopyInstanceSet, LeafInstance

logger = logging.getLogger(__name__)

_TWO_PI = math.pi * 2
_HALF_PI = math.pi / 2

# Random draws consumed per leaf.
DRAWS_PER_LEAF = 10


def hsl_to_rgb(h, s, l):
    """Convert HSL (all 0-1, hue wraps) to an RGB tuple in 0-1."""
    h = h % 1.0
    s = min(max(s, 0.0), 1.0)
    l = min(max(l, 0.0), 1.0)
    return colorsys.hls_to_rgb(h, l, s)


class CanopyInstanceGenerator:
    """Generate the leaf instances of one tree crown."""

    def __init__(self, canopy_base_height: float = C.CANOPY_BASE_HEIGHT):
        self.canopy_base_height = canopy_base_height

    def generate(self, leaf_count, rng, canopy_base_height=None):
        """Return a CanopyInstanceSet of exactly *leaf_count* leaves.

        Parameters
        ----------
        leaf_count : int
            Number of leaves; non-positive values give an empty canopy.
        rng : callable
            Zero-argument source of floats in [0, 1).
        canopy_base_height : float, optional
            Lowest leaf height in tree-local space.  Defaults to the
            generator's base (trunk height plus gap).
        """
        base = (self.canopy_base_height if canopy_base_height is None
                else canopy_base_height)
        try:
            count = max(0, int(leaf_count))
        except (TypeError, ValueError):
            count = 0

        leaves = []
        for _ in range(count):
            h = rng() * C.LEAF_HEIGHT_RANGE + C.LEAF_HEIGHT_MIN
            spread = rng() * C.LEAF_RADIUS_SCALE
            radius = spread * (C.LEAF_SPREAD_MIN + rng() * C.LEAF_SPREAD_RANGE)
            angle = rng() * _TWO_PI
            position = (math.cos(angle) * radius,
                        base + h,
                        math.sin(angle) * radius)

            # Face roughly up, jittered
            tilt = -_HALF_PI + (rng() - 0.5) * C.LEAF_TILT_JITTER
            spin = rng() * _TWO_PI
            roll = (rng() - 0.5) * C.LEAF_TILT_JITTER

            scale = C.LEAF_SCALE_MIN + rng() * C.LEAF_SCALE_RANGE

            hue = C.LEAF_HUE + (rng() - 0.5) * C.LEAF_HUE_JITTER
            lightness = C.LEAF_LIGHTNESS + rng() * C.LEAF_LIGHTNESS_RANGE
            color = hsl_to_rgb(hue, C.LEAF_SATURATION, lightness)

            leaves.append(LeafInstance(
                position=position,
                rotation=(tilt, spin, roll),
                scale=scale,
                color=color,
            ))

        logger.debug(f"Generated canopy of {count} leaves above y={base:.2f}")
        return CanopyInstanceSet(leaves)
