"""Tests for canopy instance generation."""

from __future__ import annotations

import colorsys
import math

import pytest

from forestgen.canopy import (DRAWS_PER_LEAF, CanopyInstanceGenerator,
                              hsl_to_rgb)
from forestgen.constants import CANOPY_BASE_HEIGHT, TRUNK_HEIGHT
from forestgen.models import CanopyInstanceSet, LeafInstance
from forestgen.rng import SeededRandomSource


def _canopy(leaf_count=80, seed=12346, **kwargs):
    return CanopyInstanceGenerator().generate(
        leaf_count, SeededRandomSource(seed), **kwargs)


class TestCanopyInstanceGenerator:
    """Tests for CanopyInstanceGenerator."""

    def test_zero_leaves(self):
        """leaf_count=0 gives an empty canopy."""
        canopy = _canopy(0)
        assert isinstance(canopy, CanopyInstanceSet)
        assert len(canopy) == 0
        assert canopy.lowest_y is None

    @pytest.mark.parametrize("count", [1, 8, 80, 300])
    def test_exact_count(self, count):
        """A canopy always has exactly the requested leaves."""
        assert len(_canopy(count)) == count

    def test_negative_count_is_empty(self):
        assert len(_canopy(-4)) == 0

    def test_canopy_floor(self):
        """No leaf sits below trunk top plus gap."""
        canopy = _canopy(300, seed=1)
        assert CANOPY_BASE_HEIGHT == pytest.approx(TRUNK_HEIGHT + 0.12)
        assert canopy.lowest_y >= CANOPY_BASE_HEIGHT
        for leaf in canopy:
            assert CANOPY_BASE_HEIGHT + 0.1 <= leaf.position[1]
            assert leaf.position[1] <= CANOPY_BASE_HEIGHT + 0.7

    def test_custom_base_height(self):
        """The base height can be overridden per call."""
        canopy = _canopy(50, canopy_base_height=5.0)
        assert canopy.lowest_y >= 5.0

    def test_reference_first_leaf(self):
        """Seed 12346 reproduces the reference first leaf."""
        leaf = _canopy(80)[0]
        assert isinstance(leaf, LeafInstance)
        assert leaf.position == pytest.approx(
            (-0.27874092306626375, 2.253243215503171, 0.5510400143830553))
        assert leaf.rotation == pytest.approx(
            (-1.2947562710989753, 4.282358204242475, -0.14654830251820386))
        assert leaf.scale == pytest.approx(1.1918499001068994)
        expected = colorsys.hls_to_rgb(
            0.34361899747280406, 0.5756161629222334, 0.6)
        assert leaf.color == pytest.approx(expected)

    def test_value_ranges(self):
        """Transforms and colours stay inside their jitter bands."""
        for leaf in _canopy(300, seed=77):
            x, _, z = leaf.position
            assert math.hypot(x, z) < 0.9 * 1.8
            tilt, spin, roll = leaf.rotation
            assert -math.pi / 2 - 0.3 <= tilt <= -math.pi / 2 + 0.3
            assert 0.0 <= spin < 2 * math.pi
            assert -0.3 <= roll <= 0.3
            assert 0.6 <= leaf.scale < 1.5
            r, g, b = leaf.color
            assert all(0.0 <= c <= 1.0 for c in leaf.color)
            assert g > r and g > b  # green band

    def test_draws_per_leaf(self):
        """Each leaf consumes a fixed number of draws."""
        rng = SeededRandomSource(3)
        CanopyInstanceGenerator().generate(7, rng)
        reference = SeededRandomSource(3)
        for _ in range(7 * DRAWS_PER_LEAF):
            reference()
        assert rng() == reference()

    def test_deterministic(self):
        """Same seed gives an identical canopy; other seeds differ."""
        assert _canopy(80, seed=5) == _canopy(80, seed=5)
        assert _canopy(80, seed=5) != _canopy(80, seed=6)

    def test_prefix_stable(self):
        """Leaf order is stable: a shorter canopy is a prefix of a longer."""
        short = _canopy(10, seed=9)
        long = _canopy(40, seed=9)
        assert list(short) == list(long)[:10]


class TestHslToRgb:
    """Tests for hsl_to_rgb."""

    def test_pure_colors(self):
        assert hsl_to_rgb(0.0, 1.0, 0.5) == pytest.approx((1.0, 0.0, 0.0))
        assert hsl_to_rgb(1 / 3, 1.0, 0.5) == pytest.approx((0.0, 1.0, 0.0))
        assert hsl_to_rgb(2 / 3, 1.0, 0.5) == pytest.approx((0.0, 0.0, 1.0))

    def test_grey_when_unsaturated(self):
        assert hsl_to_rgb(0.4, 0.0, 0.3) == pytest.approx((0.3, 0.3, 0.3))

    def test_hue_wraps(self):
        assert hsl_to_rgb(1.25, 0.6, 0.5) == pytest.approx(
            hsl_to_rgb(0.25, 0.6, 0.5))
