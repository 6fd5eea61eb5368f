"""Tests for disc placement with exclusion zones."""

from __future__ import annotations

import itertools
import math

import pytest

from forestgen.models import ExclusionZone, GroundPosition
from forestgen.placement import (AreaPlacementSampler, PlacementResult,
                                 estimate_capacity)
from forestgen.rng import SeededRandomSource

RIVER = ExclusionZone(x=0.0, z=-10.0, half_length=90.0, half_width=5.0)


def _sample(count=20, radius=55.0, min_distance=3.5, zones=(), seed=12345,
            attempt_factor=200):
    sampler = AreaPlacementSampler(attempt_factor=attempt_factor)
    return sampler.sample(count, radius, min_distance, zones,
                          SeededRandomSource(seed))


def _min_pairwise(positions):
    return min(
        (a.distance_to(b) for a, b in itertools.combinations(positions, 2)),
        default=math.inf)


class TestAreaPlacementSampler:
    """Tests for AreaPlacementSampler."""

    def test_generous_area_fills_request(self):
        """20 trees in radius 55 with spacing 3.5 should all be placed."""
        result = _sample()
        assert isinstance(result, PlacementResult)
        assert len(result) == 20
        assert result.filled
        assert result.shortfall == 0
        assert not result.exhausted

    def test_reference_positions(self):
        """Seed 12345 should reproduce the reference layout."""
        result = _sample()
        assert result.attempts == 21
        assert result[0].x == pytest.approx(30.215107809593395)
        assert result[0].z == pytest.approx(-3.8694780224382512)
        assert result[19].x == pytest.approx(-37.75703766878925)
        assert result[19].z == pytest.approx(-26.44894135738045)

    def test_positions_inside_disc_on_ground(self):
        """Every position lies within the radius at y=0."""
        for pos in _sample(count=100, radius=30.0, min_distance=1.0):
            assert math.hypot(pos.x, pos.z) <= 30.0 + 1e-9
            assert pos.y == 0.0

    def test_min_distance_respected(self):
        """No two accepted positions are closer than min_distance."""
        result = _sample(count=60, radius=40.0, min_distance=4.0)
        assert _min_pairwise(result.positions) >= 4.0 - 1e-9

    def test_exclusion_zone_respected(self):
        """No position falls inside the river zone."""
        result = _sample(zones=[RIVER])
        assert len(result) == 20
        assert result.attempts == 22
        for pos in result:
            assert not (abs(pos.x - 0.0) <= 90.0 and abs(pos.z + 10.0) <= 5.0)

    def test_exclusion_zone_accepts_mappings(self):
        """Scene-style camelCase dicts work as exclusion zones."""
        zone = {'x': 0, 'z': -10, 'halfLength': 90, 'halfWidth': 5}
        assert _sample(zones=[zone]) == _sample(zones=[RIVER])

    def test_many_zones(self):
        """Positions avoid every one of several zones."""
        zones = [ExclusionZone(10.0, 10.0, 8.0, 8.0),
                 ExclusionZone(-20.0, 0.0, 3.0, 40.0),
                 RIVER]
        result = _sample(count=50, zones=zones, seed=99)
        for pos in result:
            for zone in zones:
                assert not zone.contains(pos.x, pos.z)

    def test_infeasible_density_underfills(self):
        """Radius 1 with spacing 10 cannot hold 5 trees."""
        result = _sample(count=5, radius=1.0, min_distance=10.0)
        assert len(result) < 5
        assert len(result) == 1
        assert result.shortfall == 4
        assert result.exhausted
        assert result.attempts == result.max_attempts == 1000
        assert _min_pairwise(result.positions) >= 10.0

    def test_underfill_is_logged(self, caplog):
        """A short result is reported as requested vs placed."""
        with caplog.at_level("WARNING", logger="forestgen.placement"):
            _sample(count=5, radius=1.0, min_distance=10.0)
        assert "requested 5, placed 1" in caplog.text

    def test_zone_covering_disc_places_nothing(self):
        """When every candidate is excluded the result is empty."""
        zone = ExclusionZone(0.0, 0.0, 100.0, 100.0)
        result = _sample(count=3, radius=10.0, zones=[zone])
        assert len(result) == 0
        assert result.attempts == 600

    @pytest.mark.parametrize("count", [0, -3, None, "many"])
    def test_non_positive_or_bad_count_is_empty(self, count):
        """Bad counts clamp to zero and draw nothing."""
        result = _sample(count=count)
        assert len(result) == 0
        assert result.requested == 0
        assert result.attempts == 0

    def test_negative_min_distance_clamped(self):
        """Negative spacing behaves like no spacing."""
        assert _sample(min_distance=-5.0) == _sample(min_distance=0.0)

    def test_attempt_factor_configurable(self):
        """A smaller cap means fewer attempts."""
        result = _sample(count=5, radius=1.0, min_distance=10.0,
                         attempt_factor=10)
        assert result.max_attempts == 50
        assert result.attempts == 50

    def test_two_draws_per_attempt(self):
        """Each attempt consumes exactly two draws."""
        rng = SeededRandomSource(5)
        result = AreaPlacementSampler().sample(3, 1.0, 10.0, [], rng)
        reference = SeededRandomSource(5)
        for _ in range(result.attempts * 2):
            reference()
        assert rng() == reference()

    def test_deterministic(self):
        """Same seed and parameters give identical results."""
        assert _sample(zones=[RIVER]) == _sample(zones=[RIVER])


class TestExclusionZone:
    """Tests for ExclusionZone."""

    def test_boundary_is_inside(self):
        zone = ExclusionZone(0.0, -10.0, 90.0, 5.0)
        assert zone.contains(90.0, -5.0)
        assert zone.contains(-90.0, -15.0)
        assert not zone.contains(90.01, -10.0)
        assert not zone.contains(0.0, -4.99)

    def test_missing_keys_default_to_zero(self):
        zone = ExclusionZone.coerce({'halfLength': 2})
        assert zone == ExclusionZone(0.0, 0.0, 2.0, 0.0)

    def test_rejects_other_types(self):
        with pytest.raises(TypeError):
            ExclusionZone.coerce((0, 0, 1, 1))

    def test_polygon_matches_extents(self):
        poly = ExclusionZone(1.0, 2.0, 3.0, 4.0).to_polygon()
        assert poly.bounds == (-2.0, -2.0, 4.0, 6.0)

    def test_ground_position_iterates_xyz(self):
        assert tuple(GroundPosition(1.5, -2.0)) == (1.5, 0.0, -2.0)


class TestEstimateCapacity:
    """Tests for estimate_capacity."""

    def test_generous_area(self):
        """The default scene has room for far more than 20 trees."""
        assert estimate_capacity(55.0, 3.5) > 500

    def test_infeasible_area(self):
        """Radius 1 with spacing 10 fits a single tree."""
        assert estimate_capacity(1.0, 10.0) == 1

    def test_zones_reduce_capacity(self):
        assert estimate_capacity(55.0, 3.5, [RIVER]) < estimate_capacity(55.0, 3.5)

    def test_fully_excluded(self):
        zone = ExclusionZone(0.0, 0.0, 100.0, 100.0)
        assert estimate_capacity(10.0, 1.0, [zone]) == 0

    def test_zero_radius(self):
        assert estimate_capacity(0.0, 1.0) == 1
        assert estimate_capacity(0.0, 1.0, [ExclusionZone(0, 0, 1, 1)]) == 0
