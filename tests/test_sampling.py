"""
tests/test_sampling.py - Sampling Plan and Grid Tests
"""

import numpy as np
import pytest

from common.types import XYZ
from common.units import Q_
from sampling.sample_spec import SampleSpec, RANGE_LON, RANGE_PAR, samples_for
from sampling.grids import (
    altitude_band_spec,
    build_meridian_grid,
    bulk_samples_alt,
    bulk_samples_lon,
    bulk_samples_lpa,
    bulk_samples_par,
    combo_samples_lpa,
    grid_as_array,
    points_for_lpas,
)


class TestSampleSpec:
    """Test uniform sampling over a closed interval."""

    def test_end_points_included(self):
        """First and last samples hit the interval ends."""
        spec = SampleSpec(7, (-2.0, 5.0))
        vals = samples_for(spec)
        assert len(vals) == 7
        assert vals[0] == -2.0
        assert abs(vals[-1] - 5.0) < 1e-15

    def test_delta(self):
        spec = SampleSpec(5, (0.0, 1.0))
        assert spec.delta == 0.25
        assert spec.value_at_index(4) == 1.0

    def test_monotonic(self):
        vals = SampleSpec(33, (0.0, 0.5 * np.pi)).values()
        assert np.all(np.diff(vals) > 0.0)

    def test_single_sample_at_start(self):
        """One sample sits at the start of the interval."""
        spec = SampleSpec(1, (3.0, 9.0))
        assert spec.delta == 0.0
        assert list(spec.values()) == [3.0]

    def test_zero_samples(self):
        spec = SampleSpec(0, (0.0, 1.0))
        assert spec.values().size == 0

    def test_negative_count_rejected(self):
        with pytest.raises(ValueError):
            SampleSpec(-1, (0.0, 1.0))

    def test_index_outside_extrapolates(self):
        spec = SampleSpec(3, (0.0, 2.0))
        assert spec.value_at_index(3) == 3.0
        assert spec.value_at_index(-1) == -1.0

    def test_standard_ranges(self):
        """Longitude range stays just short of +pi."""
        assert RANGE_LON[0] == -np.pi
        assert RANGE_LON[1] < np.pi
        assert RANGE_PAR == (-0.5 * np.pi, 0.5 * np.pi)


class TestMeridianGrid:
    """Test meridian half-plane grids."""

    def test_size(self, meridian_grid):
        assert len(meridian_grid) == 33 * 33

    def test_order_parallel_outer_radius_inner(self):
        """Consecutive points share a direction; radius varies fastest."""
        grid = build_meridian_grid(
            SampleSpec(3, (1.0, 2.0)),
            SampleSpec(2, (0.0, 0.5 * np.pi)),
            longitude=0.0
        )
        assert len(grid) == 6
        np.testing.assert_allclose(grid[0].as_array(), [1.0, 0.0, 0.0])
        np.testing.assert_allclose(grid[1].as_array(), [1.5, 0.0, 0.0])
        np.testing.assert_allclose(grid[2].as_array(), [2.0, 0.0, 0.0])
        np.testing.assert_allclose(grid[3].as_array(), [0.0, 0.0, 1.0], atol=1e-15)

    def test_points_lie_in_half_plane(self, meridian_grid):
        """Every point has the requested longitude (or sits on the axis)."""
        arr = grid_as_array(meridian_grid)
        off_axis = np.hypot(arr[:, 0], arr[:, 1]) > 1.0
        lons = np.arctan2(arr[off_axis, 1], arr[off_axis, 0])
        np.testing.assert_allclose(lons, 0.25 * np.pi, atol=1e-12)

    def test_radii_match_spec(self):
        rad_spec = SampleSpec(4, (10.0, 13.0))
        grid = build_meridian_grid(rad_spec, SampleSpec(3, (0.0, 1.0)))
        mags = [xyz.magnitude() for xyz in grid]
        np.testing.assert_allclose(mags, list(rad_spec.values()) * 3)

    def test_empty_grid_array(self):
        assert grid_as_array([]).shape == (0, 3)

    def test_grid_reiterable(self, meridian_grid):
        assert list(meridian_grid) == list(meridian_grid)


class TestAltitudeBand:
    """Test radial plans around the characteristic radius."""

    def test_band_limits(self, wgs84_earth):
        spec = altitude_band_spec(33, -100_000.0, 100_000.0, wgs84_earth)
        lam = wgs84_earth.ellipsoid.lambda_
        assert abs(spec.first - (lam - 100_000.0)) < 1e-6
        assert abs(spec.last - (lam + 100_000.0)) < 1e-6

    def test_quantity_limits(self, wgs84_earth):
        """pint quantities are converted to meters."""
        spec = altitude_band_spec(3, Q_(-10, 'km'), Q_(10, 'km'), wgs84_earth)
        lam = wgs84_earth.ellipsoid.lambda_
        assert abs(spec.first - (lam - 10_000.0)) < 1e-6

    def test_wrong_units_rejected(self, wgs84_earth):
        with pytest.raises(ValueError):
            altitude_band_spec(3, Q_(-1, 'second'), Q_(1, 'second'), wgs84_earth)


class TestBulkSamples:
    """Test bulk geodetic sample sets."""

    def test_key_values_included(self):
        assert 0.0 in bulk_samples_lon()
        assert -0.5 * np.pi in bulk_samples_par()
        assert 0.5 * np.pi in bulk_samples_par()
        assert 0.0 in bulk_samples_alt()

    def test_counts(self):
        assert len(bulk_samples_lon(8)) == 11
        assert len(bulk_samples_par(8)) == 13
        assert len(bulk_samples_alt(8)) == 11
        assert len(bulk_samples_lpa(2, 2, 2)) == 5 * 7 * 5

    def test_altitude_bulk_spacing(self):
        """Bulk altitudes start at -alt_max with step 2*alt_max/num."""
        alts = bulk_samples_alt(4, alt_max=100.0)
        assert alts[3:] == [-100.0, -50.0, 0.0, 50.0]

    def test_combo_longitude_outermost(self):
        lpas = combo_samples_lpa([0.0, 1.0], [0.1, 0.2], [5.0])
        assert [lpa.longitude for lpa in lpas] == [0.0, 0.0, 1.0, 1.0]
        assert [lpa.parallel for lpa in lpas] == [0.1, 0.2, 0.1, 0.2]

    def test_points_for_lpas(self, wgs84_earth):
        lpas = combo_samples_lpa([0.0], [0.0], [0.0, 1000.0])
        xyzs = points_for_lpas(lpas, wgs84_earth)
        assert isinstance(xyzs[0], XYZ)
        assert abs(xyzs[0].x0 - 6_378_137.0) < 1e-6
        assert abs(xyzs[1].x0 - 6_379_137.0) < 1e-6

    def test_points_for_no_lpas(self, wgs84_earth):
        assert points_for_lpas([], wgs84_earth) == []
