"""
Shared pytest fixtures for the foot-point validation tests.

Provides:
- wgs84_earth: EarthModel on the WGS84 shape
- unit_sphere_earth: EarthModel on a unit sphere
- meridian_grid: the standard 33 x 33 meridian half-plane grid on WGS84
- run_id: unique audit run identifier per test
"""

import uuid

import numpy as np
import pytest

from geospatial.coordinate_models import EarthModel, WGS84_SHAPE, sphere_shape
from sampling.grids import altitude_band_spec, build_meridian_grid
from sampling.sample_spec import SampleSpec


@pytest.fixture
def wgs84_earth():
    return EarthModel(WGS84_SHAPE)


@pytest.fixture
def unit_sphere_earth():
    return EarthModel(sphere_shape(1.0))


@pytest.fixture
def meridian_grid(wgs84_earth):
    """33 radii over lambda +/- 100 km, 33 parallels over [0, pi/2]."""
    rad_spec = altitude_band_spec(33, -100_000.0, 100_000.0, wgs84_earth)
    par_spec = SampleSpec(33, (0.0, 0.5 * np.pi))
    return build_meridian_grid(rad_spec, par_spec, 0.25 * np.pi)


@pytest.fixture
def run_id():
    return f"test_{uuid.uuid4().hex[:12]}"
