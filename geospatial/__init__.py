"""
Geospatial Module for the Geodetic Foot-Point System.

All ellipsoid geometry system-wide originates from this module. No
downstream module may implement surface geometry independently.

This module provides:
- Ellipsoid shape primitives (gradient, radial intersection)
- Exact geodetic <-> Cartesian transformations
- An independent PROJ-backed WGS84 reference transform
"""

from geospatial.coordinate_models import (
    Shape,
    Ellipsoid,
    EarthModel,
    WGS84_SHAPE,
    GRS80_SHAPE,
    sphere_shape,
    xyz_for_lpa,
    lpa_for_xyz,
    xyz_for_lpa_batch,
    radius_of_curvature_meridian,
    radius_of_curvature_prime_vertical,
)

from geospatial.reference import PyprojReference

__all__ = [
    "Shape",
    "Ellipsoid",
    "EarthModel",
    "WGS84_SHAPE",
    "GRS80_SHAPE",
    "sphere_shape",
    "xyz_for_lpa",
    "lpa_for_xyz",
    "xyz_for_lpa_batch",
    "radius_of_curvature_meridian",
    "radius_of_curvature_prime_vertical",
    "PyprojReference",
]
