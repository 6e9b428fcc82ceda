"""
Independent WGS84 Reference Transform Backed by PROJ.

This module wraps the `pyproj` library as a second, independently
implemented exact transform between ECEF (EPSG:4978) and ellipsoidal
geographic 3D coordinates (EPSG:4979). It exposes the same interface as
`EarthModel` (``shape``, ``xyz_for_lpa``, ``lpa_for_xyz``) so that the
validation diagnostics can be run against either backend.

Implementation
--------------
PROJ implements the geocentric conversion with closed-form
(non-iterative) formulas, which makes it a useful cross-check for the
Bowring iteration in `geospatial.coordinate_models`.

References
----------
- PROJ coordinate transformation software: https://proj.org/
"""

import numpy as np
from pyproj import Transformer

from common.logging_config import get_logger
from common.types import XYZ, LPA
from geospatial.coordinate_models import Shape, WGS84_SHAPE

logger = get_logger(__name__)

# Geocentric <-> geographic 3D on WGS84 (lon, lat in degrees, h in meters)
_ecef_to_lla = Transformer.from_crs("EPSG:4978", "EPSG:4979", always_xy=True)
_lla_to_ecef = Transformer.from_crs("EPSG:4979", "EPSG:4978", always_xy=True)


class PyprojReference:
    """WGS84 exact transform using PROJ.

    Examples
    --------
    >>> ref = PyprojReference()
    >>> lpa = ref.lpa_for_xyz(XYZ(6_378_137.0, 0.0, 0.0))
    >>> round(lpa.altitude, 6)
    0.0
    """

    def __init__(self):
        self._logger = get_logger("PyprojReference")

    @property
    def shape(self) -> Shape:
        return WGS84_SHAPE

    def lpa_for_xyz(self, xyz: XYZ) -> LPA:
        """Cartesian to geodetic (radians, meters)."""
        lon_deg, lat_deg, alt_m = _ecef_to_lla.transform(xyz.x0, xyz.x1, xyz.x2)
        return LPA(
            float(np.radians(lon_deg)),
            float(np.radians(lat_deg)),
            float(alt_m)
        )

    def xyz_for_lpa(self, lpa: LPA) -> XYZ:
        """Geodetic (radians, meters) to Cartesian."""
        X, Y, Z = _lla_to_ecef.transform(
            np.degrees(lpa.longitude),
            np.degrees(lpa.parallel),
            lpa.altitude
        )
        return XYZ(float(X), float(Y), float(Z))

    def __repr__(self) -> str:
        return "PyprojReference(EPSG:4978 <-> EPSG:4979)"
