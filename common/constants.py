"""
Geodetic Constants for Ellipsoid Modeling.

This module provides the defining parameters of the reference ellipsoids
used throughout the system, with their uncertainty bounds and sources.
All lengths are in SI units (meters).

References
----------
- WGS84 parameters: NIMA TR8350.2, Third Edition, 2000
- GRS80 parameters: Moritz, H. (2000). Geodetic Reference System 1980.
  Journal of Geodesy, 74(1), 128-133.
"""

from dataclasses import dataclass
from typing import Final
import numpy as np


@dataclass(frozen=True)
class Constant:
    """A physical constant with uncertainty and provenance.

    Attributes
    ----------
    value : float
        The nominal value of the constant.
    uncertainty : float
        The standard uncertainty (1-sigma) of the constant.
    unit : str
        The SI unit of the constant.
    source : str
        Reference for the constant value.
    description : str
        Human-readable description of the constant.
    """
    value: float
    uncertainty: float
    unit: str
    source: str
    description: str


class GeodeticConstants:
    """Registry of geodetic constants used throughout the system.

    Reference Ellipsoids
    --------------------
    Each ellipsoid is defined by its semi-major axis and flattening.
    The semi-minor axis is provided for convenience; it is derived
    from the two defining parameters.

    Sampling Defaults
    -----------------
    Default altitude band and sample counts used by the validation
    studies.
    """

    # =========================================================================
    # WGS84 Ellipsoid Parameters
    # Reference: NIMA TR8350.2, Third Edition, 2000
    # =========================================================================

    WGS84_SEMI_MAJOR_AXIS: Final[Constant] = Constant(
        value=6_378_137.0,
        uncertainty=0.0,  # Defined exactly
        unit="m",
        source="WGS84, NIMA TR8350.2",
        description="Semi-major axis (equatorial radius) of WGS84 ellipsoid"
    )

    WGS84_FLATTENING: Final[Constant] = Constant(
        value=1.0 / 298.257223563,
        uncertainty=0.0,  # Defined exactly
        unit="dimensionless",
        source="WGS84, NIMA TR8350.2",
        description="Flattening of WGS84 ellipsoid: f = (a - b) / a"
    )

    WGS84_SEMI_MINOR_AXIS: Final[Constant] = Constant(
        value=6_356_752.314245,
        uncertainty=0.0001,
        unit="m",
        source="WGS84, NIMA TR8350.2 (derived)",
        description="Semi-minor axis (polar radius) of WGS84 ellipsoid"
    )

    # =========================================================================
    # GRS80 Ellipsoid Parameters
    # =========================================================================

    GRS80_SEMI_MAJOR_AXIS: Final[Constant] = Constant(
        value=6_378_137.0,
        uncertainty=0.0,  # Defined exactly
        unit="m",
        source="GRS80, Moritz (2000)",
        description="Semi-major axis (equatorial radius) of GRS80 ellipsoid"
    )

    GRS80_FLATTENING: Final[Constant] = Constant(
        value=1.0 / 298.257222100882711,
        uncertainty=0.0,
        unit="dimensionless",
        source="GRS80, Moritz (2000) (derived from J2)",
        description="Flattening of GRS80 ellipsoid"
    )

    EARTH_MEAN_RADIUS: Final[Constant] = Constant(
        value=6_371_008.8,
        uncertainty=0.1,
        unit="m",
        source="IUGG mean radius",
        description="Mean radius of Earth, R1 = (2a + b) / 3"
    )

    # =========================================================================
    # Validation Study Defaults
    # =========================================================================

    DEFAULT_ALTITUDE_BAND: Final[Constant] = Constant(
        value=100_000.0,
        uncertainty=0.0,
        unit="m",
        source="convention",
        description="Half-width of the altitude band sampled by default studies"
    )

    DEFAULT_SAMPLE_COUNT: Final[int] = 33

    DEFAULT_MERIDIAN_LONGITUDE: Final[float] = 0.25 * np.pi

    @staticmethod
    def semi_minor_axis(semi_major: float, flattening: float) -> float:
        """Compute the semi-minor axis from the defining parameters.

        Notes
        -----
        b = a (1 - f)
        """
        return semi_major * (1.0 - flattening)
