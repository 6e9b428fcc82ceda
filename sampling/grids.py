"""
Sample Grids for Foot-Point Accuracy Studies.

This module composes `SampleSpec` plans into geometrically meaningful point
sets:

- Meridian half-plane grids (radius x parallel angle at fixed longitude),
  distributed circularly rather than geodetically
- Bulk geodetic (LPA) sets spanning the domain of validity, with key
  values (equator, poles, zero altitude) always included

Grids are plain lists owned by the caller; they can be iterated any number
of times.
"""

from typing import List, Sequence
import numpy as np
from numpy.typing import NDArray

from common.logging_config import get_logger
from common.types import XYZ, LPA
from common.units import Scalar, to_meters, validate_units
from geospatial.coordinate_models import EarthModel, xyz_for_lpa_batch
from sampling.sample_spec import SampleSpec, RANGE_LON, RANGE_PAR, samples_for

logger = get_logger(__name__)


def build_meridian_grid(
    rad_spec: SampleSpec,
    par_spec: SampleSpec,
    longitude: float = 0.25 * np.pi
) -> List[XYZ]:
    """Samples covering a meridian half-plane.

    Parameters
    ----------
    rad_spec : SampleSpec
        Radial distances from the origin.
    par_spec : SampleSpec
        Parallel angles in radians (angle above the equatorial plane).
    longitude : float
        Longitude of the half-plane in radians.

    Returns
    -------
    List[XYZ]
        ``par_spec.size * rad_spec.size`` points. The outer loop runs over
        parallel angle and the inner loop over radius, so consecutive
        points share a direction.

    Notes
    -----
    direction = (cos φ cos λ, cos φ sin λ, sin φ), point = ρ * direction
    """
    par_vals = samples_for(par_spec)
    rad_vals = samples_for(rad_spec)

    xyzs: List[XYZ] = []
    for par_val in par_vals:
        xyz_dir = XYZ(
            float(np.cos(par_val) * np.cos(longitude)),
            float(np.cos(par_val) * np.sin(longitude)),
            float(np.sin(par_val))
        )
        for rad_val in rad_vals:
            xyzs.append(float(rad_val) * xyz_dir)

    logger.debug(
        f"Meridian grid at longitude {longitude:.6f}: "
        f"{par_spec.size} parallels x {rad_spec.size} radii"
    )
    return xyzs


def grid_as_array(grid: Sequence[XYZ]) -> NDArray[np.float64]:
    """Points as an (N, 3) array; an empty grid gives shape (0, 3)."""
    if not grid:
        return np.empty((0, 3), dtype=np.float64)
    return np.array([xyz.as_array() for xyz in grid], dtype=np.float64)


@validate_units({'alt_lo': 'meter', 'alt_hi': 'meter'})
def altitude_band_spec(
    count: int,
    alt_lo: Scalar,
    alt_hi: Scalar,
    earth: EarthModel
) -> SampleSpec:
    """Radial sampling plan for a band around the characteristic radius.

    Parameters
    ----------
    count : int
        Number of radial samples.
    alt_lo, alt_hi : float or pint.Quantity
        Band limits relative to the characteristic radius. Bare numbers
        are taken to be in the length unit of the ellipsoid.
    earth : EarthModel
        Body model supplying the characteristic radius.

    Returns
    -------
    SampleSpec
        Radii from ``lambda + alt_lo`` to ``lambda + alt_hi``.
    """
    rad_earth = earth.ellipsoid.lambda_
    return SampleSpec(count, (rad_earth + to_meters(alt_lo), rad_earth + to_meters(alt_hi)))


def bulk_samples_lon(num_bulk: int = 8) -> List[float]:
    """Collection of longitude angle values.

    The range end points and zero are always included, followed by
    `num_bulk` uniformly spaced values.
    """
    lon_spec = SampleSpec(num_bulk, RANGE_LON)
    samps = [lon_spec.first, 0.0, lon_spec.last]
    samps.extend(lon_spec.value_at_index(nn) for nn in range(lon_spec.size))
    return samps


def bulk_samples_par(num_bulk: int = 8) -> List[float]:
    """Collection of parallel (latitude) angle values.

    The poles, mid-latitudes and equator are always included, followed by
    `num_bulk` uniformly spaced values.
    """
    samps = [-0.5 * np.pi, -0.25 * np.pi, 0.0, 0.25 * np.pi, 0.5 * np.pi]
    par_spec = SampleSpec(num_bulk, RANGE_PAR)
    samps.extend(par_spec.value_at_index(nn) for nn in range(num_bulk))
    return samps


def bulk_samples_alt(num_bulk: int = 8, alt_max: float = 100_000.0) -> List[float]:
    """Collection of altitude values.

    The band limits and zero are always included. The bulk values start at
    ``-alt_max`` with spacing ``2 * alt_max / num_bulk`` (so the upper limit
    is reached only through the key values).
    """
    samps = [-alt_max, 0.0, alt_max]
    alt_delta = (2.0 * alt_max) / float(num_bulk)
    samps.extend(-alt_max + float(nn) * alt_delta for nn in range(num_bulk))
    return samps


def combo_samples_lpa(
    lon_samps: Sequence[float],
    par_samps: Sequence[float],
    alt_samps: Sequence[float]
) -> List[LPA]:
    """Every combination of the given values (longitude outermost)."""
    return [
        LPA(float(lon), float(par), float(alt))
        for lon in lon_samps
        for par in par_samps
        for alt in alt_samps
    ]


def bulk_samples_lpa(
    lon_bulk: int = 8,
    par_bulk: int = 8,
    alt_bulk: int = 8
) -> List[LPA]:
    """Collection of LPA locations spanning the domain of validity."""
    return combo_samples_lpa(
        bulk_samples_lon(lon_bulk),
        bulk_samples_par(par_bulk),
        bulk_samples_alt(alt_bulk)
    )


def points_for_lpas(lpas: Sequence[LPA], earth: EarthModel) -> List[XYZ]:
    """Cartesian points for a collection of geodetic locations."""
    if not lpas:
        return []
    values = np.array([tuple(lpa) for lpa in lpas], dtype=np.float64)
    xyzs = xyz_for_lpa_batch(values[:, 0], values[:, 1], values[:, 2], earth)
    return [XYZ.from_array(row) for row in xyzs]
