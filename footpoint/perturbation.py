"""
Perturbative Geodetic Foot-Point Solver.

This module computes an approximate foot point (the point on the ellipsoid
whose normal passes through a given external point) in closed form,
without iterative root finding.

Method
------
The external point x and its foot point p are related by

    p_k = x_k / (1 + 2 η / (|g| μ_k²))

where η is the altitude and |g| the gradient magnitude at the foot point.
Expanding around the *radial* foot point r (where the ray from the origin
through x meets the surface) with pseudo-altitude η0 = |x - r| and writing
η = η0 + ζ, the surface condition Σ p_k² / μ_k² = 1 becomes, to second
order in ζ,

    C - 2 B ζ + A ζ² = 0

with coefficients A, B, C built from the radial basepoint
(`zeta_coefficients`). The smaller root

    ζ = (B / A) (1 - sqrt(1 - A C / B²))

is replaced by its binomial expansion in ``x_arg = A C / B²``, which
avoids the radical. The second-order truncation is the production choice.

Limitations
-----------
η0 is a distance and never negative. For points inside the ellipsoid the
true altitude is negative, so ζ must be large (about twice the depth) and
the truncated series loses accuracy quickly with depth. Near-zero B or |g|
and the origin itself give non-finite results. No check is made for any of
these; the validation diagnostics expose them as data.
"""

from enum import Enum
from typing import NamedTuple, Union
import numpy as np
from numpy.typing import NDArray

from common.logging_config import get_logger
from common.types import XYZ
from geospatial.coordinate_models import Shape

logger = get_logger(__name__)

FloatOrArray = Union[float, NDArray[np.float64]]


class ZetaOrder(str, Enum):
    """Approximation order for the altitude correction ζ."""
    FIRST = "first"
    SECOND = "second"
    THIRD = "third"
    EXACT = "exact"


class QuadraticCoefficients(NamedTuple):
    """Coefficients of C - 2 B ζ + A ζ² = 0 (scalars or arrays)."""
    co_a: FloatOrArray
    co_b: FloatOrArray
    co_c: FloatOrArray


def _coefficient_arrays(
    x_vecs: NDArray[np.float64],
    eta0: NDArray[np.float64],
    gr_mag: NDArray[np.float64],
    mu_sqs: NDArray[np.float64]
) -> QuadraticCoefficients:
    # per-axis terms broadcast along the last axis
    fgk_inv = 0.5 * np.expand_dims(gr_mag, -1) * mu_sqs
    s1k = 1.0 / (fgk_inv + np.expand_dims(eta0, -1))
    n1k = s1k * fgk_inv * x_vecs
    n_per_mu_sq = n1k**2 / mu_sqs

    co_a = 3.0 * np.sum(n_per_mu_sq * s1k * s1k, axis=-1)
    co_b = np.sum(n_per_mu_sq * s1k, axis=-1)
    co_c = np.sum(n_per_mu_sq, axis=-1) - 1.0
    return QuadraticCoefficients(co_a, co_b, co_c)


def zeta_coefficients(
    x_vec: Union[XYZ, NDArray[np.float64]],
    eta0: FloatOrArray,
    gr_mag: FloatOrArray,
    shape: Shape
) -> QuadraticCoefficients:
    """Coefficients of the quadratic in ζ (correction to the altitude).

    Parameters
    ----------
    x_vec : XYZ or ndarray
        External point(s); arrays have shape (..., 3).
    eta0 : float or ndarray
        Radial pseudo-altitude |x - r|.
    gr_mag : float or ndarray
        Gradient magnitude at the radial foot point r.
    shape : Shape
        Ellipsoid coefficients.

    Returns
    -------
    QuadraticCoefficients
        (A, B, C); floats for an `XYZ` input, arrays otherwise.

    Notes
    -----
    For each axis k::

        f_k  = |g| μ_k² / 2
        s_k  = 1 / (f_k + η0)
        n_k  = s_k f_k x_k
        A    = 3 Σ (n_k² / μ_k²) s_k²
        B    =   Σ (n_k² / μ_k²) s_k
        C    =   Σ (n_k² / μ_k²) - 1
    """
    mu_sqs = np.asarray(shape.mu_sqs, dtype=np.float64)
    if isinstance(x_vec, XYZ):
        coefs = _coefficient_arrays(
            x_vec.as_array(), np.float64(eta0), np.float64(gr_mag), mu_sqs
        )
        return QuadraticCoefficients(*(float(co) for co in coefs))
    return _coefficient_arrays(
        np.asarray(x_vec, dtype=np.float64),
        np.asarray(eta0, dtype=np.float64),
        np.asarray(gr_mag, dtype=np.float64),
        mu_sqs
    )


def zeta_for(
    coefs: QuadraticCoefficients,
    order: ZetaOrder = ZetaOrder.SECOND
) -> FloatOrArray:
    """Approximate root ζ of the quadratic.

    With ``x_arg = A C / B²`` and ``frac = C / B``:

    - FIRST:  frac / 2
    - SECOND: frac (1/2 + x_arg / 8)
    - THIRD:  (frac / 2) (1 + (1/4 + x_arg / 8) x_arg)
    - EXACT:  (B / A) (1 - sqrt(1 - x_arg))

    EXACT suffers cancellation when x_arg is tiny and is undefined for
    x_arg > 1; it is provided for comparison only.
    """
    co_a, co_b, co_c = (np.float64(co) if np.isscalar(co) else co for co in coefs)
    with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
        x_arg = (co_a * co_c) / np.square(co_b)
        frac_co_b = co_c / co_b

        order = ZetaOrder(order)
        if order is ZetaOrder.FIRST:
            zeta = frac_co_b * 0.5
        elif order is ZetaOrder.SECOND:
            zeta = frac_co_b * (0.5 + 0.125 * x_arg)
        elif order is ZetaOrder.THIRD:
            zeta = (0.5 * frac_co_b) * (1.0 + (0.25 + 0.125 * x_arg) * x_arg)
        else:
            zeta = (co_b / co_a) * (1.0 - np.sqrt(1.0 - x_arg))
    return zeta


def _foot_point_arrays(
    x_vecs: NDArray[np.float64],
    shape: Shape,
    order: ZetaOrder
) -> NDArray[np.float64]:
    mu_sqs = np.asarray(shape.mu_sqs, dtype=np.float64)
    with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
        # radial point on ellipsoid
        x_mags = np.linalg.norm(x_vecs, axis=-1, keepdims=True)
        x_dirs = x_vecs / x_mags
        rho = shape.radius_toward(x_dirs)
        r_vecs = np.expand_dims(rho, -1) * x_dirs

        # gradient at radial point
        gr_mag = np.linalg.norm(shape.gradient_at(r_vecs), axis=-1)

        # radial pseudo-altitude
        eta0 = np.linalg.norm(x_vecs - r_vecs, axis=-1)

        coefs = _coefficient_arrays(x_vecs, eta0, gr_mag, mu_sqs)
        zeta = zeta_for(coefs, order)

        correction = 2.0 * (zeta + eta0) / gr_mag
        p_vecs = x_vecs / (1.0 + np.expand_dims(correction, -1) / mu_sqs)
    return p_vecs


def solve_foot_point(
    point: XYZ,
    shape: Shape,
    order: ZetaOrder = ZetaOrder.SECOND
) -> XYZ:
    """Approximate foot point of `point` on the ellipsoid.

    Parameters
    ----------
    point : XYZ
        External (or internal) point.
    shape : Shape
        Ellipsoid coefficients.
    order : ZetaOrder
        Truncation order of the altitude correction.

    Returns
    -------
    XYZ
        Point on (or very near) the surface whose normal approximately
        passes through `point`. No validity flag is returned; degenerate
        input yields non-finite components.

    Examples
    --------
    >>> from geospatial.coordinate_models import WGS84_SHAPE
    >>> p = solve_foot_point(XYZ(6_478_137.0, 0.0, 0.0), WGS84_SHAPE)
    >>> round(p.x0, 6)
    6378137.0
    """
    return XYZ.from_array(_foot_point_arrays(point.as_array(), shape, ZetaOrder(order)))


def solve_foot_points(
    points: NDArray[np.float64],
    shape: Shape,
    order: ZetaOrder = ZetaOrder.SECOND
) -> NDArray[np.float64]:
    """Vectorized `solve_foot_point` for an (N, 3) array of points."""
    x_vecs = np.asarray(points, dtype=np.float64)
    logger.debug(f"Solving {x_vecs.shape[0] if x_vecs.ndim > 1 else 1} foot points ({ZetaOrder(order).value} order)")
    return _foot_point_arrays(x_vecs, shape, ZetaOrder(order))


def radial_foot_point(point: XYZ, shape: Shape) -> XYZ:
    """Point where the ray from the origin through `point` meets the surface."""
    x_dir = point.unit()
    return shape.radius_toward(x_dir) * x_dir
