"""
Coordinate Models for Ellipsoidal Body Geometry.

This module implements the ellipsoid geometry primitives and the exact
transformations between Cartesian (ECEF-style) positions and geodetic
coordinates (longitude, parallel, altitude) for a biaxial ellipsoid.

Scientific Context
------------------
Domain: Geodesy, Earth geometry
Model: Biaxial (oblate or prolate) reference ellipsoid, WGS84 by default

Implicit Form
-------------
The ellipsoid surface is the level set

    f(p) = Σ_k p_k² / μ_k² = 1

where μ_k² (``Shape.mu_sqs``) is the square of the k-th semi-axis length.
The gradient of f is 2 p_k / μ_k², and the point p whose normal passes
through an external point x satisfies

    p_k = x_k / (1 + t / μ_k²)

for the scalar t = 2 η / |∇f(p)|, with η the altitude of x.

References
----------
- NIMA TR8350.2: WGS84 parameters
- Bowring, B.R. (1976). Transformation from spatial to geographical
  coordinates. Survey Review, 23(181), 323-327.
- Torge, W. (2001). Geodesy (3rd ed.). de Gruyter.
"""

from dataclasses import dataclass
from typing import Tuple, Union
import numpy as np
from numpy.typing import NDArray

from common.constants import GeodeticConstants
from common.types import XYZ, LPA

PointLike = Union[XYZ, NDArray[np.float64]]


@dataclass(frozen=True)
class Shape:
    """Implicit-form coefficients of an ellipsoid centered on the origin.

    Attributes
    ----------
    mu_sqs : Tuple[float, float, float]
        Squared semi-axis lengths (μ_k² = a_k²). All must be positive.
    name : str
        Identifier for the shape.

    Notes
    -----
    All geometry methods accept either an `XYZ` (and return `XYZ`/float)
    or a numpy array whose last axis has length 3 (and return arrays),
    so the same primitive serves scalar and vectorized callers.
    """
    mu_sqs: Tuple[float, float, float]
    name: str = "custom"

    def __post_init__(self):
        """Validate the construction contract."""
        mu_sqs = tuple(float(mu) for mu in self.mu_sqs)
        if len(mu_sqs) != 3:
            raise ValueError(f"Shape needs three coefficients, got {len(mu_sqs)}")
        if not all(mu > 0.0 for mu in mu_sqs):
            raise ValueError(
                f"Shape coefficients must all be positive, got {mu_sqs}"
            )
        object.__setattr__(self, "mu_sqs", mu_sqs)

    @classmethod
    def from_radii(cls, equatorial: float, polar: float, name: str = "custom") -> 'Shape':
        """Create a biaxial shape from its equatorial and polar radii."""
        return cls(
            mu_sqs=(equatorial**2, equatorial**2, polar**2),
            name=name
        )

    @property
    def radii(self) -> Tuple[float, float, float]:
        """Semi-axis lengths."""
        return tuple(float(np.sqrt(mu)) for mu in self.mu_sqs)

    @property
    def characteristic_radius(self) -> float:
        """Mean of the three semi-axis lengths.

        For WGS84 this is (2a + b) / 3 ≈ 6 371 008.77 m, the IUGG mean
        radius R1.
        """
        return float(np.mean(self.radii))

    def is_biaxial(self) -> bool:
        """True when the two equatorial semi-axes are equal."""
        return bool(np.isclose(self.mu_sqs[0], self.mu_sqs[1], rtol=1e-14, atol=0.0))

    def normalized_shape(self) -> 'Shape':
        """Shape with every semi-axis divided by the characteristic radius."""
        scale = self.characteristic_radius
        return Shape(
            mu_sqs=tuple(mu / scale**2 for mu in self.mu_sqs),
            name=f"{self.name}-normalized"
        )

    def _mu_array(self) -> NDArray[np.float64]:
        return np.asarray(self.mu_sqs, dtype=np.float64)

    def gradient_at(self, point: PointLike) -> PointLike:
        """Gradient of the implicit function at any point.

        The gradient is 2 p_k / μ_k² and is normal to the level surface
        through `point`, whether or not that point is on the ellipsoid.
        """
        if isinstance(point, XYZ):
            return XYZ.from_array(2.0 * point.as_array() / self._mu_array())
        return 2.0 * np.asarray(point, dtype=np.float64) / self._mu_array()

    def radius_toward(self, direction: PointLike) -> Union[float, NDArray[np.float64]]:
        """Distance from the origin to the surface along `direction`.

        The direction is normalized internally. A zero direction has no
        intersection and gives nan.

        Notes
        -----
        ρ = 1 / sqrt(Σ_k u_k² / μ_k²) for the unit direction u.
        """
        vecs = direction.as_array() if isinstance(direction, XYZ) else np.asarray(direction, dtype=np.float64)
        with np.errstate(divide='ignore', invalid='ignore'):
            dirs = vecs / np.linalg.norm(vecs, axis=-1, keepdims=True)
            rho = 1.0 / np.sqrt(np.sum(dirs**2 / self._mu_array(), axis=-1))
        if isinstance(direction, XYZ):
            return float(rho)
        return rho

    def surface_residual(self, point: PointLike) -> Union[float, NDArray[np.float64]]:
        """Value of f(p) - 1; zero exactly on the surface."""
        vecs = point.as_array() if isinstance(point, XYZ) else np.asarray(point, dtype=np.float64)
        residual = np.sum(vecs**2 / self._mu_array(), axis=-1) - 1.0
        if isinstance(point, XYZ):
            return float(residual)
        return residual


def _reference_shape(semi_major: float, flattening: float, name: str) -> Shape:
    return Shape.from_radii(
        equatorial=semi_major,
        polar=GeodeticConstants.semi_minor_axis(semi_major, flattening),
        name=name
    )


# WGS84 ellipsoid - the standard reference shape for this system
WGS84_SHAPE = _reference_shape(
    GeodeticConstants.WGS84_SEMI_MAJOR_AXIS.value,
    GeodeticConstants.WGS84_FLATTENING.value,
    "WGS84"
)

GRS80_SHAPE = _reference_shape(
    GeodeticConstants.GRS80_SEMI_MAJOR_AXIS.value,
    GeodeticConstants.GRS80_FLATTENING.value,
    "GRS80"
)


def sphere_shape(radius: float = 1.0) -> Shape:
    """Shape with all three semi-axes equal to `radius`."""
    return Shape(mu_sqs=(radius**2, radius**2, radius**2), name="sphere")


class Ellipsoid:
    """Biaxial ellipsoid wrapping a `Shape`.

    Parameters
    ----------
    shape : Shape
        Implicit-form coefficients; the two equatorial axes must agree.

    Raises
    ------
    ValueError
        If the shape is triaxial.
    """

    def __init__(self, shape: Shape):
        if not shape.is_biaxial():
            raise ValueError(
                f"Ellipsoid requires equal equatorial axes, got {shape.mu_sqs}"
            )
        self._shape = shape

    @property
    def shape(self) -> Shape:
        return self._shape

    @property
    def a(self) -> float:
        """Equatorial radius."""
        return self._shape.radii[0]

    @property
    def b(self) -> float:
        """Polar radius."""
        return self._shape.radii[2]

    @property
    def e2(self) -> float:
        """First eccentricity squared: e² = (a² - b²) / a²."""
        mu_eq = self._shape.mu_sqs[0]
        return (mu_eq - self._shape.mu_sqs[2]) / mu_eq

    @property
    def lambda_(self) -> float:
        """Characteristic radius of the ellipsoid."""
        return self._shape.characteristic_radius

    def __repr__(self) -> str:
        return f"Ellipsoid(name={self._shape.name!r}, a={self.a!r}, b={self.b!r})"


def radius_of_curvature_meridian(
    parallel_rad: float,
    ellipsoid: Ellipsoid
) -> float:
    """Compute the radius of curvature in the meridian plane.

    Parameters
    ----------
    parallel_rad : float
        Geodetic parallel (latitude) in radians.
    ellipsoid : Ellipsoid
        Reference ellipsoid.

    Returns
    -------
    float
        Radius of curvature M.

    Notes
    -----
    M = a(1 - e²) / (1 - e² sin²φ)^(3/2)
    """
    sin_par = np.sin(parallel_rad)
    denominator = (1 - ellipsoid.e2 * sin_par**2) ** 1.5
    return ellipsoid.a * (1 - ellipsoid.e2) / denominator


def radius_of_curvature_prime_vertical(
    parallel_rad: float,
    ellipsoid: Ellipsoid
) -> float:
    """Compute the radius of curvature in the prime vertical.

    Parameters
    ----------
    parallel_rad : float
        Geodetic parallel (latitude) in radians.
    ellipsoid : Ellipsoid
        Reference ellipsoid.

    Returns
    -------
    float
        Radius of curvature N.

    Notes
    -----
    N = a / (1 - e² sin²φ)^(1/2)

    At the equator N = a, at the poles N = a² / b.
    """
    sin_par = np.sin(parallel_rad)
    denominator = np.sqrt(1 - ellipsoid.e2 * sin_par**2)
    return ellipsoid.a / denominator


class EarthModel:
    """Body model exposing the exact geodetic transformations.

    Parameters
    ----------
    shape : Shape
        Biaxial shape of the reference ellipsoid.

    Examples
    --------
    >>> earth = EarthModel(WGS84_SHAPE)
    >>> xyz = earth.xyz_for_lpa(LPA(0.0, 0.0, 0.0))
    >>> round(xyz.x0, 3)
    6378137.0
    """

    def __init__(self, shape: Shape = WGS84_SHAPE):
        self.ellipsoid = Ellipsoid(shape)

    @property
    def shape(self) -> Shape:
        return self.ellipsoid.shape

    def xyz_for_lpa(self, lpa: LPA) -> XYZ:
        """Exact forward transform."""
        return xyz_for_lpa(lpa, self)

    def lpa_for_xyz(self, xyz: XYZ) -> LPA:
        """Exact inverse transform."""
        return lpa_for_xyz(xyz, self)

    def __repr__(self) -> str:
        return f"EarthModel({self.ellipsoid!r})"


def xyz_for_lpa(lpa: LPA, earth: EarthModel) -> XYZ:
    """Convert geodetic coordinates to Cartesian.

    Parameters
    ----------
    lpa : LPA
        Longitude and parallel in radians, altitude in the length unit
        of the ellipsoid.
    earth : EarthModel
        Body model.

    Returns
    -------
    XYZ
        Cartesian location.

    Notes
    -----
    X = (N + h) cos φ cos λ
    Y = (N + h) cos φ sin λ
    Z = (N (1 - e²) + h) sin φ
    """
    ellipsoid = earth.ellipsoid
    sin_par = np.sin(lpa.parallel)
    cos_par = np.cos(lpa.parallel)

    N = radius_of_curvature_prime_vertical(lpa.parallel, ellipsoid)

    return XYZ(
        float((N + lpa.altitude) * cos_par * np.cos(lpa.longitude)),
        float((N + lpa.altitude) * cos_par * np.sin(lpa.longitude)),
        float((N * (1 - ellipsoid.e2) + lpa.altitude) * sin_par)
    )


def lpa_for_xyz(
    xyz: XYZ,
    earth: EarthModel,
    max_iterations: int = 16,
    tolerance: float = 1e-14
) -> LPA:
    """Convert Cartesian coordinates to geodetic.

    Uses Bowring's fixed-point iteration on the parallel angle.

    Parameters
    ----------
    xyz : XYZ
        Cartesian location.
    earth : EarthModel
        Body model.
    max_iterations : int
        Maximum iterations for convergence.
    tolerance : float
        Convergence tolerance in radians.

    Returns
    -------
    LPA
        (longitude, parallel, altitude)

    Notes
    -----
    The iteration contracts by roughly e² per step, so near-surface
    points converge to double precision in four or five steps. The
    altitude is evaluated as

        h = p cos φ + Z sin φ - a² / N

    which stays well conditioned at every parallel, including the poles.
    The origin has no defined parallel; it maps to (0, 0, -b).
    """
    ellipsoid = earth.ellipsoid
    X, Y, Z = xyz.x0, xyz.x1, xyz.x2

    longitude_rad = np.arctan2(Y, X)

    # Distance from polar axis
    p = np.hypot(X, Y)

    # Handle polar singularity
    if p < 1e-14 * ellipsoid.a:
        parallel_rad = np.sign(Z) * np.pi / 2
        altitude = np.abs(Z) - ellipsoid.b
        return LPA(float(longitude_rad), float(parallel_rad), float(altitude))

    # Initial approximation from the ellipsoid's own aspect ratio
    parallel_rad = np.arctan2(Z, p * (1 - ellipsoid.e2))

    for _ in range(max_iterations):
        sin_par = np.sin(parallel_rad)
        N = radius_of_curvature_prime_vertical(parallel_rad, ellipsoid)

        parallel_new = np.arctan2(Z + ellipsoid.e2 * N * sin_par, p)

        if np.abs(parallel_new - parallel_rad) < tolerance:
            parallel_rad = parallel_new
            break

        parallel_rad = parallel_new

    N = radius_of_curvature_prime_vertical(parallel_rad, ellipsoid)
    altitude = (
        p * np.cos(parallel_rad)
        + Z * np.sin(parallel_rad)
        - ellipsoid.a**2 / N
    )

    return LPA(float(longitude_rad), float(parallel_rad), float(altitude))


# Vectorized version for batch processing
def xyz_for_lpa_batch(
    longitudes_rad: NDArray[np.float64],
    parallels_rad: NDArray[np.float64],
    altitudes: NDArray[np.float64],
    earth: EarthModel
) -> NDArray[np.float64]:
    """Vectorized geodetic to Cartesian conversion.

    Parameters
    ----------
    longitudes_rad, parallels_rad : ndarray
        Angles in radians.
    altitudes : ndarray
        Altitudes in the length unit of the ellipsoid.
    earth : EarthModel
        Body model.

    Returns
    -------
    ndarray
        Points with shape (N, 3).
    """
    ellipsoid = earth.ellipsoid
    sin_par = np.sin(parallels_rad)
    cos_par = np.cos(parallels_rad)

    N = ellipsoid.a / np.sqrt(1 - ellipsoid.e2 * sin_par**2)

    X = (N + altitudes) * cos_par * np.cos(longitudes_rad)
    Y = (N + altitudes) * cos_par * np.sin(longitudes_rad)
    Z = (N * (1 - ellipsoid.e2) + altitudes) * sin_par

    return np.stack([X, Y, Z], axis=-1)
