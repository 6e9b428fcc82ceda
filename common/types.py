"""
Value Types for Cartesian and Geodetic Coordinates.

This module defines the immutable value types passed between the
sampling, solver and validation packages.

Design Rationale
----------------
Using typed dataclasses instead of raw arrays provides:
1. Self-documenting code - component names describe the data
2. Immutability - points can be shared freely between evaluations
3. A clear seam to numpy for vectorized kernels (`as_array`, `from_array`)
"""

from dataclasses import dataclass
from typing import Iterator, Sequence, Union
import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class XYZ:
    """A Cartesian location in a frame centered on the ellipsoid.

    Attributes
    ----------
    x0, x1, x2 : float
        Components along the equatorial (prime meridian), equatorial
        (90 degrees east) and polar axes, in the length unit of the
        ellipsoid (meters for Earth models).

    Examples
    --------
    >>> v = XYZ(3.0, 4.0, 0.0)
    >>> v.magnitude()
    5.0
    >>> (2.0 * v)[1]
    8.0
    """
    x0: float
    x1: float
    x2: float

    def __getitem__(self, ndx: int) -> float:
        return (self.x0, self.x1, self.x2)[ndx]

    def __iter__(self) -> Iterator[float]:
        return iter((self.x0, self.x1, self.x2))

    def __len__(self) -> int:
        return 3

    def __add__(self, other: 'XYZ') -> 'XYZ':
        return XYZ(self.x0 + other.x0, self.x1 + other.x1, self.x2 + other.x2)

    def __sub__(self, other: 'XYZ') -> 'XYZ':
        return XYZ(self.x0 - other.x0, self.x1 - other.x1, self.x2 - other.x2)

    def __mul__(self, scale: float) -> 'XYZ':
        return XYZ(scale * self.x0, scale * self.x1, scale * self.x2)

    __rmul__ = __mul__

    def __neg__(self) -> 'XYZ':
        return XYZ(-self.x0, -self.x1, -self.x2)

    def magnitude(self) -> float:
        """Euclidean length of the vector."""
        return float(np.sqrt(self.x0**2 + self.x1**2 + self.x2**2))

    def unit(self) -> 'XYZ':
        """Vector scaled to unit length.

        The zero vector has no direction; its components come back
        as nan instead of raising.
        """
        with np.errstate(divide='ignore', invalid='ignore'):
            return XYZ.from_array(self.as_array() / np.float64(self.magnitude()))

    def as_array(self) -> NDArray[np.float64]:
        """Components as a numpy array of shape (3,)."""
        return np.array([self.x0, self.x1, self.x2], dtype=np.float64)

    @classmethod
    def from_array(cls, values: Union[Sequence[float], NDArray[np.float64]]) -> 'XYZ':
        """Create a point from any length-3 sequence."""
        return cls(float(values[0]), float(values[1]), float(values[2]))


@dataclass(frozen=True)
class LPA:
    """Geodetic coordinates relative to an ellipsoid.

    Attributes
    ----------
    longitude : float
        Angle in the equatorial plane, RADIANS, positive east.
    parallel : float
        Geodetic latitude (parallel angle), RADIANS. Range [-π/2, π/2].
    altitude : float
        Signed distance above the ellipsoid along the surface normal, in
        the length unit of the ellipsoid.
    """
    longitude: float
    parallel: float
    altitude: float

    def __getitem__(self, ndx: int) -> float:
        return (self.longitude, self.parallel, self.altitude)[ndx]

    def __iter__(self) -> Iterator[float]:
        return iter((self.longitude, self.parallel, self.altitude))

    def __len__(self) -> int:
        return 3

    def on_surface(self) -> 'LPA':
        """The same horizontal location with zero altitude."""
        return LPA(self.longitude, self.parallel, 0.0)

    def to_degrees(self) -> tuple:
        """Convert angles to degrees for display.

        Returns
        -------
        tuple
            (longitude_degrees, parallel_degrees, altitude)
        """
        return float(np.degrees(self.longitude)), float(np.degrees(self.parallel)), self.altitude


def magnitude(vec: XYZ) -> float:
    """Euclidean length of a vector."""
    return vec.magnitude()


def unit(vec: XYZ) -> XYZ:
    """Unit vector in the direction of `vec`."""
    return vec.unit()


# Type aliases for array types
PointArray = NDArray[np.float64]  # Shape: (N, 3) Cartesian points
