"""
Unit Registry for Length and Angle Quantities.

This module provides a centralized unit system using the `pint` library so
that altitude bands, radii and angles handed to the sampling and study
configuration can carry explicit units. Bare numbers are accepted as SI
values (meters, radians); quantities are converted at the boundary and the
numerical kernels only ever see plain floats.

Example Usage
-------------
>>> from common.units import Q_, to_meters
>>> to_meters(Q_(100, 'km'))
100000.0
"""

from functools import wraps
from typing import Callable, Union
import warnings

import pint
from pint import UnitRegistry as PintUnitRegistry

# Create the global unit registry
ureg = PintUnitRegistry()

# Convenience alias for creating quantities
Q_ = ureg.Quantity

Scalar = Union[float, int, pint.Quantity]


def ensure_quantity(value: Scalar, default_unit: str) -> pint.Quantity:
    """Ensure a value is a pint Quantity, applying default unit if necessary.

    Parameters
    ----------
    value : float or pint.Quantity
        The value to convert.
    default_unit : str
        The unit to apply if value is a bare number.

    Returns
    -------
    pint.Quantity
        The value with units.

    Warnings
    --------
    Issues a warning if a bare number is provided without units.
    """
    if isinstance(value, pint.Quantity):
        return value
    else:
        warnings.warn(
            f"Bare number {value} provided without units. "
            f"Assuming {default_unit}. Consider using explicit units.",
            UserWarning,
            stacklevel=2
        )
        return ureg.Quantity(value, default_unit)


def magnitude_in(value: Scalar, unit: str) -> float:
    """Numerical value of `value` expressed in `unit`.

    Bare numbers are taken to already be in `unit`.

    Raises
    ------
    ValueError
        If the quantity cannot be converted to `unit`.
    """
    if not isinstance(value, pint.Quantity):
        return float(value)
    try:
        return float(value.to(unit).magnitude)
    except pint.DimensionalityError as e:
        raise ValueError(
            f"Quantity {value} has incompatible units. Expected {unit}"
        ) from e


def to_meters(value: Scalar) -> float:
    """Length in meters."""
    return magnitude_in(value, "meter")


def to_radians(value: Scalar) -> float:
    """Angle in radians."""
    return magnitude_in(value, "radian")


def validate_units(expected_units: dict[str, str]):
    """Decorator to validate units of function arguments.

    Arguments that are pint quantities must be convertible to the expected
    unit; bare numbers pass through untouched.

    Parameters
    ----------
    expected_units : dict[str, str]
        Mapping from argument names to expected unit strings.

    Examples
    --------
    >>> @validate_units({'alt_lo': 'm', 'alt_hi': 'm'})
    ... def band(alt_lo, alt_hi):
    ...     return to_meters(alt_hi) - to_meters(alt_lo)
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            import inspect
            sig = inspect.signature(func)
            bound = sig.bind(*args, **kwargs)
            bound.apply_defaults()

            for param_name, expected_unit in expected_units.items():
                if param_name in bound.arguments:
                    value = bound.arguments[param_name]
                    if isinstance(value, pint.Quantity):
                        try:
                            value.to(expected_unit)
                        except pint.DimensionalityError as e:
                            raise ValueError(
                                f"Parameter '{param_name}' has incompatible units. "
                                f"Expected {expected_unit}, got {value.units}"
                            ) from e

            return func(*args, **kwargs)
        return wrapper
    return decorator
