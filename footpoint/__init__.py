"""
Foot-Point Module: closed-form perturbative geodetic projection.
"""

from footpoint.perturbation import (
    ZetaOrder,
    QuadraticCoefficients,
    zeta_coefficients,
    zeta_for,
    solve_foot_point,
    solve_foot_points,
    radial_foot_point,
)

__all__ = [
    "ZetaOrder",
    "QuadraticCoefficients",
    "zeta_coefficients",
    "zeta_for",
    "solve_foot_point",
    "solve_foot_points",
    "radial_foot_point",
]
