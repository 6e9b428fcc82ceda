"""
Accuracy Checks for Foot-Point Diagnostics.

The diagnostics report errors as data; this module is where a pass/fail
judgment is made about them.

Check Categories
----------------
1. Excess bounds (the radial path is never shorter than the normal path)
2. Finiteness (every error is a finite, non-negative number)
3. Accuracy (errors stay below a bound within an altitude band)
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import numpy as np

from common.logging_config import get_logger
from validation.diagnostics import ExcessDiagnostic, FootPointDiagnostic

logger = get_logger(__name__)


@dataclass
class ValidationResult:
    """Result of a validation check.

    Attributes
    ----------
    test_name : str
        Name of the check.
    passed : bool
        Whether the check passed.
    message : str
        Description of result.
    details : dict
        Additional details; always carries 'value' and 'tolerance'.
    """
    test_name: str
    passed: bool
    message: str
    details: Dict[str, Any]


class AccuracyViolation(Exception):
    """Raised by a strict checker when a check fails."""

    def __init__(self, result: ValidationResult):
        super().__init__(f"{result.test_name}: {result.message}")
        self.result = result


class FootPointAccuracyChecker:
    """Checker for the accuracy of perturbative foot points.

    Parameters
    ----------
    strict_mode : bool
        If True, raise `AccuracyViolation` on the first failed check.
    log_violations : bool
        Whether to log failed checks.
    """

    def __init__(
        self,
        strict_mode: bool = False,
        log_violations: bool = True
    ):
        self.strict_mode = strict_mode
        self.log_violations = log_violations
        self._logger = get_logger("FootPointAccuracyChecker")

    def _finish(self, result: ValidationResult) -> ValidationResult:
        if not result.passed:
            if self.log_violations:
                self._logger.warning(f"{result.test_name} failed: {result.message}")
            if self.strict_mode:
                raise AccuracyViolation(result)
        return result

    def check_all(
        self,
        excess: ExcessDiagnostic,
        footpoint: FootPointDiagnostic,
        tolerance: float,
        min_altitude: Optional[float] = 0.0,
        max_altitude: Optional[float] = None,
        excess_slack: float = 1.0e-6
    ) -> List[ValidationResult]:
        """Run all checks on a pair of diagnostics.

        Parameters
        ----------
        excess : ExcessDiagnostic
            Excess diagnostic over a grid.
        footpoint : FootPointDiagnostic
            Foot-point diagnostic over the same grid.
        tolerance : float
            Error bound for the accuracy check.
        min_altitude, max_altitude : float, optional
            Altitude band for the accuracy check. By default only exterior
            points are judged.
        excess_slack : float
            Rounding allowance for the excess bounds.

        Returns
        -------
        List[ValidationResult]
            Results of all checks.
        """
        return [
            self.check_excess_bounds(excess, excess_slack),
            self.check_finite_errors(footpoint),
            self.check_footpoint_accuracy(
                footpoint.subset(min_altitude, max_altitude), tolerance
            ),
        ]

    def check_excess_bounds(
        self,
        excess: ExcessDiagnostic,
        slack: float = 1.0e-6
    ) -> ValidationResult:
        """Check min_excess <= 0 <= max_excess, up to `slack`.

        The normal path is the shortest path to the surface, so the excess
        is never negative; it vanishes on the equator and at the poles.
        """
        lo, hi = excess.min_excess, excess.max_excess
        finite = bool(np.isfinite(lo) and np.isfinite(hi))
        passed = finite and lo <= slack and hi >= -slack

        return self._finish(ValidationResult(
            test_name="excess_bounds",
            passed=passed,
            message=f"Excess range [{lo:.6f}, {hi:.6f}]",
            details={
                'value': lo,
                'tolerance': slack,
                'min_excess': lo,
                'max_excess': hi,
                'num_samples': len(excess.records),
            }
        ))

    def check_finite_errors(
        self,
        footpoint: FootPointDiagnostic
    ) -> ValidationResult:
        """Check that every error is finite and non-negative."""
        errors = footpoint.errors
        bad = ~np.isfinite(errors) | (errors < 0.0)
        num_bad = int(np.sum(bad))

        return self._finish(ValidationResult(
            test_name="finite_errors",
            passed=num_bad == 0,
            message=f"Finite error check: {num_bad} bad samples of {errors.size}",
            details={
                'value': float(num_bad),
                'tolerance': 0.0,
                'num_samples': int(errors.size),
            }
        ))

    def check_footpoint_accuracy(
        self,
        footpoint: FootPointDiagnostic,
        tolerance: float
    ) -> ValidationResult:
        """Check that the largest foot-point error is within `tolerance`."""
        if not footpoint.records:
            return ValidationResult(
                test_name="footpoint_accuracy",
                passed=True,
                message="No samples in band",
                details={'value': 0.0, 'tolerance': tolerance, 'num_samples': 0}
            )

        max_error = footpoint.max_error
        passed = bool(max_error <= tolerance)
        worst = footpoint.worst_record

        return self._finish(ValidationResult(
            test_name="footpoint_accuracy",
            passed=passed,
            message=f"Foot-point accuracy: max error {max_error:.6e} (tolerance {tolerance:.6e})",
            details={
                'value': max_error,
                'tolerance': tolerance,
                'mean_error': footpoint.mean_error,
                'worst_parallel': worst.lpa_exact.parallel,
                'worst_altitude': worst.lpa_exact.altitude,
                'num_samples': len(footpoint.records),
            }
        ))
