"""
Validation Framework for the Perturbative Foot-Point Solver.

This module provides the excess and foot-point diagnostics, the
pass/fail checks made on them, their text logs, and the meridian-plane
study driver.
"""

from validation.diagnostics import (
    ReferenceModel,
    ExcessRecord,
    ExcessDiagnostic,
    FootPointRecord,
    FootPointDiagnostic,
    exact_foot_point,
    evaluate_excess,
    run_excess_diagnostic,
    evaluate_foot_point,
    run_footpoint_diagnostic,
)

from validation.accuracy_checks import (
    ValidationResult,
    AccuracyViolation,
    FootPointAccuracyChecker,
)

from validation.report import (
    fixed_linear,
    fixed_angular,
    all_digits,
    xyz_info,
    lpa_info,
    write_excess_log,
    write_footpoint_log,
)

from validation.study import (
    StudyConfig,
    StudyResult,
    run_meridian_study,
)

__all__ = [
    "ReferenceModel",
    "ExcessRecord",
    "ExcessDiagnostic",
    "FootPointRecord",
    "FootPointDiagnostic",
    "exact_foot_point",
    "evaluate_excess",
    "run_excess_diagnostic",
    "evaluate_foot_point",
    "run_footpoint_diagnostic",
    "ValidationResult",
    "AccuracyViolation",
    "FootPointAccuracyChecker",
    "fixed_linear",
    "fixed_angular",
    "all_digits",
    "xyz_info",
    "lpa_info",
    "write_excess_log",
    "write_footpoint_log",
    "StudyConfig",
    "StudyResult",
    "run_meridian_study",
]
