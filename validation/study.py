"""
Meridian-Plane Accuracy Study.

Drives the sampling engine, the perturbative solver and the exact reference
over a meridian half-plane grid, judges the results, and records them in
the audit trail.

Default Study
-------------
WGS84, 33 radii spanning the characteristic radius ±100 km, 33 parallels
over [0, π/2], longitude π/4. With ``normalized=True`` the same study is
run on the shape scaled to unit characteristic radius (the altitude band
and tolerance scale with it).
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np

from common.constants import GeodeticConstants
from common.logging_config import get_logger, AuditLogger
from common.units import Scalar, to_meters, to_radians
from footpoint.perturbation import ZetaOrder
from geospatial.coordinate_models import EarthModel, Shape, WGS84_SHAPE
from sampling.grids import altitude_band_spec, build_meridian_grid
from sampling.sample_spec import SampleSpec
from validation.accuracy_checks import FootPointAccuracyChecker, ValidationResult
from validation.diagnostics import (
    ExcessDiagnostic,
    FootPointDiagnostic,
    run_excess_diagnostic,
    run_footpoint_diagnostic,
)
from validation.report import write_excess_log, write_footpoint_log

logger = get_logger(__name__)

_BAND = GeodeticConstants.DEFAULT_ALTITUDE_BAND.value


@dataclass
class StudyConfig:
    """Configuration for a meridian-plane study.

    Attributes
    ----------
    num_rad : int
        Number of radial samples.
    num_par : int
        Number of parallel-angle samples.
    alt_lo, alt_hi : float
        Radial band relative to the characteristic radius, in meters
        (before normalization).
    par_lo, par_hi : float
        Parallel-angle range in radians.
    longitude : float
        Longitude of the half-plane in radians.
    normalized : bool
        Run on the shape scaled to unit characteristic radius.
    order : ZetaOrder
        Truncation order of the solver.
    tolerance : float
        Accuracy bound for exterior samples, in meters (before
        normalization).
    max_workers : int, optional
        Thread pool size for per-point evaluation.
    output_dir : Path, optional
        Where to write the diagnostic logs and audit artifacts.
    show_samples : bool
        Write per-sample lines to the excess log.
    run_id : str, optional
        Audit run identifier; generated from the clock when absent.
    """
    num_rad: int = GeodeticConstants.DEFAULT_SAMPLE_COUNT
    num_par: int = GeodeticConstants.DEFAULT_SAMPLE_COUNT
    alt_lo: float = -_BAND
    alt_hi: float = _BAND
    par_lo: float = 0.0
    par_hi: float = 0.5 * np.pi
    longitude: float = GeodeticConstants.DEFAULT_MERIDIAN_LONGITUDE
    normalized: bool = False
    order: ZetaOrder = ZetaOrder.SECOND
    tolerance: float = 1.0e-3
    max_workers: Optional[int] = None
    output_dir: Optional[Path] = None
    show_samples: bool = True
    run_id: Optional[str] = None

    @classmethod
    def from_quantities(
        cls,
        alt_lo: Scalar = -_BAND,
        alt_hi: Scalar = _BAND,
        longitude: Scalar = GeodeticConstants.DEFAULT_MERIDIAN_LONGITUDE,
        tolerance: Scalar = 1.0e-3,
        **kwargs: Any
    ) -> 'StudyConfig':
        """Build a config from pint quantities (bare numbers are SI)."""
        return cls(
            alt_lo=to_meters(alt_lo),
            alt_hi=to_meters(alt_hi),
            longitude=to_radians(longitude),
            tolerance=to_meters(tolerance),
            **kwargs
        )

    def as_dict(self) -> Dict[str, Any]:
        """Serializable form used for the configuration hash."""
        data = asdict(self)
        data["order"] = ZetaOrder(self.order).value
        data["output_dir"] = str(self.output_dir) if self.output_dir else None
        return data


@dataclass
class StudyResult:
    """Outcome of a meridian-plane study."""
    config: StudyConfig
    shape: Shape
    excess: ExcessDiagnostic
    footpoint: FootPointDiagnostic
    checks: List[ValidationResult] = field(default_factory=list)
    run_summary: Dict[str, Any] = field(default_factory=dict)

    @property
    def passed(self) -> bool:
        return all(check.passed for check in self.checks)


def run_meridian_study(
    config: Optional[StudyConfig] = None,
    shape: Shape = WGS84_SHAPE
) -> StudyResult:
    """Run both diagnostics over a meridian-plane grid.

    Parameters
    ----------
    config : StudyConfig, optional
        Study configuration (defaults to the standard study).
    shape : Shape
        Reference shape before normalization.

    Returns
    -------
    StudyResult
        Diagnostics, check results and audit summary.
    """
    config = config or StudyConfig()

    study_shape = shape.normalized_shape() if config.normalized else shape
    scale = shape.characteristic_radius if config.normalized else 1.0
    earth = EarthModel(study_shape)

    rad_spec = altitude_band_spec(config.num_rad, config.alt_lo / scale, config.alt_hi / scale, earth)
    par_spec = SampleSpec(config.num_par, (config.par_lo, config.par_hi))
    grid = build_meridian_grid(rad_spec, par_spec, config.longitude)
    tolerance = config.tolerance / scale

    audit = AuditLogger()
    run_id = config.run_id or f"meridian_{datetime.now().strftime('%Y%m%d_%H%M%S_%f')}"

    with audit.run_context(run_id, config.as_dict()) as run:
        run.input_metadata.update(
            shape=study_shape.name,
            num_samples=len(grid),
            radius_range=[rad_spec.first, rad_spec.last],
        )

        excess = run_excess_diagnostic(grid, earth, config.max_workers)
        footpoint = run_footpoint_diagnostic(grid, earth, config.order, config.max_workers)

        checker = FootPointAccuracyChecker()
        checks = checker.check_all(excess, footpoint, tolerance)
        for check in checks:
            audit.log_accuracy_check(
                check_name=check.test_name,
                residual_value=check.details['value'],
                tolerance=check.details['tolerance'],
                context={'order': ZetaOrder(config.order).value},
                passed=check.passed
            )

        run.output_metadata.update(
            min_excess=excess.min_excess,
            max_excess=excess.max_excess,
            max_error=footpoint.max_error,
            mean_error=footpoint.mean_error,
        )

        if config.output_dir is not None:
            _write_outputs(Path(config.output_dir), excess, footpoint, config.show_samples)

    if config.output_dir is not None:
        audit.export_run_artifacts(run_id, Path(config.output_dir) / f"{run_id}.json")

    return StudyResult(
        config=config,
        shape=study_shape,
        excess=excess,
        footpoint=footpoint,
        checks=checks,
        run_summary=audit.get_run_summary(run_id),
    )


def _write_outputs(
    output_dir: Path,
    excess: ExcessDiagnostic,
    footpoint: FootPointDiagnostic,
    show_samples: bool
) -> None:
    output_dir.mkdir(parents=True, exist_ok=True)
    with open(output_dir / "excess.dat", "w") as f:
        write_excess_log(f, excess, show_samples)
    with open(output_dir / "pvecDiff.dat", "w") as f:
        write_footpoint_log(f, footpoint)
    logger.info(f"Wrote diagnostic logs to {output_dir}")
