"""
tests/test_validation.py - Diagnostics, Accuracy Checks and Study Tests
"""

import io
import json

import numpy as np
import pytest

from common.logging_config import AuditLogger
from common.types import XYZ, LPA
from common.units import Q_
from footpoint.perturbation import ZetaOrder
from geospatial.coordinate_models import WGS84_SHAPE
from geospatial.reference import PyprojReference
from sampling.grids import altitude_band_spec, build_meridian_grid
from sampling.sample_spec import SampleSpec
from validation.accuracy_checks import AccuracyViolation, FootPointAccuracyChecker
from validation.diagnostics import (
    ExcessDiagnostic,
    FootPointDiagnostic,
    FootPointRecord,
    evaluate_excess,
    evaluate_foot_point,
    exact_foot_point,
    run_excess_diagnostic,
    run_footpoint_diagnostic,
)
from validation.report import (
    all_digits,
    fixed_angular,
    fixed_linear,
    lpa_info,
    write_excess_log,
    write_footpoint_log,
    xyz_info,
)
from validation.study import StudyConfig, run_meridian_study

EXCESS_SLACK = 1.0e-6


def small_grid(earth, num_rad=5, num_par=5, alt=100_000.0):
    rad_spec = altitude_band_spec(num_rad, -alt, alt, earth)
    par_spec = SampleSpec(num_par, (0.0, 0.5 * np.pi))
    return build_meridian_grid(rad_spec, par_spec)


class TestExcessDiagnostic:
    """Test the ellipsoidal excess over meridian grids."""

    def test_standard_grid_bounds(self, meridian_grid, wgs84_earth):
        """33 x 33 grid: min excess near zero, max excess non-negative."""
        diag = run_excess_diagnostic(meridian_grid, wgs84_earth)
        assert len(diag.records) == 33 * 33
        assert diag.min_excess <= EXCESS_SLACK
        assert diag.max_excess >= 0.0

    def test_excess_non_negative(self, meridian_grid, wgs84_earth):
        diag = run_excess_diagnostic(meridian_grid, wgs84_earth)
        assert np.all(diag.excesses >= -EXCESS_SLACK)

    def test_zero_at_equator_and_pole(self, wgs84_earth):
        for xyz in (XYZ(6_400_000.0, 0.0, 0.0), XYZ(0.0, 0.0, 6_400_000.0)):
            assert abs(evaluate_excess(xyz, wgs84_earth).excess) < EXCESS_SLACK

    def test_positive_at_mid_latitude(self, wgs84_earth):
        """Radial and normal paths differ off the axes."""
        xyz = wgs84_earth.xyz_for_lpa(LPA(0.0, 0.25 * np.pi, 100_000.0))
        assert evaluate_excess(xyz, wgs84_earth).excess > 0.0

    def test_sphere_excess_vanishes(self, unit_sphere_earth):
        grid = small_grid(unit_sphere_earth, 7, 7, alt=0.05)
        diag = run_excess_diagnostic(grid, unit_sphere_earth)
        assert np.max(np.abs(diag.excesses)) < 1e-12
        assert np.max(np.abs(diag.r_eps_values)) < 1e-12

    def test_record_fields(self, wgs84_earth):
        xyz = wgs84_earth.xyz_for_lpa(LPA(0.0, 0.5, 20_000.0))
        rec = evaluate_excess(xyz, wgs84_earth)
        assert abs(rec.lpa.altitude - 20_000.0) < 1e-6
        assert rec.del_eta == rec.excess
        assert np.isfinite(rec.r_eps)
        assert abs(rec.d_eta_per_r) < 1e-6

    def test_empty_grid(self, wgs84_earth):
        diag = run_excess_diagnostic([], wgs84_earth)
        assert diag.records == []
        assert np.isnan(diag.min_excess) and np.isnan(diag.max_excess)

    def test_thread_pool_matches_serial(self, wgs84_earth):
        grid = small_grid(wgs84_earth)
        serial = run_excess_diagnostic(grid, wgs84_earth)
        pooled = run_excess_diagnostic(grid, wgs84_earth, max_workers=4)
        assert serial.records == pooled.records
        assert serial.min_excess == pooled.min_excess


class TestFootPointDiagnostic:
    """Test the foot-point error diagnostic."""

    def test_standard_grid_finite(self, meridian_grid, wgs84_earth):
        diag = run_footpoint_diagnostic(meridian_grid, wgs84_earth)
        errors = diag.errors
        assert errors.size == 33 * 33
        assert np.all(np.isfinite(errors))
        assert np.all(errors >= 0.0)

    def test_exterior_band_accuracy(self, meridian_grid, wgs84_earth):
        lam = WGS84_SHAPE.characteristic_radius
        diag = run_footpoint_diagnostic(meridian_grid, wgs84_earth)
        band = diag.subset(min_altitude=0.0, max_altitude=0.01 * lam)
        assert len(band.records) > 0
        assert band.max_error < 1e-3

    def test_interior_worse_than_exterior(self, meridian_grid, wgs84_earth):
        diag = run_footpoint_diagnostic(meridian_grid, wgs84_earth)
        inside = diag.subset(max_altitude=-50_000.0)
        outside = diag.subset(min_altitude=0.0)
        assert inside.max_error > outside.max_error
        assert diag.worst_record.lpa_exact.altitude < 0.0

    def test_matches_pointwise(self, wgs84_earth):
        grid = small_grid(wgs84_earth)
        diag = run_footpoint_diagnostic(grid, wgs84_earth, ZetaOrder.THIRD)
        for xyz, rec in zip(grid, diag.records):
            single = evaluate_foot_point(xyz, wgs84_earth, ZetaOrder.THIRD)
            assert abs(single.error - rec.error) < 1e-8
        assert diag.order is ZetaOrder.THIRD

    def test_against_pyproj(self, wgs84_earth):
        """Same conclusions with the PROJ reference."""
        grid = small_grid(wgs84_earth, alt=50_000.0)
        ours = run_footpoint_diagnostic(grid, wgs84_earth)
        theirs = run_footpoint_diagnostic(grid, PyprojReference())
        np.testing.assert_allclose(ours.errors, theirs.errors, rtol=0.0, atol=1e-2)

    def test_origin_reported_as_nan(self, wgs84_earth):
        diag = run_footpoint_diagnostic([XYZ(0.0, 0.0, 0.0)], wgs84_earth)
        assert np.isnan(diag.records[0].error)
        assert np.isnan(diag.max_error)

    def test_empty_grid(self, wgs84_earth):
        diag = run_footpoint_diagnostic([], wgs84_earth)
        assert diag.records == []
        assert np.isnan(diag.max_error)
        assert diag.worst_record is None

    def test_error_by_altitude_band(self, meridian_grid, wgs84_earth):
        diag = run_footpoint_diagnostic(meridian_grid, wgs84_earth)
        bands = diag.error_by_altitude_band([-200_000.0, 0.0, 200_000.0])
        assert set(bands) == {(-200_000.0, 0.0), (0.0, 200_000.0)}
        assert bands[(-200_000.0, 0.0)] > bands[(0.0, 200_000.0)]

    def test_exact_foot_point_on_surface(self, wgs84_earth):
        lpa, p = exact_foot_point(XYZ(4.0e6, 3.0e6, 4.0e6), wgs84_earth)
        assert abs(WGS84_SHAPE.surface_residual(p)) < 1e-14
        assert lpa.altitude > 0.0


def make_record(error):
    xyz = XYZ(1.0, 0.0, 0.0)
    return FootPointRecord(
        xyz=xyz,
        lpa_exact=LPA(0.0, 0.0, 1.0),
        p_got=xyz,
        p_exact=xyz,
        difference=XYZ(error, 0.0, 0.0),
        error=error
    )


class TestAccuracyChecker:
    """Test pass/fail judgments on diagnostics."""

    def test_standard_study_passes(self, meridian_grid, wgs84_earth):
        excess = run_excess_diagnostic(meridian_grid, wgs84_earth)
        footpoint = run_footpoint_diagnostic(meridian_grid, wgs84_earth)
        results = FootPointAccuracyChecker().check_all(excess, footpoint, tolerance=1e-3)
        assert [r.test_name for r in results] == [
            "excess_bounds", "finite_errors", "footpoint_accuracy"
        ]
        assert all(r.passed for r in results), [r.message for r in results]

    def test_nan_excess_fails(self):
        result = FootPointAccuracyChecker(log_violations=False).check_excess_bounds(
            ExcessDiagnostic(float("nan"), float("nan"))
        )
        assert not result.passed
        assert 'value' in result.details and 'tolerance' in result.details

    def test_non_finite_errors_fail(self):
        diag = FootPointDiagnostic(records=[make_record(0.0), make_record(float("nan"))])
        result = FootPointAccuracyChecker(log_violations=False).check_finite_errors(diag)
        assert not result.passed
        assert result.details['value'] == 1.0

    def test_strict_mode_raises(self):
        diag = FootPointDiagnostic(records=[make_record(1.0)])
        checker = FootPointAccuracyChecker(strict_mode=True, log_violations=False)
        with pytest.raises(AccuracyViolation) as exc_info:
            checker.check_footpoint_accuracy(diag, tolerance=1e-3)
        assert exc_info.value.result.test_name == "footpoint_accuracy"

    def test_empty_band_passes(self):
        result = FootPointAccuracyChecker().check_footpoint_accuracy(
            FootPointDiagnostic(records=[]), tolerance=1e-3
        )
        assert result.passed
        assert result.details['num_samples'] == 0


class TestReport:
    """Test the text log formats."""

    def test_number_formats(self):
        assert fixed_linear(1.5).strip() == "+1.500000"
        assert fixed_linear(1.5, "x").startswith("x: ")
        assert fixed_angular(0.25).strip() == "+0.250000000"
        assert all_digits(1.0) == "+1.0000000000000000e+00"

    def test_vector_formats(self):
        assert xyz_info(XYZ(1.0, 2.0, 3.0), "p").startswith("p: ")
        assert len(xyz_info(XYZ(1.0, 2.0, 3.0)).split()) == 3
        assert len(lpa_info(LPA(0.1, 0.2, 3.0)).split()) == 3

    def test_excess_log(self, wgs84_earth):
        diag = run_excess_diagnostic(small_grid(wgs84_earth, 3, 2), wgs84_earth)
        stream = io.StringIO()
        write_excess_log(stream, diag)
        lines = stream.getvalue().splitlines()
        assert len(lines) == 6 + 2
        assert "Par:" in lines[0] and "rEps:" in lines[0] and "dEtaPerR:" in lines[0]
        assert lines[-2].startswith("# minExcess:")
        assert lines[-1].startswith("# maxExcess:")

    def test_excess_log_summary_only(self, wgs84_earth):
        diag = run_excess_diagnostic(small_grid(wgs84_earth, 3, 2), wgs84_earth)
        stream = io.StringIO()
        write_excess_log(stream, diag, show_samples=False)
        assert len(stream.getvalue().splitlines()) == 2

    def test_empty_excess_log(self):
        stream = io.StringIO()
        write_excess_log(stream, ExcessDiagnostic(float("nan"), float("nan")))
        assert stream.getvalue() == ""

    def test_footpoint_log(self, wgs84_earth):
        diag = run_footpoint_diagnostic(small_grid(wgs84_earth, 3, 2), wgs84_earth)
        stream = io.StringIO()
        write_footpoint_log(stream, diag)
        lines = stream.getvalue().splitlines()
        assert len(lines) == 6 + 1
        assert lines[0].startswith("xLpaExp:")
        assert "pVecDif:" in lines[0] and "pMagDif:" in lines[0]


class TestStudy:
    """Test the meridian-plane study driver."""

    def test_default_config(self):
        config = StudyConfig()
        assert config.num_rad == 33 and config.num_par == 33
        assert config.alt_lo == -100_000.0 and config.alt_hi == 100_000.0
        assert config.longitude == 0.25 * np.pi
        assert config.order is ZetaOrder.SECOND

    def test_from_quantities(self):
        config = StudyConfig.from_quantities(
            alt_lo=Q_(-50, 'km'),
            alt_hi=Q_(50, 'km'),
            longitude=Q_(30, 'degree'),
            num_rad=9
        )
        assert config.alt_lo == -50_000.0
        assert abs(config.longitude - np.pi / 6.0) < 1e-15
        assert config.num_rad == 9

    def test_from_quantities_wrong_units(self):
        with pytest.raises(ValueError):
            StudyConfig.from_quantities(alt_lo=Q_(1, 'second'))

    def test_as_dict_serializable(self, tmp_path):
        data = StudyConfig(output_dir=tmp_path).as_dict()
        assert data["order"] == "second"
        json.dumps(data)

    def test_run_writes_outputs(self, tmp_path, run_id):
        config = StudyConfig(num_rad=5, num_par=4, output_dir=tmp_path, run_id=run_id)
        result = run_meridian_study(config)

        assert len(result.excess.records) == 20
        assert len(result.footpoint.records) == 20
        assert result.passed

        excess_lines = (tmp_path / "excess.dat").read_text().splitlines()
        assert len(excess_lines) == 20 + 2
        pvec_lines = (tmp_path / "pvecDiff.dat").read_text().splitlines()
        assert len(pvec_lines) == 20 + 1

        artifacts = json.loads((tmp_path / f"{run_id}.json").read_text())
        assert artifacts["run_id"] == run_id
        assert len(artifacts["accuracy_residuals"]) == 3

    def test_run_summary(self, run_id):
        result = run_meridian_study(StudyConfig(num_rad=3, num_par=3, run_id=run_id))
        summary = result.run_summary
        assert summary["run_id"] == run_id
        assert summary["total_checks"] == 3
        assert summary["failed_checks"] == 0
        assert summary["input_metadata"]["num_samples"] == 9
        assert summary["end_time"] is not None

    def test_normalized_study(self, run_id):
        config = StudyConfig(num_rad=5, num_par=5, normalized=True, run_id=run_id)
        result = run_meridian_study(config)
        assert abs(result.shape.characteristic_radius - 1.0) < 1e-14
        radii = [rec.xyz.magnitude() for rec in result.footpoint.records]
        assert max(radii) < 1.02 and min(radii) > 0.98
        assert result.excess.min_excess <= EXCESS_SLACK / WGS84_SHAPE.characteristic_radius
        assert np.all(np.isfinite(result.footpoint.errors))

    def test_threaded_study(self, run_id):
        result = run_meridian_study(StudyConfig(num_rad=3, num_par=3, max_workers=2, run_id=run_id))
        assert len(result.footpoint.records) == 9


class TestAuditLogger:
    """Test the audit trail."""

    def test_singleton(self):
        assert AuditLogger() is AuditLogger()

    def test_run_context_records_checks(self, run_id):
        audit = AuditLogger()
        with audit.run_context(run_id, {"num_rad": 3}):
            assert audit.log_accuracy_check("a", 1e-9, 1e-3)
            assert not audit.log_accuracy_check("b", 1.0, 1e-3)
            assert not audit.log_accuracy_check("c", float("nan"), 1e-3)
        summary = audit.get_run_summary(run_id)
        assert summary["total_checks"] == 3
        assert summary["failed_checks"] == 2
        assert len(summary["config_hash"]) == 16

    def test_passed_override(self, run_id):
        audit = AuditLogger()
        with audit.run_context(run_id):
            assert audit.log_accuracy_check("bounds", -0.5, 1e-6, passed=True)
        assert audit.get_run_summary(run_id)["failed_checks"] == 0

    def test_file_log(self, tmp_path, run_id):
        audit = AuditLogger()
        audit.set_output_dir(tmp_path / "audit")
        with audit.run_context(run_id):
            audit.log_accuracy_check("logged_to_file", 0.5, 1.0)
        log_files = list((tmp_path / "audit").glob("audit_*.log"))
        assert len(log_files) == 1
        assert "logged_to_file" in log_files[0].read_text()

    def test_unknown_run(self):
        with pytest.raises(KeyError):
            AuditLogger().get_run_summary("no_such_run")

    def test_config_hash_deterministic(self):
        audit = AuditLogger()
        with audit.run_context("hash_a", {"x": 1, "y": 2}) as run_a:
            pass
        with audit.run_context("hash_b", {"y": 2, "x": 1}) as run_b:
            pass
        assert run_a.config_hash == run_b.config_hash
