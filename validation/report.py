"""
Line-Oriented Diagnostic Logs.

Plain text output for inspecting diagnostics by eye or with a plotting
tool. One line per sample; summary lines start with '#'. The layout is
for people, not a stable machine format.
"""

from typing import TextIO
import numpy as np

from common.types import XYZ, LPA
from validation.diagnostics import ExcessDiagnostic, FootPointDiagnostic


def _labeled(text: str, name: str) -> str:
    return f"{name}: {text}" if name else text


def fixed_linear(value: float, name: str = "") -> str:
    """Length with fixed micro-unit resolution."""
    return _labeled(f"{value:+17.6f}", name)


def fixed_angular(value: float, name: str = "") -> str:
    """Angle in radians with nano-radian resolution."""
    return _labeled(f"{value:+13.9f}", name)


def all_digits(value: float, name: str = "") -> str:
    """Value with every significant digit of a double."""
    return _labeled(f"{value:+.16e}", name)


def xyz_info(xyz: XYZ, name: str = "") -> str:
    return _labeled(" ".join(fixed_linear(comp) for comp in xyz), name)


def lpa_info(lpa: LPA, name: str = "") -> str:
    text = (
        f"{fixed_angular(lpa.longitude)} "
        f"{fixed_angular(lpa.parallel)} "
        f"{fixed_linear(lpa.altitude)}"
    )
    return _labeled(text, name)


def write_excess_log(
    stream: TextIO,
    diagnostic: ExcessDiagnostic,
    show_samples: bool = True
) -> None:
    """Write per-sample excess lines and the min/max summary.

    The summary is written only when there is at least one sample.
    """
    if show_samples:
        for rec in diagnostic.records:
            stream.write(
                f" Par: {fixed_angular(rec.lpa.parallel)}"
                f" Alt: {all_digits(rec.lpa.altitude)}"
                f" {fixed_linear(rec.excess, 'extra')}"
                f" {all_digits(rec.r_eps, 'rEps')}"
                f" {all_digits(rec.del_eta, 'delEta')}"
                f" {all_digits(rec.d_eta_per_r, 'dEtaPerR')}"
                "\n"
            )

    if diagnostic.records:
        stream.write(f"# minExcess: {fixed_linear(diagnostic.min_excess)}\n")
        stream.write(f"# maxExcess: {fixed_linear(diagnostic.max_excess)}\n")


def write_footpoint_log(stream: TextIO, diagnostic: FootPointDiagnostic) -> None:
    """Write one line per sample with the foot-point difference."""
    for rec in diagnostic.records:
        stream.write(
            f"{lpa_info(rec.lpa_exact, 'xLpaExp')}"
            f" {xyz_info(rec.difference, 'pVecDif')}"
            f" {all_digits(rec.error, 'pMagDif')}"
            "\n"
        )
    if diagnostic.records and np.all(np.isfinite(diagnostic.errors)):
        stream.write(f"# maxMagDif: {all_digits(diagnostic.max_error)}\n")
