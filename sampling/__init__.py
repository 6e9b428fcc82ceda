"""
Sampling Module for Foot-Point Accuracy Studies.

This module builds the uniform sampling plans and point grids that the
validation diagnostics evaluate.
"""

from sampling.sample_spec import (
    SampleSpec,
    RANGE_LON,
    RANGE_PAR,
    samples_for,
)

from sampling.grids import (
    build_meridian_grid,
    grid_as_array,
    altitude_band_spec,
    bulk_samples_lon,
    bulk_samples_par,
    bulk_samples_alt,
    combo_samples_lpa,
    bulk_samples_lpa,
    points_for_lpas,
)

__all__ = [
    "SampleSpec",
    "RANGE_LON",
    "RANGE_PAR",
    "samples_for",
    "build_meridian_grid",
    "grid_as_array",
    "altitude_band_spec",
    "bulk_samples_lon",
    "bulk_samples_par",
    "bulk_samples_alt",
    "combo_samples_lpa",
    "bulk_samples_lpa",
    "points_for_lpas",
]
