"""
Accuracy Diagnostics for the Perturbative Foot-Point Solver.

This module compares the closed-form foot point against an exact
reference transform over a grid of sample points.

Diagnostics
-----------
1. Ellipsoidal excess: how much longer the radial path to the surface is
   than the perpendicular (normal) path, plus the distortion of the
   gradient magnitude between the radial and the true foot point.
2. Foot-point error: distance between the approximate and the exact foot
   point, kept per sample so that the regions where the approximation
   breaks down (deep interior points, extreme altitude) can be inspected.

Every sample is evaluated independently against an immutable model, so the
per-point work is a plain map (optionally over a thread pool). Reductions
such as the excess extrema are taken only after every sample is collected.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Protocol, Sequence, Tuple, TypeVar
import numpy as np
from numpy.typing import NDArray

from common.logging_config import get_logger
from common.types import XYZ, LPA
from geospatial.coordinate_models import Shape
from footpoint.perturbation import (
    ZetaOrder,
    radial_foot_point,
    solve_foot_point,
    solve_foot_points,
)
from sampling.grids import grid_as_array

logger = get_logger(__name__)

S = TypeVar("S")
T = TypeVar("T")


class ReferenceModel(Protocol):
    """Exact transform interface consumed by the diagnostics."""

    @property
    def shape(self) -> Shape: ...

    def lpa_for_xyz(self, xyz: XYZ) -> LPA: ...

    def xyz_for_lpa(self, lpa: LPA) -> XYZ: ...


@dataclass(frozen=True)
class ExcessRecord:
    """Excess diagnostic for one sample point.

    Attributes
    ----------
    xyz : XYZ
        The sample point.
    lpa : LPA
        Exact geodetic coordinates of the sample.
    excess : float
        |x - r| - |x - p|: radial path length minus perpendicular path
        length.
    r_eps : float
        |g(r)| / |g(p)| - 1: gradient magnitude distortion between the
        radial and the exact foot point.
    del_eta : float
        Altitude difference implied by the excess.
    d_eta_per_r : float
        `del_eta` relative to the radial distance of the surface.
    """
    xyz: XYZ
    lpa: LPA
    excess: float
    r_eps: float
    del_eta: float
    d_eta_per_r: float


@dataclass
class ExcessDiagnostic:
    """Aggregated excess diagnostic.

    Attributes
    ----------
    min_excess : float
        Smallest excess over all samples (nan for an empty grid).
    max_excess : float
        Largest excess over all samples (nan for an empty grid).
    records : List[ExcessRecord]
        Per-sample records in grid order.
    """
    min_excess: float
    max_excess: float
    records: List[ExcessRecord] = field(default_factory=list)

    @property
    def excesses(self) -> NDArray[np.float64]:
        return np.array([rec.excess for rec in self.records], dtype=np.float64)

    @property
    def r_eps_values(self) -> NDArray[np.float64]:
        return np.array([rec.r_eps for rec in self.records], dtype=np.float64)


@dataclass(frozen=True)
class FootPointRecord:
    """Foot-point error for one sample point.

    Attributes
    ----------
    xyz : XYZ
        The sample point.
    lpa_exact : LPA
        Exact geodetic coordinates of the sample.
    p_got : XYZ
        Foot point from the perturbative solver.
    p_exact : XYZ
        Foot point from the exact transform.
    difference : XYZ
        p_got - p_exact.
    error : float
        |p_got - p_exact|.
    """
    xyz: XYZ
    lpa_exact: LPA
    p_got: XYZ
    p_exact: XYZ
    difference: XYZ
    error: float


@dataclass
class FootPointDiagnostic:
    """Per-sample foot-point errors with summary statistics.

    Non-finite errors (degenerate input) propagate into `max_error` and
    `mean_error` so that they cannot go unnoticed.
    """
    records: List[FootPointRecord]
    order: ZetaOrder = ZetaOrder.SECOND

    @property
    def errors(self) -> NDArray[np.float64]:
        return np.array([rec.error for rec in self.records], dtype=np.float64)

    @property
    def max_error(self) -> float:
        return float(np.max(self.errors)) if self.records else float("nan")

    @property
    def mean_error(self) -> float:
        return float(np.mean(self.errors)) if self.records else float("nan")

    @property
    def worst_record(self) -> Optional[FootPointRecord]:
        """Record with the largest error; non-finite errors rank highest."""
        if not self.records:
            return None
        ranked = np.nan_to_num(self.errors, nan=np.inf)
        return self.records[int(np.argmax(ranked))]

    def subset(
        self,
        min_altitude: Optional[float] = None,
        max_altitude: Optional[float] = None
    ) -> 'FootPointDiagnostic':
        """Records whose exact altitude lies within the given limits."""
        kept = [
            rec for rec in self.records
            if (min_altitude is None or rec.lpa_exact.altitude >= min_altitude)
            and (max_altitude is None or rec.lpa_exact.altitude <= max_altitude)
        ]
        return FootPointDiagnostic(records=kept, order=self.order)

    def error_by_altitude_band(
        self,
        edges: Sequence[float]
    ) -> Dict[Tuple[float, float], float]:
        """Maximum error within each altitude band [edges[i], edges[i+1])."""
        altitudes = np.array([rec.lpa_exact.altitude for rec in self.records])
        errors = self.errors
        bands = {}
        for lo, hi in zip(edges[:-1], edges[1:]):
            mask = (altitudes >= lo) & (altitudes < hi)
            bands[(float(lo), float(hi))] = float(np.max(errors[mask])) if np.any(mask) else float("nan")
        return bands


def _map_points(
    func: Callable[[S], T],
    items: Sequence[S],
    max_workers: Optional[int] = None
) -> List[T]:
    """Apply `func` to every item, keeping input order."""
    if max_workers:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            return list(pool.map(func, items))
    return list(map(func, items))


def exact_foot_point(xyz: XYZ, model: ReferenceModel) -> Tuple[LPA, XYZ]:
    """Exact geodetic coordinates of `xyz` and its exact foot point.

    The foot point is found by the round trip inverse transform, zero
    altitude, forward transform.
    """
    x_lpa = model.lpa_for_xyz(xyz)
    return x_lpa, model.xyz_for_lpa(x_lpa.on_surface())


def evaluate_excess(xyz: XYZ, model: ReferenceModel) -> ExcessRecord:
    """Evaluate the ellipsoidal excess at one point.

    Parameters
    ----------
    xyz : XYZ
        Sample point.
    model : ReferenceModel
        Exact transform and shape.

    Returns
    -------
    ExcessRecord
        Excess and gradient distortion for this point.
    """
    shape = model.shape
    x_lpa, p_vec = exact_foot_point(xyz, model)
    r_vec = radial_foot_point(xyz, shape)

    xr_mag = (xyz - r_vec).magnitude()
    xp_mag = (xyz - p_vec).magnitude()
    excess = xr_mag - xp_mag

    # gradients
    gp_mag = shape.gradient_at(p_vec).magnitude()
    gr_mag = shape.gradient_at(r_vec).magnitude()
    with np.errstate(divide='ignore', invalid='ignore'):
        r_eps = float(np.float64(gr_mag) / gp_mag - 1.0)
        d_eta_per_r = float(np.float64(excess) / r_vec.magnitude())

    return ExcessRecord(
        xyz=xyz,
        lpa=x_lpa,
        excess=excess,
        r_eps=r_eps,
        del_eta=excess,
        d_eta_per_r=d_eta_per_r
    )


def run_excess_diagnostic(
    grid: Sequence[XYZ],
    model: ReferenceModel,
    max_workers: Optional[int] = None
) -> ExcessDiagnostic:
    """Evaluate the excess over a grid and report its extrema.

    Parameters
    ----------
    grid : Sequence[XYZ]
        Sample points.
    model : ReferenceModel
        Exact transform and shape.
    max_workers : int, optional
        Evaluate on a thread pool of this size.

    Returns
    -------
    ExcessDiagnostic
        Minimum and maximum excess plus per-point records.
    """
    records = _map_points(lambda xyz: evaluate_excess(xyz, model), grid, max_workers)

    if records:
        excesses = np.sort(np.array([rec.excess for rec in records]))
        min_excess, max_excess = float(excesses[0]), float(excesses[-1])
    else:
        min_excess = max_excess = float("nan")

    logger.info(
        f"Excess diagnostic over {len(records)} samples: "
        f"min={min_excess:.6f} max={max_excess:.6f}"
    )
    return ExcessDiagnostic(min_excess=min_excess, max_excess=max_excess, records=records)


def _footpoint_record(xyz: XYZ, p_got: XYZ, model: ReferenceModel) -> FootPointRecord:
    x_lpa, p_exact = exact_foot_point(xyz, model)
    difference = p_got - p_exact
    return FootPointRecord(
        xyz=xyz,
        lpa_exact=x_lpa,
        p_got=p_got,
        p_exact=p_exact,
        difference=difference,
        error=difference.magnitude()
    )


def evaluate_foot_point(
    xyz: XYZ,
    model: ReferenceModel,
    order: ZetaOrder = ZetaOrder.SECOND
) -> FootPointRecord:
    """Compare the perturbative and exact foot points at one point."""
    return _footpoint_record(xyz, solve_foot_point(xyz, model.shape, order), model)


def run_footpoint_diagnostic(
    grid: Sequence[XYZ],
    model: ReferenceModel,
    order: ZetaOrder = ZetaOrder.SECOND,
    max_workers: Optional[int] = None
) -> FootPointDiagnostic:
    """Foot-point error at every grid point.

    The perturbative solver runs vectorized over the whole grid; the exact
    reference is evaluated point by point.

    Returns
    -------
    FootPointDiagnostic
        One record per sample, in grid order.
    """
    p_gots = solve_foot_points(grid_as_array(grid), model.shape, order)
    pairs = list(zip(grid, (XYZ.from_array(row) for row in p_gots)))
    records = _map_points(
        lambda pair: _footpoint_record(pair[0], pair[1], model),
        pairs,
        max_workers
    )

    diagnostic = FootPointDiagnostic(records=records, order=ZetaOrder(order))
    logger.info(
        f"Foot-point diagnostic over {len(records)} samples "
        f"({ZetaOrder(order).value} order): max error={diagnostic.max_error:.6e}"
    )
    return diagnostic
