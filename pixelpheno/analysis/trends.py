"""Linear trends of transition dates against covariates and time."""

from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional

import numpy as np
from scipy.stats import linregress

from ..phenology import STATUS_OK, PhenologyRecord


@dataclass
class TrendFit:
    intercept: float
    slope: float
    r_squared: float
    n: int


def fit_trend(x: Iterable[float], y: Iterable[float]) -> TrendFit:
    """Ordinary least squares y = intercept + slope * x over finite pairs."""
    xs = np.asarray(list(x), dtype=float)
    ys = np.asarray(list(y), dtype=float)
    if xs.shape != ys.shape:
        raise ValueError("x and y must have the same length.")
    finite = np.isfinite(xs) & np.isfinite(ys)
    xs = xs[finite]
    ys = ys[finite]
    if xs.size < 2:
        raise ValueError("At least two finite points are needed to fit a trend.")

    if np.ptp(xs) == 0:
        return TrendFit(intercept=float(ys.mean()), slope=0.0, r_squared=0.0, n=int(xs.size))
    fit = linregress(xs, ys)
    return TrendFit(
        intercept=float(fit.intercept),
        slope=float(fit.slope),
        r_squared=float(fit.rvalue) ** 2,
        n=int(xs.size),
    )


def mean_transition_doy(
    records: Iterable[PhenologyRecord], transition: str, year: Optional[int] = None
) -> float:
    values: List[float] = []
    for record in records:
        if record.status != STATUS_OK:
            continue
        if year is not None and record.year != year:
            continue
        doy = record.doy(transition)
        if doy is not None:
            values.append(float(doy))
    return float(np.mean(values)) if values else float("nan")


def phenology_trend(
    records_by_site: Mapping[str, Iterable[PhenologyRecord]],
    covariates: Mapping[str, float],
    transition: str = "start",
    year: Optional[int] = None,
) -> TrendFit:
    """
    Regress a transition date on a per-site covariate.

    With elevation as covariate the slope is the shift in days per metre
    (a positive slope means later green-up at higher sites).
    """
    xs: List[float] = []
    ys: List[float] = []
    for site_id, records in records_by_site.items():
        if site_id not in covariates:
            continue
        xs.append(float(covariates[site_id]))
        ys.append(mean_transition_doy(records, transition, year))
    return fit_trend(xs, ys)


def interannual_trend(records: Iterable[PhenologyRecord], transition: str = "start") -> TrendFit:
    """Change of a transition date per year at one location."""
    xs: List[float] = []
    ys: List[float] = []
    for record in records:
        if record.status != STATUS_OK:
            continue
        doy = record.doy(transition)
        if doy is None:
            continue
        xs.append(float(record.year))
        ys.append(float(doy))
    return fit_trend(xs, ys)
