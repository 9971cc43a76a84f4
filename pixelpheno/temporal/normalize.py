"""
Per calendar year min-max normalization.
"""

import logging
from typing import Dict

import numpy as np
import pandas as pd

from . import NormalizedSeason
from ..exceptions import DegenerateSeasonError
from ..phenology import REASON_DEGENERATE_SEASON, STATUS_FAILED, STATUS_NO_DATA, STATUS_OK

logger = logging.getLogger(__name__)


def normalize_season(values: pd.Series, year: int = 0, degenerate_tol: float = 1e-9) -> pd.Series:
    """
    Rescale one season to [0, 1] using its own extremes.

    Raises
    ------
    DegenerateSeasonError
        When max - min <= degenerate_tol, including a constant season.
    """
    lo = float(np.nanmin(values.to_numpy(dtype=float)))
    hi = float(np.nanmax(values.to_numpy(dtype=float)))
    span = hi - lo
    if span <= degenerate_tol:
        raise DegenerateSeasonError(
            f"Season {year} has range {span:g}, cannot normalize.", year=year
        )
    scaled = (values - lo) / span
    # exact extremes, free of rounding
    scaled[values == lo] = 0.0
    scaled[values == hi] = 1.0
    return scaled.clip(0.0, 1.0)


def normalize_by_year(series: pd.Series, degenerate_tol: float = 1e-9) -> Dict[int, NormalizedSeason]:
    """
    Split a dense daily series by calendar year and rescale each year.

    Each year only sees its own values, so no information leaks across years.
    A year with no valid values is "no_data"; a year whose range is not
    larger than ``degenerate_tol`` is "failed" with reason
    "degenerate_season". Neither stops the other years.
    """
    seasons: Dict[int, NormalizedSeason] = {}
    if series.empty:
        return seasons
    for year, values in series.groupby(series.index.year, sort=True):
        year = int(year)
        if values.notna().sum() == 0:
            seasons[year] = NormalizedSeason(year=year, status=STATUS_NO_DATA)
            continue
        lo = float(values.min())
        hi = float(values.max())
        try:
            scaled = normalize_season(values, year=year, degenerate_tol=degenerate_tol)
        except DegenerateSeasonError as exc:
            logger.info("%s", exc)
            seasons[year] = NormalizedSeason(
                year=year,
                status=STATUS_FAILED,
                reason=REASON_DEGENERATE_SEASON,
                minimum=lo,
                maximum=hi,
            )
            continue
        seasons[year] = NormalizedSeason(
            year=year, status=STATUS_OK, values=scaled, minimum=lo, maximum=hi
        )
    return seasons
