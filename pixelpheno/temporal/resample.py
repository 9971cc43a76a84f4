"""
Resampling of irregular samples onto a daily grid.
"""

import logging
from typing import List

import numpy as np
import pandas as pd

from ..data.schema import Sample, to_samples
from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def _resolve_duplicates(frame: pd.DataFrame, policy: str) -> pd.DataFrame:
    duplicated = frame["date"].duplicated(keep=False)
    if not duplicated.any():
        return frame
    n_dates = frame.loc[duplicated, "date"].nunique()
    logger.warning("Resolving %d duplicated dates with policy '%s'", n_dates, policy)
    if policy == "first":
        return frame.drop_duplicates(subset="date", keep="first")
    if policy == "last":
        return frame.drop_duplicates(subset="date", keep="last")
    if policy == "mean":
        return frame.groupby("date", as_index=False, sort=False)["value"].mean()
    raise ConfigurationError("duplicate_policy must be one of: first, last, mean.")


def samples_frame(samples: object) -> pd.DataFrame:
    if isinstance(samples, pd.Series) and isinstance(samples.index, pd.DatetimeIndex):
        values = pd.to_numeric(samples, errors="coerce").to_numpy(dtype=float, copy=True)
        values[~np.isfinite(values)] = np.nan
        return pd.DataFrame({"date": samples.index.normalize(), "value": values})
    parsed: List[Sample] = to_samples(samples)
    frame = pd.DataFrame(
        {
            "date": pd.to_datetime([s.date for s in parsed]),
            "value": np.array([np.nan if s.value is None else s.value for s in parsed], dtype=float),
        }
    )
    return frame


def resample_daily(samples: object, duplicate_policy: str = "first") -> pd.Series:
    """
    Place samples on a uniform daily grid.

    Parameters
    ----------
    samples : object
        Anything accepted by ``to_samples``: mapping date -> value, pandas
        Series, tidy DataFrame or a sequence of samples / pairs.
    duplicate_policy : str
        "first" (keep the first occurrence in input order), "last" or "mean".

    Returns
    -------
    pd.Series
        Float values indexed by every calendar day between the first and last
        sample date. Days without a sample, and samples whose value is
        missing, are NaN. No values are invented at this stage.

    Notes
    -----
    For every input date d with value v: out[d] == v. For every other day in
    [min(d), max(d)]: out is NaN.
    """
    frame = samples_frame(samples)
    if frame.empty:
        return pd.Series([], index=pd.DatetimeIndex([], freq="D"), dtype=float)

    frame = _resolve_duplicates(frame, duplicate_policy)
    observed = frame.set_index("date")["value"].sort_index()

    daily_index = pd.date_range(observed.index.min(), observed.index.max(), freq="D")
    return observed.reindex(daily_index).astype(float)
