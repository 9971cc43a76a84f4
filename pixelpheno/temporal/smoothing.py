"""
Savitzky-Golay smoothing and gap interpolation.
"""

import logging
from typing import Tuple

import numpy as np
import pandas as pd
from scipy.signal import savgol_filter

from ..exceptions import ConfigurationError, InsufficientDataError

logger = logging.getLogger(__name__)


def check_window(window_length: int, polyorder: int) -> None:
    if window_length < 1 or window_length % 2 == 0:
        raise ConfigurationError("window_length must be a positive odd integer.")
    if polyorder < 0 or window_length <= polyorder:
        raise ConfigurationError("window_length must be greater than polyorder.")


def effective_window(
    n_valid: int, window_length: int, polyorder: int, short_series_policy: str = "reject"
) -> int:
    """
    Window length that can be used for ``n_valid`` samples.

    Returns ``window_length`` when enough samples exist. Otherwise "reject"
    raises ``InsufficientDataError`` and "shrink" returns the largest odd
    window <= n_valid that still exceeds ``polyorder`` (raising when there is
    none).
    """
    if n_valid >= window_length:
        return window_length
    if short_series_policy == "reject":
        raise InsufficientDataError(
            f"{n_valid} valid samples, smoothing window needs {window_length}.",
            n_valid=n_valid,
            required=window_length,
        )
    if short_series_policy != "shrink":
        raise ConfigurationError("short_series_policy must be 'reject' or 'shrink'.")
    window = n_valid if n_valid % 2 == 1 else n_valid - 1
    if window <= polyorder:
        raise InsufficientDataError(
            f"{n_valid} valid samples, polynomial order {polyorder} needs at least {polyorder + 1}.",
            n_valid=n_valid,
            required=polyorder + 1 if polyorder % 2 == 0 else polyorder + 2,
        )
    logger.info("Shrinking smoothing window from %d to %d samples", window_length, window)
    return window


def savgol_smooth(
    series: pd.Series,
    window_length: int = 7,
    polyorder: int = 2,
    short_series_policy: str = "reject",
) -> pd.Series:
    """
    Smooth the valid samples of a daily series.

    The filter runs over the sequence of present samples only, so the window
    counts observations rather than days. Missing days stay NaN.
    """
    check_window(window_length, polyorder)
    valid_mask = series.notna().to_numpy()
    n_valid = int(valid_mask.sum())
    window = effective_window(n_valid, window_length, polyorder, short_series_policy)

    smoothed = np.full(len(series), np.nan)
    smoothed[valid_mask] = savgol_filter(
        series.to_numpy(dtype=float)[valid_mask], window_length=window, polyorder=polyorder
    )
    return pd.Series(smoothed, index=series.index, name=series.name)


def valid_span(series: pd.Series) -> Tuple[int, int]:
    positions = np.flatnonzero(series.notna().to_numpy())
    if positions.size == 0:
        return -1, -1
    return int(positions[0]), int(positions[-1])


def interpolate_daily(smoothed: pd.Series, edge_policy: str = "hold") -> pd.Series:
    """
    Linearly interpolate between consecutive valid points.

    Parameters
    ----------
    smoothed : pd.Series
        Daily series with NaN gaps.
    edge_policy : str
        "hold" keeps the first / last valid value constant out to the series
        edges, "none" leaves those days NaN. Values are never extrapolated.

    Mathematical Implementation
    ---------------------------
    For a day t with t_k <= t <= t_{k+1} between valid points:
        v(t) = v_k + (v_{k+1} - v_k) * (t - t_k) / (t_{k+1} - t_k)
    """
    if edge_policy not in {"hold", "none"}:
        raise ConfigurationError("edge_policy must be 'hold' or 'none'.")
    values = smoothed.to_numpy(dtype=float)
    valid = ~np.isnan(values)
    if not valid.any():
        return smoothed.copy()

    positions = np.arange(len(values))
    dense = np.interp(positions, positions[valid], values[valid])
    if edge_policy == "none":
        first, last = valid_span(smoothed)
        dense[:first] = np.nan
        dense[last + 1:] = np.nan
    return pd.Series(dense, index=smoothed.index, name=smoothed.name)


def smooth_and_interpolate(
    series: pd.Series,
    window_length: int = 7,
    polyorder: int = 2,
    short_series_policy: str = "reject",
    edge_policy: str = "hold",
) -> pd.Series:
    smoothed = savgol_smooth(series, window_length, polyorder, short_series_policy)
    return interpolate_daily(smoothed, edge_policy)
