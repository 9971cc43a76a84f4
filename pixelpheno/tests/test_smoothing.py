import unittest

import numpy as np
import pandas as pd

from pixelpheno.exceptions import ConfigurationError, InsufficientDataError
from pixelpheno.temporal.smoothing import (
    effective_window,
    interpolate_daily,
    savgol_smooth,
    smooth_and_interpolate,
)


def _daily(values, start="2020-01-01"):
    return pd.Series(values, index=pd.date_range(start, periods=len(values), freq="D"), dtype=float)


class SmoothingTests(unittest.TestCase):
    def test_linear_series_is_preserved(self):
        series = _daily(np.linspace(0.0, 1.0, 30))
        smoothed = savgol_smooth(series, window_length=7, polyorder=2)
        np.testing.assert_allclose(smoothed.to_numpy(), series.to_numpy(), atol=1e-9)

    def test_gaps_stay_missing_after_smoothing(self):
        values = np.linspace(0.0, 1.0, 20)
        values[[3, 9, 10]] = np.nan
        smoothed = savgol_smooth(_daily(values), window_length=5, polyorder=2)
        self.assertTrue(np.isnan(smoothed.iloc[[3, 9, 10]]).all())
        self.assertEqual(int(smoothed.notna().sum()), 17)

    def test_reject_short_series(self):
        series = _daily([0.1, np.nan, 0.2, 0.3])
        with self.assertRaises(InsufficientDataError) as ctx:
            savgol_smooth(series, window_length=7, polyorder=2)
        self.assertEqual(ctx.exception.n_valid, 3)
        self.assertEqual(ctx.exception.required, 7)

    def test_shrink_short_series(self):
        self.assertEqual(effective_window(6, 9, 2, "shrink"), 5)
        self.assertEqual(effective_window(3, 9, 2, "shrink"), 3)
        with self.assertRaises(InsufficientDataError):
            effective_window(2, 9, 2, "shrink")

    def test_invalid_window(self):
        with self.assertRaises(ConfigurationError):
            savgol_smooth(_daily(np.ones(10)), window_length=4, polyorder=2)


def test_interpolation_between_points_is_bounded():
    values = np.full(11, np.nan)
    values[0], values[10] = 1.0, 3.0
    dense = interpolate_daily(_daily(values))
    filled = dense.to_numpy()
    assert not np.isnan(filled).any()
    assert np.all(np.diff(filled) >= 0)
    assert filled.min() >= 1.0 and filled.max() <= 3.0


def test_edge_policies():
    series = _daily([np.nan, np.nan, 2.0, np.nan, 4.0, np.nan])
    held = interpolate_daily(series, edge_policy="hold").to_numpy()
    np.testing.assert_allclose(held, [2.0, 2.0, 2.0, 3.0, 4.0, 4.0])
    bare = interpolate_daily(series, edge_policy="none").to_numpy()
    np.testing.assert_allclose(bare, [np.nan, np.nan, 2.0, 3.0, 4.0, np.nan])


def test_all_missing_stays_missing():
    dense = interpolate_daily(_daily([np.nan] * 4))
    assert dense.isna().all()


def test_smooth_and_interpolate_fills_gaps():
    expected = np.linspace(0.0, 1.0, 40)
    values = expected.copy()
    values[1::2] = np.nan
    dense = smooth_and_interpolate(_daily(values), window_length=7, polyorder=2)
    np.testing.assert_allclose(dense.to_numpy()[:-1], expected[:-1], atol=1e-9)
    assert dense.iloc[-1] == dense.iloc[-2]
