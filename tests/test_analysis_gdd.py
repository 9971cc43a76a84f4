import math
import unittest

import numpy as np
import pandas as pd

from pixelpheno.analysis.gdd import (
    NON_CROSSING_PENALTY,
    calibrate_gdd,
    gdd_rmse,
    growing_degree_days,
    predict_doy,
)

DAYS = pd.date_range("2021-01-01", "2021-12-31", freq="D")


def linear_temperatures(intercept):
    return pd.Series(intercept + 0.2 * DAYS.dayofyear.to_numpy(dtype=float), index=DAYS)


TEMPERATURES = {"valley": linear_temperatures(-8.0), "ridge": linear_temperatures(-10.0)}
OBSERVATIONS = [("valley", 2021, 72.0), ("ridge", 2021, 82.0)]


class GrowingDegreeDayTests(unittest.TestCase):
    def test_negative_contributions_are_clipped(self):
        np.testing.assert_allclose(growing_degree_days([-3.0, 2.0, 7.0, np.nan], 5.0), [0.0, 0.0, 2.0, 0.0])

    def test_predicted_dates(self):
        self.assertEqual(predict_doy(TEMPERATURES["ridge"], 0.0, 100.0), {2021: 82.0})
        self.assertEqual(predict_doy(TEMPERATURES["valley"], 0.0, 100.0), {2021: 72.0})

    def test_warmer_base_delays_green_up(self):
        early = predict_doy(TEMPERATURES["ridge"], 0.0, 100.0)[2021]
        late = predict_doy(TEMPERATURES["ridge"], 2.0, 100.0)[2021]
        self.assertGreater(late, early)

    def test_threshold_never_reached(self):
        prediction = predict_doy(TEMPERATURES["ridge"], 0.0, 1e7)[2021]
        self.assertTrue(math.isnan(prediction))
        self.assertAlmostEqual(
            gdd_rmse((0.0, 1e7), TEMPERATURES, [("ridge", 2021, 82.0)]), NON_CROSSING_PENALTY - 82.0
        )

    def test_rmse_at_true_parameters(self):
        self.assertEqual(gdd_rmse((0.0, 100.0), TEMPERATURES, OBSERVATIONS), 0.0)


class CalibrationTests(unittest.TestCase):
    def test_calibration_recovers_dates(self):
        fit = calibrate_gdd(TEMPERATURES, OBSERVATIONS, bounds=((-1.0, 1.0), (90.0, 110.0)), random_state=7, maxiter=30)
        self.assertEqual(fit.n, 2)
        self.assertLess(fit.rmse, 3.0)
        self.assertTrue(-1.0 <= fit.t_base <= 1.0)

    def test_equal_seeds_give_equal_fits(self):
        kwargs = dict(bounds=((-1.0, 1.0), (90.0, 110.0)), random_state=11, maxiter=10)
        first = calibrate_gdd(TEMPERATURES, OBSERVATIONS, **kwargs)
        second = calibrate_gdd(TEMPERATURES, OBSERVATIONS, **kwargs)
        self.assertEqual(first, second)

    def test_missing_site(self):
        with self.assertRaises(ValueError):
            calibrate_gdd(TEMPERATURES, [("coast", 2021, 90.0)], random_state=1)

    def test_no_observations(self):
        with self.assertRaises(ValueError):
            calibrate_gdd(TEMPERATURES, [("ridge", 2021, float("nan"))], random_state=1)


if __name__ == "__main__":
    unittest.main()
