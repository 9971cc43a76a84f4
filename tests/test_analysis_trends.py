import math

import pytest

from pixelpheno import PhenologyRecord, TransitionResult, fit_trend, interannual_trend, phenology_trend


def record(year, start_doy, status="ok"):
    transitions = {"start": TransitionResult("start", "ok" if start_doy is not None else "no_crossing", doy=start_doy)}
    return PhenologyRecord(year=year, status=status, transitions=transitions)


def test_exact_line():
    fit = fit_trend([0, 1, 2, 3], [2, 5, 8, 11])
    assert fit.slope == pytest.approx(3.0)
    assert fit.intercept == pytest.approx(2.0)
    assert fit.r_squared == pytest.approx(1.0)
    assert fit.n == 4


def test_non_finite_pairs_are_dropped():
    fit = fit_trend([0, 1, 2, float("nan")], [1, 2, 3, 100])
    assert fit.n == 3
    assert fit.slope == pytest.approx(1.0)


def test_too_few_points():
    with pytest.raises(ValueError):
        fit_trend([1.0], [2.0])


def test_constant_covariate():
    fit = fit_trend([5, 5, 5], [1, 2, 3])
    assert fit.slope == 0.0
    assert fit.intercept == pytest.approx(2.0)


def test_elevation_trend():
    records_by_site = {
        "low": [record(2012, 100)],
        "mid": [record(2012, 110)],
        "high": [record(2012, 118), record(2013, 122)],
        "unknown": [record(2012, 300)],
    }
    elevation = {"low": 100.0, "mid": 200.0, "high": 300.0}
    fit = phenology_trend(records_by_site, elevation, transition="start")
    assert fit.n == 3
    assert fit.slope == pytest.approx(0.1)

    fit_2012 = phenology_trend(records_by_site, elevation, transition="start", year=2012)
    assert fit_2012.slope == pytest.approx(0.09)


def test_interannual_trend_skips_undefined_years():
    records = [record(2000, 120), record(2001, 118), record(2002, None), record(2003, 114), record(2004, 50, status="failed")]
    fit = interannual_trend(records, "start")
    assert fit.n == 3
    assert fit.slope == pytest.approx(-2.0)
    assert not math.isnan(fit.r_squared)


def test_scattered_points():
    fit = fit_trend([0, 1, 2, 3], [1, 3, 2, 4])
    assert fit.slope == pytest.approx(0.8)
    assert fit.intercept == pytest.approx(1.3)
    assert fit.r_squared == pytest.approx(0.64)
