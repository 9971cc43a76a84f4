import numpy as np
import pandas as pd
import pytest

from pixelpheno.exceptions import ConfigurationError
from pixelpheno.phenology import Transition
from pixelpheno.phenology.thresholds import extract_transitions, find_crossing, run_starts
from pixelpheno.temporal import NormalizedSeason

NOISY = [0.0, 0.9, 0.0, 0.0, 0.5, 0.6, 0.7, 0.4]


def test_inclusive_and_strict_comparison():
    values = [0.0, 0.25, 0.5]
    assert find_crossing(values, 0.25, inclusive=True) == 1
    assert find_crossing(values, 0.25, inclusive=False) == 2


def test_forward_and_backward_scan():
    assert find_crossing(NOISY, 0.5, "forward") == 1
    assert find_crossing(NOISY, 0.5, "backward") == 6


def test_min_run_suppresses_spikes():
    assert find_crossing(NOISY, 0.5, "forward", min_run=3) == 4
    assert find_crossing(NOISY, 0.5, "backward", min_run=3) == 6


def test_no_crossing():
    assert find_crossing([0.1, 0.2, 0.3], 0.5) is None
    assert find_crossing(NOISY, 0.5, min_run=4) is None


def test_nan_never_qualifies():
    assert find_crossing([np.nan, np.nan, 0.6], 0.5, from_below=False) == 2
    assert find_crossing([np.nan, np.nan], 0.0) is None
    assert find_crossing([np.nan, 0.6], 0.5, "backward") == 1


def test_forward_needs_a_day_below_first():
    values = [0.6, 0.4, 0.1, 0.3, 0.5]
    assert find_crossing(values, 0.25, "forward") == 3
    assert find_crossing(values, 0.25, "forward", from_below=False) == 0
    assert find_crossing([0.1, np.nan, 0.6], 0.5) is None
    assert find_crossing([0.1, 0.6], 0.5) == 1


def test_season_opening_above_threshold_has_no_forward_crossing():
    values = [0.6, 0.7, 0.8]
    assert find_crossing(values, 0.25, "forward") is None
    assert find_crossing(values, 0.25, "backward") == 2


def test_from_below_with_min_run():
    values = [0.9, 0.9, 0.9, 0.1, 0.6, 0.7, 0.8]
    assert find_crossing(values, 0.5, "forward", min_run=3) == 4
    assert find_crossing(values, 0.5, "forward", min_run=3, from_below=False) == 0


def test_run_starts():
    qualifies = np.array([True, True, False, True, True, True])
    assert list(run_starts(qualifies, 2)) == [0, 3, 4]
    assert run_starts(np.array([True]), 2).size == 0


def test_bad_direction():
    with pytest.raises(ConfigurationError):
        find_crossing(NOISY, 0.5, direction="up")


def test_extract_transitions_dates():
    index = pd.date_range("2021-01-01", periods=len(NOISY), freq="D")
    season = NormalizedSeason(year=2021, status="ok", values=pd.Series(NOISY, index=index))
    transitions = [Transition("start", 0.5, "forward"), Transition("end", 0.5, "backward"), Transition("peak", 0.95)]
    results = extract_transitions(season, transitions)
    assert results["start"].status == "ok"
    assert results["start"].doy == 2
    assert str(results["start"].date) == "2021-01-02"
    assert results["end"].doy == 7
    assert results["end"].index == 6
    assert results["peak"].status == "no_crossing"
    assert results["peak"].doy is None
    assert not results["peak"].defined


def test_backward_never_precedes_forward_on_unimodal_curve():
    curve = np.concatenate([np.linspace(0, 1, 50), np.linspace(1, 0, 50)])
    for threshold in (0.1, 0.25, 0.5, 0.85, 1.0):
        forward = find_crossing(curve, threshold, "forward")
        backward = find_crossing(curve, threshold, "backward")
        assert forward <= backward
