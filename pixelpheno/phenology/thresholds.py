"""
Threshold based transition dates on a normalized seasonal curve.

A transition is the first day (scanning forward) or the last day (scanning
backward) at which the normalized value reaches its threshold. Comparison is
``>=`` when ``inclusive`` is set and ``>`` otherwise. ``min_run`` asks for a
sustained crossing: the day must start (forward) or end (backward) a run of
``min_run`` consecutive qualifying days, which suppresses single-day noise.
With ``min_run=1`` the first global crossing is taken. NaN days never
qualify.

A forward transition must cross from below: the qualifying run has to be
preceded by a finite day under the threshold. A season that opens above the
threshold and never dips and recrosses has no forward crossing. Pass
``from_below=False`` to accept a run starting on the first day.
"""

from typing import Dict, Iterable, Optional, Union

import numpy as np
import pandas as pd

from . import (
    BACKWARD,
    FORWARD,
    STATUS_NO_CROSSING,
    STATUS_OK,
    Transition,
    TransitionResult,
)
from ..exceptions import ConfigurationError
from ..temporal import NormalizedSeason


def qualifying_days(values: np.ndarray, threshold: float, inclusive: bool = True) -> np.ndarray:
    values = np.asarray(values, dtype=float)
    with np.errstate(invalid="ignore"):
        if inclusive:
            return values >= threshold
        return values > threshold


def run_starts(qualifies: np.ndarray, min_run: int = 1) -> np.ndarray:
    """Indices i for which qualifies[i:i + min_run] is all True."""
    if min_run < 1:
        raise ConfigurationError("min_run must be at least 1.")
    if qualifies.size < min_run:
        return np.array([], dtype=int)
    counts = np.convolve(qualifies.astype(int), np.ones(min_run, dtype=int), mode="valid")
    return np.flatnonzero(counts == min_run)


def find_crossing(
    values: Union[np.ndarray, pd.Series],
    threshold: float,
    direction: str = FORWARD,
    inclusive: bool = True,
    min_run: int = 1,
    from_below: bool = True,
) -> Optional[int]:
    """
    Position of the threshold crossing, or None if the curve never crosses.

    Forward returns the first qualifying position, backward the last one.
    With ``from_below`` a forward position only counts when the day before
    it is a finite value under the threshold.
    """
    if direction not in (FORWARD, BACKWARD):
        raise ConfigurationError("direction must be 'forward' or 'backward'.")
    array = values.to_numpy(dtype=float) if isinstance(values, pd.Series) else np.asarray(values, dtype=float)
    qualifies = qualifying_days(array, threshold, inclusive)
    starts = run_starts(qualifies, min_run)
    if direction == FORWARD and from_below:
        below = np.isfinite(array) & ~qualifies
        starts = starts[starts > 0]
        starts = starts[below[starts - 1]]
    if starts.size == 0:
        return None
    if direction == FORWARD:
        return int(starts[0])
    return int(starts[-1]) + min_run - 1


def extract_transitions(
    season: Union[NormalizedSeason, pd.Series],
    transitions: Iterable[Transition],
    inclusive: bool = True,
    min_run: int = 1,
    from_below: bool = True,
) -> Dict[str, TransitionResult]:
    """Transition dates for one normalized season, keyed by transition name."""
    values = season.values if isinstance(season, NormalizedSeason) else season
    results: Dict[str, TransitionResult] = {}
    for transition in transitions:
        if values is None:
            results[transition.name] = TransitionResult(transition.name, STATUS_NO_CROSSING)
            continue
        index = find_crossing(
            values,
            transition.threshold,
            direction=transition.direction,
            inclusive=inclusive,
            min_run=min_run,
            from_below=from_below,
        )
        if index is None:
            results[transition.name] = TransitionResult(transition.name, STATUS_NO_CROSSING)
            continue
        timestamp = values.index[index]
        results[transition.name] = TransitionResult(
            name=transition.name,
            status=STATUS_OK,
            date=timestamp.date(),
            doy=int(timestamp.dayofyear),
            index=index,
        )
    return results
