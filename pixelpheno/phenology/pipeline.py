"""Per-location phenology pipeline: resample, smooth, normalize, threshold."""

import logging
from typing import Dict, List, Optional

import pandas as pd

from . import (
    REASON_INSUFFICIENT_DATA,
    STATUS_FAILED,
    STATUS_OK,
    PhenologyRecord,
    TransitionResult,
)
from .thresholds import extract_transitions
from ..config import Config
from ..data.qc import mask_values, prepare_samples, qc_flags
from ..data.schema import to_samples
from ..exceptions import InsufficientDataError
from ..temporal import NormalizedSeason
from ..temporal.normalize import normalize_by_year
from ..temporal.resample import resample_daily
from ..temporal.smoothing import interpolate_daily, savgol_smooth

logger = logging.getLogger(__name__)


def daily_series(samples: object, config: Config) -> pd.Series:
    """Masked, scaled samples on a daily grid (NaN where nothing was observed)."""
    if isinstance(samples, pd.Series) and isinstance(samples.index, pd.DatetimeIndex):
        masked = pd.Series(mask_values(samples.to_numpy(), config), index=samples.index)
        return resample_daily(masked, duplicate_policy=config.duplicate_policy)
    prepared = prepare_samples(to_samples(samples), config)
    return resample_daily(prepared, duplicate_policy=config.duplicate_policy)


def phenology_stages(samples: object, config: Optional[Config] = None) -> Dict[str, object]:
    """
    Run every stage and keep the intermediate series.

    Returns a mapping with keys "daily", "flags", "smoothed", "dense",
    "seasons" and "records". "flags" holds the ``qc_flags`` of the masked
    daily series. "smoothed", "dense" and "seasons" are None when the series is
    empty or too short to smooth.
    """
    config = config or Config()
    config.validate()

    daily = daily_series(samples, config)
    stages: Dict[str, object] = {
        "daily": daily,
        "flags": qc_flags(daily, config.window_length, config.valid_range),
        "smoothed": None,
        "dense": None,
        "seasons": None,
        "records": [],
    }
    if daily.notna().sum() == 0:
        return stages

    try:
        smoothed = savgol_smooth(
            daily,
            window_length=config.window_length,
            polyorder=config.polyorder,
            short_series_policy=config.short_series_policy,
        )
    except InsufficientDataError as exc:
        logger.info("Smoothing skipped: %s", exc)
        stages["records"] = _failed_records(daily, REASON_INSUFFICIENT_DATA, config)
        return stages

    dense = interpolate_daily(smoothed, edge_policy=config.edge_policy)
    seasons = normalize_by_year(dense, degenerate_tol=config.degenerate_tol)
    stages.update(smoothed=smoothed, dense=dense, seasons=seasons)
    stages["records"] = [
        _season_record(season, dense, config) for season in seasons.values()
    ]
    return stages


def extract_phenology(samples: object, config: Optional[Config] = None) -> List[PhenologyRecord]:
    """
    Phenology records, one per calendar year spanned by the samples.

    Parameters
    ----------
    samples : object
        Mapping date -> value, pandas Series, tidy DataFrame or a sequence of
        samples / (date, value[, qa]) pairs.
    config : Optional[Config]
        Smoothing, threshold and input preparation settings.

    Returns
    -------
    List[PhenologyRecord]
        Empty when no valid sample exists. A year is "ok" (each transition
        "ok" or "no_crossing"), "no_data" or "failed" with a reason. One
        failing year never hides the others.
    """
    return phenology_stages(samples, config)["records"]  # type: ignore[return-value]


def _failed_records(daily: pd.Series, reason: str, config: Config) -> List[PhenologyRecord]:
    years = sorted({int(year) for year in daily.index.year})
    return [
        PhenologyRecord(
            year=year,
            status=STATUS_FAILED,
            reason=reason,
            transitions=_placeholder_transitions(config, STATUS_FAILED),
        )
        for year in years
    ]


def _placeholder_transitions(config: Config, status: str) -> Dict[str, TransitionResult]:
    return {name: TransitionResult(name, status) for name in config.transition_names()}


def _season_record(season: NormalizedSeason, dense: pd.Series, config: Config) -> PhenologyRecord:
    if season.status != STATUS_OK:
        return PhenologyRecord(
            year=season.year,
            status=season.status,
            reason=season.reason,
            transitions=_placeholder_transitions(config, season.status),
            minimum=season.minimum,
            maximum=season.maximum,
        )
    transitions = extract_transitions(
        season,
        config.transitions,
        inclusive=config.inclusive,
        min_run=config.min_run,
        from_below=config.from_below,
    )
    year_values = dense[dense.index.year == season.year]
    peak = year_values.idxmax() if year_values.notna().any() else None
    return PhenologyRecord(
        year=season.year,
        status=STATUS_OK,
        transitions=transitions,
        minimum=season.minimum,
        maximum=season.maximum,
        peak_date=peak.date() if peak is not None else None,
    )


def phenology_to_dict(record: PhenologyRecord, output_unit: str = "doy") -> Dict[str, object]:
    row: Dict[str, object] = {
        "year": record.year,
        "status": record.status,
        "reason": record.reason,
    }
    for name, result in record.transitions.items():
        if output_unit == "date":
            row[name] = result.date.isoformat() if result.date is not None else None
        else:
            row[name] = result.doy
        row[f"{name}_status"] = result.status
    row["minimum"] = record.minimum
    row["maximum"] = record.maximum
    row["amplitude"] = record.amplitude
    row["peak_date"] = record.peak_date.isoformat() if record.peak_date is not None else None
    row["season_length"] = record.season_length
    return row
