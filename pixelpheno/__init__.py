"""pixelpheno package entry points."""

from .config import Config, DEFAULT_TRANSITIONS, default_config, load_config
from .exceptions import (
    ConfigurationError,
    DataError,
    DegenerateSeasonError,
    InsufficientDataError,
    PhenologyError,
)
from .data.schema import Sample, read_samples_csv, samples_from_frame
from .data.qc import prepare_samples, qc_flags
from .temporal import NormalizedSeason
from .temporal.resample import resample_daily
from .temporal.smoothing import interpolate_daily, savgol_smooth, smooth_and_interpolate
from .temporal.normalize import normalize_by_year, normalize_season
from .phenology import PhenologyRecord, Transition, TransitionResult
from .phenology.thresholds import extract_transitions, find_crossing
from .phenology.pipeline import extract_phenology, phenology_stages, phenology_to_dict
from .grid.apply import GridResult, apply_grid
from .analysis.trends import TrendFit, fit_trend, interannual_trend, phenology_trend
from .analysis.gdd import GddFit, calibrate_gdd, predict_doy

__all__ = [
    "Config",
    "DEFAULT_TRANSITIONS",
    "default_config",
    "load_config",
    "ConfigurationError",
    "DataError",
    "DegenerateSeasonError",
    "InsufficientDataError",
    "PhenologyError",
    "Sample",
    "read_samples_csv",
    "samples_from_frame",
    "prepare_samples",
    "qc_flags",
    "NormalizedSeason",
    "resample_daily",
    "interpolate_daily",
    "savgol_smooth",
    "smooth_and_interpolate",
    "normalize_by_year",
    "normalize_season",
    "PhenologyRecord",
    "Transition",
    "TransitionResult",
    "extract_transitions",
    "find_crossing",
    "extract_phenology",
    "phenology_stages",
    "phenology_to_dict",
    "GridResult",
    "apply_grid",
    "TrendFit",
    "fit_trend",
    "interannual_trend",
    "phenology_trend",
    "GddFit",
    "calibrate_gdd",
    "predict_doy",
]

__version__ = "0.1.0"
