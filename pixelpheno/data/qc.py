"""Quality control utilities."""

from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from ..config import Config
from .schema import Sample


def scale_value(value: Optional[float], scale_factor: float = 1.0, offset: float = 0.0,
                fill_value: Optional[float] = None) -> Optional[float]:
    if value is None:
        return None
    if fill_value is not None and value == fill_value:
        return None
    return value * scale_factor + offset


def in_range(value: float, valid_range: Optional[Tuple[float, float]]) -> bool:
    if valid_range is None:
        return True
    low, high = valid_range
    return low <= value <= high


def qa_accepted(qa: Optional[int], good_values: Optional[Iterable[int]]) -> bool:
    if good_values is None:
        return True
    if qa is None:
        return False
    return qa in set(good_values)


def mask_sample(
    sample: Sample,
    scale_factor: float = 1.0,
    offset: float = 0.0,
    fill_value: Optional[float] = None,
    valid_range: Optional[Tuple[float, float]] = None,
    qa_good_values: Optional[Iterable[int]] = None,
) -> Sample:
    value = scale_value(sample.value, scale_factor, offset, fill_value)
    if value is not None and not in_range(value, valid_range):
        value = None
    if not qa_accepted(sample.qa, qa_good_values):
        value = None
    return Sample(sample.date, value, sample.qa)


def prepare_samples(samples: Sequence[Sample], config: Config) -> List[Sample]:
    """Apply fill value, scaling, valid range and QA masking from the config.

    Masked samples keep their date with a missing value so the resampled
    series still spans the full observation period.
    """
    good = config.qa_good_values
    return [
        mask_sample(
            sample,
            scale_factor=config.scale_factor,
            offset=config.offset,
            fill_value=config.fill_value,
            valid_range=config.valid_range,
            qa_good_values=good,
        )
        for sample in samples
    ]


def longest_gap_days(series: pd.Series) -> int:
    valid = series.dropna()
    if len(valid) < 2:
        return 0
    gaps = np.diff(valid.index.values).astype("timedelta64[D]").astype(int)
    return int(gaps.max())


def qc_flags(
    series: pd.Series,
    window_length: int,
    valid_range: Optional[Tuple[float, float]] = None,
    max_gap_days: int = 64,
) -> List[str]:
    flags = []
    valid = series.dropna()
    if len(valid) < window_length:
        flags.append("sparse")
    if valid_range is not None and any(not in_range(v, valid_range) for v in valid):
        flags.append("out_of_range")
    if longest_gap_days(series) > max_gap_days:
        flags.append("large_gap")
    return flags


def mask_values(values: np.ndarray, config: Config) -> np.ndarray:
    """Vectorised fill / scale / range masking for raster time series (no QA band)."""
    array = np.array(values, dtype=float, copy=True)
    if config.fill_value is not None:
        array[array == config.fill_value] = np.nan
    array = array * config.scale_factor + config.offset
    array[~np.isfinite(array)] = np.nan
    if config.valid_range is not None:
        low, high = config.valid_range
        with np.errstate(invalid="ignore"):
            array[(array < low) | (array > high)] = np.nan
    return array
