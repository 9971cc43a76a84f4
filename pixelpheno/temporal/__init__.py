"""
Temporal processing for pixelpheno.

This module provides the per-location series transforms that precede
threshold extraction:
- Resampling of irregular samples onto a daily grid (resample)
- Savitzky-Golay smoothing and gap interpolation (smoothing)
- Per calendar year min-max normalization (normalize)
"""

from dataclasses import dataclass
from typing import Optional

import pandas as pd


@dataclass
class NormalizedSeason:
    """One calendar year of a smoothed series rescaled to [0, 1]."""

    year: int
    status: str  # "ok", "no_data" or "failed"
    values: Optional[pd.Series] = None  # daily, NaN outside the observed span
    reason: Optional[str] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None


__all__ = [
    "NormalizedSeason",
]
