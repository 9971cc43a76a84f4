"""
Phenology records for pixelpheno.

This module holds the dataclasses shared by the threshold extractor, the
per-series pipeline and the grid applicator:
- Transition: a named threshold scanned forward or backward
- TransitionResult: outcome of one transition for one season
- PhenologyRecord: all transitions of one calendar year
"""

import datetime
from dataclasses import dataclass, field
from typing import Dict, Optional

FORWARD = "forward"
BACKWARD = "backward"
DIRECTIONS = (FORWARD, BACKWARD)

# Outcome of a unit of work (season, cell) or of a single transition
STATUS_OK = "ok"
STATUS_NO_CROSSING = "no_crossing"
STATUS_NO_DATA = "no_data"
STATUS_FAILED = "failed"

# Integer codes used in raster outputs
STATUS_CODES = {
    STATUS_OK: 0,
    STATUS_NO_CROSSING: 1,
    STATUS_NO_DATA: 2,
    STATUS_FAILED: 3,
}
CODE_STATUS = {code: status for status, code in STATUS_CODES.items()}

REASON_INSUFFICIENT_DATA = "insufficient_data"
REASON_DEGENERATE_SEASON = "degenerate_season"


@dataclass(frozen=True)
class Transition:
    """A threshold on the normalized curve and the direction it is scanned in."""

    name: str
    threshold: float
    direction: str = FORWARD


@dataclass
class TransitionResult:
    name: str
    status: str
    date: Optional[datetime.date] = None
    doy: Optional[int] = None
    index: Optional[int] = None

    @property
    def defined(self) -> bool:
        return self.status == STATUS_OK


@dataclass
class PhenologyRecord:
    """Transition dates of one calendar year at one location."""

    year: int
    status: str
    reason: Optional[str] = None
    transitions: Dict[str, TransitionResult] = field(default_factory=dict)

    # Season metrics from the smoothed (unnormalized) curve
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    peak_date: Optional[datetime.date] = None

    def doy(self, name: str) -> Optional[int]:
        result = self.transitions.get(name)
        return result.doy if result is not None else None

    def date(self, name: str) -> Optional[datetime.date]:
        result = self.transitions.get(name)
        return result.date if result is not None else None

    @property
    def amplitude(self) -> Optional[float]:
        if self.minimum is None or self.maximum is None:
            return None
        return self.maximum - self.minimum

    @property
    def season_length(self) -> Optional[int]:
        start = self.transitions.get("start")
        end = self.transitions.get("end")
        if start is None or end is None or not (start.defined and end.defined):
            return None
        return (end.date - start.date).days


__all__ = [
    "FORWARD",
    "BACKWARD",
    "DIRECTIONS",
    "STATUS_OK",
    "STATUS_NO_CROSSING",
    "STATUS_NO_DATA",
    "STATUS_FAILED",
    "STATUS_CODES",
    "CODE_STATUS",
    "REASON_INSUFFICIENT_DATA",
    "REASON_DEGENERATE_SEASON",
    "Transition",
    "TransitionResult",
    "PhenologyRecord",
]
