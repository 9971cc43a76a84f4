"""Apply the phenology pipeline to every cell of a raster cube."""

import logging
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from ..config import Config
from ..exceptions import DataError, PhenologyError
from ..phenology import (
    CODE_STATUS,
    STATUS_CODES,
    STATUS_FAILED,
    STATUS_NO_DATA,
)
from ..phenology.pipeline import extract_phenology

logger = logging.getLogger(__name__)

NO_DATA_CODE = STATUS_CODES[STATUS_NO_DATA]
FAILED_CODE = STATUS_CODES[STATUS_FAILED]


@dataclass
class GridResult:
    """Per-transition day-of-year rasters stacked by year.

    ``doy[name]`` and ``status[name]`` are shaped (years, rows, cols).
    DOY is NaN unless the status code is 0 ("ok"). ``cell_status`` holds
    the season level outcome of each cell and year.
    """

    years: List[int]
    transitions: List[str]
    doy: Dict[str, np.ndarray] = field(default_factory=dict)
    status: Dict[str, np.ndarray] = field(default_factory=dict)
    cell_status: Optional[np.ndarray] = None

    @property
    def shape(self) -> Tuple[int, int]:
        first = self.doy[self.transitions[0]]
        return first.shape[1], first.shape[2]

    def _year_index(self, year: Optional[int]) -> int:
        if year is None:
            if len(self.years) != 1:
                raise ValueError("year is required when the grid spans several years.")
            return 0
        if year not in self.years:
            raise KeyError(f"Year {year} not in grid result.")
        return self.years.index(year)

    def layer(self, name: str, year: Optional[int] = None) -> np.ndarray:
        return self.doy[name][self._year_index(year)]

    def status_layer(self, name: str, year: Optional[int] = None) -> np.ndarray:
        return self.status[name][self._year_index(year)]

    def counts(self, name: str) -> Dict[str, int]:
        codes, totals = np.unique(self.status[name], return_counts=True)
        return {CODE_STATUS[int(code)]: int(total) for code, total in zip(codes, totals)}


def _cell_outputs(
    values: np.ndarray,
    index: pd.DatetimeIndex,
    config: Config,
    years: List[int],
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """DOY (years, transitions), transition codes and season codes for one cell."""
    names = config.transition_names()
    doy = np.full((len(years), len(names)), np.nan)
    codes = np.full((len(years), len(names)), NO_DATA_CODE, dtype=np.int8)
    season_codes = np.full(len(years), NO_DATA_CODE, dtype=np.int8)
    if np.all(np.isnan(values)):
        return doy, codes, season_codes

    records = extract_phenology(pd.Series(values, index=index), config)
    for record in records:
        if record.year not in years:
            continue
        y = years.index(record.year)
        season_codes[y] = STATUS_CODES[record.status]
        for t, name in enumerate(names):
            result = record.transitions.get(name)
            if result is None:
                continue
            codes[y, t] = STATUS_CODES[result.status]
            if result.doy is not None:
                doy[y, t] = result.doy
    return doy, codes, season_codes


def _process_rows(
    block: np.ndarray,
    index: pd.DatetimeIndex,
    config: Config,
    years: List[int],
    row_offset: int,
) -> Tuple[int, np.ndarray, np.ndarray, np.ndarray]:
    n_rows, n_cols, _ = block.shape
    n_names = len(config.transitions)
    doy = np.full((len(years), n_names, n_rows, n_cols), np.nan)
    codes = np.full((len(years), n_names, n_rows, n_cols), NO_DATA_CODE, dtype=np.int8)
    season_codes = np.full((len(years), n_rows, n_cols), NO_DATA_CODE, dtype=np.int8)
    for r in range(n_rows):
        for c in range(n_cols):
            try:
                cell_doy, cell_codes, cell_seasons = _cell_outputs(block[r, c], index, config, years)
            except (PhenologyError, ValueError) as exc:
                logger.warning("Cell (%d, %d) failed: %s", row_offset + r, c, exc)
                codes[:, :, r, c] = FAILED_CODE
                season_codes[:, r, c] = FAILED_CODE
                continue
            doy[:, :, r, c] = cell_doy
            codes[:, :, r, c] = cell_codes
            season_codes[:, r, c] = cell_seasons
    return row_offset, doy, codes, season_codes


def _row_blocks(n_rows: int, n_jobs: int) -> List[Tuple[int, int]]:
    size = max(1, int(np.ceil(n_rows / n_jobs)))
    return [(start, min(start + size, n_rows)) for start in range(0, n_rows, size)]


def apply_grid(
    cube: np.ndarray,
    dates: Sequence[object],
    config: Optional[Config] = None,
) -> GridResult:
    """
    Extract phenology for every cell of a (rows, cols, time) cube.

    Parameters
    ----------
    cube : np.ndarray
        Vegetation index values; NaN (or ``config.fill_value``) is missing.
    dates : Sequence[object]
        Acquisition date of each time layer.
    config : Optional[Config]
        Pipeline settings. ``n_jobs > 1`` processes row blocks in worker
        processes; output is identical to the serial run.

    Returns
    -------
    GridResult
        One (years, rows, cols) DOY raster and status raster per transition.

    Notes
    -----
    Each cell reads only its own time series and writes only its own slot of
    the pre-allocated outputs. An all-missing cell is "no_data"; a cell whose
    pipeline raises is "failed"; neither stops the remaining cells.
    """
    config = config or Config()
    config.validate()
    cube = np.asarray(cube, dtype=float)
    if cube.ndim != 3:
        raise DataError("cube must be shaped (rows, cols, time).")
    if len(dates) != cube.shape[2]:
        raise DataError(f"{len(dates)} dates for {cube.shape[2]} time layers.")

    index = pd.DatetimeIndex(pd.to_datetime(list(dates))).normalize()
    years = sorted({int(year) for year in index.year})
    names = config.transition_names()
    n_rows, n_cols, _ = cube.shape

    doy = np.full((len(years), len(names), n_rows, n_cols), np.nan)
    codes = np.full((len(years), len(names), n_rows, n_cols), NO_DATA_CODE, dtype=np.int8)
    season_codes = np.full((len(years), n_rows, n_cols), NO_DATA_CODE, dtype=np.int8)

    blocks = _row_blocks(n_rows, config.n_jobs) if n_rows else []
    if config.n_jobs > 1 and len(blocks) > 1:
        with ProcessPoolExecutor(max_workers=config.n_jobs) as executor:
            futures = [
                executor.submit(_process_rows, cube[start:stop], index, config, years, start)
                for start, stop in blocks
            ]
            outputs = [future.result() for future in futures]
    else:
        outputs = [_process_rows(cube[start:stop], index, config, years, start) for start, stop in blocks]

    for row_offset, block_doy, block_codes, block_seasons in outputs:
        stop = row_offset + block_doy.shape[2]
        doy[:, :, row_offset:stop, :] = block_doy
        codes[:, :, row_offset:stop, :] = block_codes
        season_codes[:, row_offset:stop, :] = block_seasons

    failed = int((season_codes == FAILED_CODE).sum())
    if failed:
        logger.info("%d cell-years failed out of %d", failed, season_codes.size)

    return GridResult(
        years=years,
        transitions=names,
        doy={name: doy[:, t] for t, name in enumerate(names)},
        status={name: codes[:, t] for t, name in enumerate(names)},
        cell_status=season_codes,
    )
