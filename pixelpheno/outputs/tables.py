"""Tabular output helpers."""

from typing import Dict, List, Mapping, Optional, Sequence

import numpy as np

from ..grid.apply import GridResult
from ..phenology import CODE_STATUS, PhenologyRecord
from ..phenology.pipeline import phenology_to_dict


def phenology_records_table(
    records: Sequence[PhenologyRecord],
    site_id: Optional[str] = None,
    output_unit: str = "doy",
) -> List[dict]:
    rows = []
    for record in records:
        row = phenology_to_dict(record, output_unit=output_unit)
        if site_id is not None:
            row = {"site_id": site_id, **row}
        rows.append(row)
    return rows


def sites_table(
    records_by_site: Mapping[str, Sequence[PhenologyRecord]],
    output_unit: str = "doy",
) -> List[dict]:
    rows: List[dict] = []
    for site_id, records in records_by_site.items():
        rows.extend(phenology_records_table(records, site_id=site_id, output_unit=output_unit))
    return rows


def grid_result_table(result: GridResult) -> List[dict]:
    """One row per (year, row, col) with each transition's DOY and status."""
    rows = []
    n_rows, n_cols = result.shape
    for y, year in enumerate(result.years):
        for r in range(n_rows):
            for c in range(n_cols):
                row: Dict[str, object] = {"year": year, "row": r, "col": c}
                if result.cell_status is not None:
                    row["status"] = CODE_STATUS[int(result.cell_status[y, r, c])]
                for name in result.transitions:
                    value = result.doy[name][y, r, c]
                    row[name] = None if np.isnan(value) else int(value)
                    row[f"{name}_status"] = CODE_STATUS[int(result.status[name][y, r, c])]
                rows.append(row)
    return rows


def grid_summary(result: GridResult) -> Dict[str, Dict[str, object]]:
    """Status tallies and median DOY per transition."""
    summary: Dict[str, Dict[str, object]] = {}
    for name in result.transitions:
        values = result.doy[name]
        finite = values[np.isfinite(values)]
        summary[name] = {
            "counts": result.counts(name),
            "median_doy": float(np.median(finite)) if finite.size else None,
        }
    return summary
