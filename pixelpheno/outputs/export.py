"""Export helpers."""

import csv
import json
from typing import List, Mapping, Sequence

from .tables import grid_result_table, sites_table
from ..grid.apply import GridResult
from ..phenology import PhenologyRecord


def _write_csv(rows: List[dict], path: str) -> None:
    if not rows:
        return
    fieldnames: List[str] = []
    for row in rows:
        for key in row:
            if key not in fieldnames:
                fieldnames.append(key)
    with open(path, "w", newline="", encoding="utf-8") as handle:
        writer = csv.DictWriter(handle, fieldnames=fieldnames)
        writer.writeheader()
        writer.writerows(rows)


def export_records_csv(
    records_by_site: Mapping[str, Sequence[PhenologyRecord]], path: str, output_unit: str = "doy"
) -> None:
    _write_csv(sites_table(records_by_site, output_unit=output_unit), path)


def export_records_json(
    records_by_site: Mapping[str, Sequence[PhenologyRecord]], path: str, output_unit: str = "doy"
) -> None:
    rows = sites_table(records_by_site, output_unit=output_unit)
    with open(path, "w", encoding="utf-8") as handle:
        json.dump(rows, handle, indent=2)


def export_grid_csv(result: GridResult, path: str) -> None:
    _write_csv(grid_result_table(result), path)
