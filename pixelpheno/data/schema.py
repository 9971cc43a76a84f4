"""Input schema helpers."""

import datetime
import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from ..exceptions import DataError

DATE_FORMATS = ["%Y-%m-%d", "%Y/%m/%d", "%Y-%m-%d %H:%M:%S", "%d/%m/%Y"]


@dataclass
class Sample:
    """A vegetation index observation with an optional quality flag."""

    date: datetime.date
    value: Optional[float]
    qa: Optional[int] = None


def required_columns(date_column: str = "date", value_column: str = "value") -> List[str]:
    return [date_column, value_column]


def validate_required_columns(
    columns: Iterable[str], date_column: str = "date", value_column: str = "value"
) -> None:
    available = set(columns)
    missing = [col for col in required_columns(date_column, value_column) if col not in available]
    if missing:
        raise DataError(f"Missing required columns: {missing}")


def parse_numeric(value: object) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, (int, float)):
        value = float(value)
        return value if math.isfinite(value) else None
    text = str(value).strip()
    if not text or text.upper() in {"NA", "NAN", "NULL"}:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def parse_date(value: object) -> datetime.date:
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if isinstance(value, np.datetime64):
        return pd.Timestamp(value).date()
    text = str(value).strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise DataError(f"Could not parse date '{value}'.")


def _parse_qa(value: object) -> Optional[int]:
    number = parse_numeric(value)
    return int(number) if number is not None else None


def to_samples(samples: object) -> List[Sample]:
    """Coerce the supported input shapes to a list of samples, keeping input order.

    Accepted: a mapping of date -> value, a pandas Series indexed by date, a
    DataFrame with ``date``/``value`` (and optional ``qa``) columns, or a
    sequence of ``Sample`` objects, ``(date, value[, qa])`` tuples or row
    mappings.
    """
    if isinstance(samples, pd.DataFrame):
        validate_required_columns(samples.columns)
        qa = samples["qa"] if "qa" in samples.columns else [None] * len(samples)
        return [
            Sample(parse_date(d), parse_numeric(v), _parse_qa(q))
            for d, v, q in zip(samples["date"], samples["value"], qa)
        ]
    if isinstance(samples, pd.Series):
        return [Sample(parse_date(d), parse_numeric(v)) for d, v in samples.items()]
    if isinstance(samples, Mapping):
        return [Sample(parse_date(d), parse_numeric(v)) for d, v in samples.items()]
    if isinstance(samples, Sequence) and not isinstance(samples, str):
        parsed: List[Sample] = []
        for item in samples:
            if isinstance(item, Sample):
                parsed.append(Sample(parse_date(item.date), parse_numeric(item.value), item.qa))
            elif isinstance(item, Mapping):
                validate_required_columns(item.keys())
                parsed.append(
                    Sample(parse_date(item["date"]), parse_numeric(item["value"]), _parse_qa(item.get("qa")))
                )
            elif isinstance(item, Sequence) and len(item) in (2, 3):
                qa = _parse_qa(item[2]) if len(item) == 3 else None
                parsed.append(Sample(parse_date(item[0]), parse_numeric(item[1]), qa))
            else:
                raise DataError(f"Unsupported sample entry: {item!r}")
        return parsed
    raise TypeError("Unsupported samples input type.")


def samples_from_frame(
    frame: pd.DataFrame,
    date_column: str = "date",
    value_column: str = "value",
    qa_column: Optional[str] = "qa",
    pixel_column: Optional[str] = "pixel",
) -> Dict[str, List[Sample]]:
    """Group a tidy table (one row per pixel and date) into per-pixel samples."""
    validate_required_columns(frame.columns, date_column, value_column)
    renamed = frame.rename(columns={date_column: "date", value_column: "value"})
    if qa_column and qa_column in frame.columns and qa_column != "qa":
        renamed = renamed.rename(columns={qa_column: "qa"})
    elif not qa_column or qa_column not in frame.columns:
        renamed = renamed.drop(columns=["qa"], errors="ignore")

    if not pixel_column or pixel_column not in frame.columns:
        return {"1": to_samples(renamed)}

    grouped: Dict[str, List[Sample]] = {}
    for pixel_id, group in renamed.groupby(pixel_column, sort=True):
        grouped[str(pixel_id)] = to_samples(group)
    return grouped


def read_samples_csv(
    path: str,
    date_column: str = "date",
    value_column: str = "value",
    qa_column: Optional[str] = "qa",
    pixel_column: Optional[str] = "pixel",
) -> Dict[str, List[Sample]]:
    frame = pd.read_csv(path)
    return samples_from_frame(frame, date_column, value_column, qa_column, pixel_column)
