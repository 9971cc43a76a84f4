"""Command-line interface for pixelpheno."""

import argparse
import json
import logging
import sys
from typing import Dict, List, Optional, Sequence, Tuple

import yaml

from .config import Config, config_to_dict, load_config
from .data.schema import read_samples_csv
from .exceptions import ConfigurationError
from .outputs.export import export_records_csv, export_records_json
from .outputs.tables import sites_table
from .phenology import PhenologyRecord, Transition
from .phenology.pipeline import phenology_stages

logger = logging.getLogger(__name__)


def _parse_threshold(value: str) -> Transition:
    parts = value.split(":")
    if len(parts) not in (2, 3):
        raise ConfigurationError("threshold format must be name:value[:direction]")
    direction = parts[2] if len(parts) == 3 else "forward"
    return Transition(parts[0], float(parts[1]), direction)


def _parse_range(value: str) -> Tuple[float, float]:
    items = [float(item) for item in value.split(",")]
    if len(items) != 2:
        raise ConfigurationError("valid-range must be two comma-separated values.")
    return items[0], items[1]


def _parse_int_list(value: str) -> List[int]:
    return [int(item) for item in value.split(",") if item.strip()]


def build_config(args: argparse.Namespace) -> Config:
    config = load_config(args.config) if args.config else Config()
    overrides = {
        "window_length": args.window_length,
        "polyorder": args.polyorder,
        "short_series_policy": args.short_series_policy,
        "edge_policy": args.edge_policy,
        "duplicate_policy": args.duplicate_policy,
        "min_run": args.min_run,
        "scale_factor": args.scale_factor,
        "offset": args.offset,
        "fill_value": args.fill_value,
        "output_unit": args.output_unit,
        "log_level": args.log_level,
    }
    for key, value in overrides.items():
        if value is not None:
            setattr(config, key, value)
    if args.threshold:
        config.transitions = [_parse_threshold(item) for item in args.threshold]
    if args.strict:
        config.inclusive = False
    if args.allow_initial_crossing:
        config.from_below = False
    if args.valid_range:
        config.valid_range = _parse_range(args.valid_range)
    if args.qa_good:
        config.qa_good_values = _parse_int_list(args.qa_good)
    config.validate()
    return config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Extract phenological transition dates from vegetation index series.")
    parser.add_argument("--samples", help="Path to tidy samples CSV (date, value[, qa][, pixel]).")
    parser.add_argument("--config", help="YAML configuration file.")
    parser.add_argument("--output", help="Output file path. Prints JSON to stdout when omitted.")
    parser.add_argument("--format", choices=["json", "csv"], default="json")
    parser.add_argument("--date-column", default="date")
    parser.add_argument("--value-column", default="value")
    parser.add_argument("--qa-column", default="qa")
    parser.add_argument("--pixel-column", default="pixel")
    parser.add_argument("--window-length", type=int, help="Savitzky-Golay window in samples (odd).")
    parser.add_argument("--polyorder", type=int, help="Savitzky-Golay polynomial order.")
    parser.add_argument("--short-series-policy", choices=["reject", "shrink"])
    parser.add_argument("--edge-policy", choices=["hold", "none"])
    parser.add_argument("--duplicate-policy", choices=["first", "last", "mean"])
    parser.add_argument(
        "--threshold",
        action="append",
        default=[],
        help="Transition name:threshold[:forward|backward] (repeatable, replaces the defaults).",
    )
    parser.add_argument("--strict", action="store_true", help="Require values strictly above thresholds.")
    parser.add_argument(
        "--allow-initial-crossing",
        action="store_true",
        help="Let a forward transition fall on the first day of a season already above its threshold.",
    )
    parser.add_argument("--min-run", type=int, help="Consecutive days a crossing must persist.")
    parser.add_argument("--scale-factor", type=float, help="Multiply raw values, e.g. 0.0001 for MODIS NDVI.")
    parser.add_argument("--offset", type=float)
    parser.add_argument("--fill-value", type=float, help="Raw value marking missing data.")
    parser.add_argument("--valid-range", help="low,high range of valid scaled values.")
    parser.add_argument("--qa-good", help="Comma-separated QA values to keep.")
    parser.add_argument("--output-unit", choices=["doy", "date"])
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    parser.add_argument("--print-config", action="store_true", help="Print the effective configuration as YAML and exit.")
    return parser


def run(args: argparse.Namespace, config: Config) -> Dict[str, List[PhenologyRecord]]:
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper()),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    samples_by_pixel = read_samples_csv(
        args.samples,
        date_column=args.date_column,
        value_column=args.value_column,
        qa_column=args.qa_column,
        pixel_column=args.pixel_column,
    )
    records: Dict[str, List[PhenologyRecord]] = {}
    for pixel_id, samples in samples_by_pixel.items():
        stages = phenology_stages(samples, config)
        if stages["flags"]:
            logger.warning("Pixel %s flagged: %s", pixel_id, ", ".join(stages["flags"]))
        records[pixel_id] = stages["records"]
    return records


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = build_config(args)
    except (ConfigurationError, ValueError) as exc:
        parser.error(str(exc))
    if args.print_config:
        yaml.safe_dump(config_to_dict(config), sys.stdout, sort_keys=False)
        return

    if not args.samples:
        parser.error("--samples is required unless --print-config is used.")

    records = run(args, config)
    output_unit = config.output_unit

    if not args.output:
        json.dump(sites_table(records, output_unit=output_unit), sys.stdout, indent=2)
        sys.stdout.write("\n")
    elif args.format == "csv":
        export_records_csv(records, args.output, output_unit=output_unit)
    else:
        export_records_json(records, args.output, output_unit=output_unit)


if __name__ == "__main__":
    main()
