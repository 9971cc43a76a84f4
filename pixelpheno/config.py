"""Configuration defaults for pixelpheno."""

from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

import yaml

from .exceptions import ConfigurationError
from .phenology import DIRECTIONS, Transition

DEFAULT_TRANSITIONS = [
    Transition("start", 0.25, "forward"),
    Transition("maximum", 0.85, "forward"),
    Transition("senescence", 0.85, "backward"),
    Transition("end", 0.25, "backward"),
]

LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def default_transitions() -> List[Transition]:
    return [Transition(t.name, t.threshold, t.direction) for t in DEFAULT_TRANSITIONS]


@dataclass
class Config:
    # Savitzky-Golay smoothing, window counted in valid samples
    window_length: int = 7
    polyorder: int = 2
    short_series_policy: str = "reject"
    edge_policy: str = "hold"
    duplicate_policy: str = "first"
    # Threshold extraction
    transitions: List[Transition] = field(default_factory=default_transitions)
    inclusive: bool = True
    min_run: int = 1
    from_below: bool = True
    degenerate_tol: float = 1e-9
    # Input preparation (MODIS style integer products)
    scale_factor: float = 1.0
    offset: float = 0.0
    fill_value: Optional[float] = None
    valid_range: Optional[Tuple[float, float]] = None
    qa_good_values: Optional[List[int]] = None
    # Output and execution
    output_unit: str = "doy"
    n_jobs: int = 1
    log_level: str = "WARNING"

    def validate(self) -> None:
        if self.window_length < 1 or self.window_length % 2 == 0:
            raise ConfigurationError("window_length must be a positive odd integer.")
        if self.polyorder < 0:
            raise ConfigurationError("polyorder must be non-negative.")
        if self.window_length <= self.polyorder:
            raise ConfigurationError("window_length must be greater than polyorder.")
        if self.short_series_policy not in {"reject", "shrink"}:
            raise ConfigurationError("short_series_policy must be 'reject' or 'shrink'.")
        if self.edge_policy not in {"hold", "none"}:
            raise ConfigurationError("edge_policy must be 'hold' or 'none'.")
        if self.duplicate_policy not in {"first", "last", "mean"}:
            raise ConfigurationError("duplicate_policy must be one of: first, last, mean.")
        if not self.transitions:
            raise ConfigurationError("at least one transition is required.")
        names = [t.name for t in self.transitions]
        if len(set(names)) != len(names):
            raise ConfigurationError("transition names must be unique.")
        for transition in self.transitions:
            if transition.direction not in DIRECTIONS:
                raise ConfigurationError(
                    f"transition '{transition.name}' direction must be 'forward' or 'backward'."
                )
            if not 0.0 <= transition.threshold <= 1.0:
                raise ConfigurationError(
                    f"transition '{transition.name}' threshold must be between 0 and 1."
                )
        if self.min_run < 1:
            raise ConfigurationError("min_run must be at least 1.")
        if self.degenerate_tol < 0:
            raise ConfigurationError("degenerate_tol must be non-negative.")
        if self.scale_factor == 0:
            raise ConfigurationError("scale_factor must be non-zero.")
        if self.valid_range is not None:
            if len(self.valid_range) != 2 or self.valid_range[0] > self.valid_range[1]:
                raise ConfigurationError("valid_range must be (low, high) with low <= high.")
        if self.output_unit not in {"doy", "date"}:
            raise ConfigurationError("output_unit must be 'doy' or 'date'.")
        if self.n_jobs < 1:
            raise ConfigurationError("n_jobs must be at least 1.")
        if self.log_level.upper() not in LOG_LEVELS:
            raise ConfigurationError(f"log_level must be one of: {sorted(LOG_LEVELS)}.")

    def transition_names(self) -> List[str]:
        return [t.name for t in self.transitions]


def default_config() -> Config:
    return Config()


def parse_transitions(raw: object) -> List[Transition]:
    """Build transitions from a YAML list of mappings or a name -> [threshold, direction] mapping."""
    if isinstance(raw, Mapping):
        items = []
        for name, entry in raw.items():
            if isinstance(entry, Mapping):
                items.append({"name": name, **entry})
            elif isinstance(entry, Sequence) and len(entry) == 2:
                items.append({"name": name, "threshold": entry[0], "direction": entry[1]})
            else:
                raise ConfigurationError(f"transition '{name}' must be [threshold, direction].")
        raw = items
    if not isinstance(raw, Sequence) or isinstance(raw, str):
        raise ConfigurationError("transitions must be a list or mapping.")
    transitions = []
    for item in raw:
        if isinstance(item, Transition):
            transitions.append(item)
            continue
        if not isinstance(item, Mapping) or "name" not in item or "threshold" not in item:
            raise ConfigurationError("each transition needs 'name' and 'threshold'.")
        transitions.append(
            Transition(
                name=str(item["name"]),
                threshold=float(item["threshold"]),
                direction=str(item.get("direction", "forward")),
            )
        )
    return transitions


def config_from_dict(values: Mapping[str, object]) -> Config:
    known = {f.name for f in fields(Config)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ConfigurationError(f"Unknown configuration keys: {unknown}")
    kwargs: Dict[str, object] = dict(values)
    if "transitions" in kwargs:
        kwargs["transitions"] = parse_transitions(kwargs["transitions"])
    if kwargs.get("valid_range") is not None:
        kwargs["valid_range"] = tuple(float(v) for v in kwargs["valid_range"])  # type: ignore[union-attr]
    config = Config(**kwargs)  # type: ignore[arg-type]
    config.validate()
    return config


def load_config(path: Union[str, Path]) -> Config:
    with open(path, "r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}
    if not isinstance(raw, Mapping):
        raise ConfigurationError(f"Config file {path} must contain a mapping.")
    return config_from_dict(raw)


def config_to_dict(config: Config) -> Dict[str, object]:
    data = asdict(config)
    if data.get("valid_range") is not None:
        data["valid_range"] = list(data["valid_range"])
    return data
