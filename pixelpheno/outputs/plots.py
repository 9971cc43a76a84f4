"""Optional plotting helpers."""

from typing import Dict, Optional

import numpy as np
import pandas as pd

from ..grid.apply import GridResult


def _pyplot():
    try:
        import matplotlib.pyplot as plt
    except ImportError as exc:
        raise ImportError("matplotlib is required for plotting.") from exc
    return plt


def _finish(fig, plt, path: Optional[str]) -> None:
    fig.tight_layout()
    if path:
        fig.savefig(path, dpi=150)
        plt.close(fig)
    else:
        plt.show()


def plot_phenology_series(stages: Dict[str, object], path: Optional[str] = None) -> None:
    """Observed samples, the smoothed curve and transition dates from ``phenology_stages``."""
    plt = _pyplot()
    daily: pd.Series = stages["daily"]  # type: ignore[assignment]
    dense = stages.get("dense")

    fig, ax = plt.subplots(figsize=(9.0, 4.0))
    observed = daily.dropna()
    ax.scatter(observed.index, observed.values, s=8, color="#999999", label="observed")
    if dense is not None:
        ax.plot(dense.index, dense.values, color="#4C72B0", label="smoothed")
    for record in stages.get("records", []):
        for name, result in record.transitions.items():
            if result.date is None:
                continue
            ax.axvline(pd.Timestamp(result.date), color="#C44E52", linestyle="--", linewidth=0.8)
            ax.annotate(name, (pd.Timestamp(result.date), ax.get_ylim()[1]), rotation=90,
                        va="top", fontsize=7)
    ax.set_xlabel("Date")
    ax.set_ylabel("Vegetation index")
    ax.legend(loc="upper left")
    _finish(fig, plt, path)


def plot_doy_raster(result: GridResult, name: str, year: Optional[int] = None,
                    path: Optional[str] = None) -> None:
    plt = _pyplot()
    layer = result.layer(name, year)
    fig, ax = plt.subplots(figsize=(6.0, 5.0))
    image = ax.imshow(np.ma.masked_invalid(layer), cmap="viridis")
    fig.colorbar(image, ax=ax, label="Day of year")
    title_year = year if year is not None else result.years[0]
    ax.set_title(f"{name} ({title_year})")
    ax.set_xticks([])
    ax.set_yticks([])
    _finish(fig, plt, path)
