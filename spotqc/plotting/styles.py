"""Shared plotting style settings for deterministic figure outputs."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Sequence

import matplotlib
import matplotlib.pyplot as plt
import seaborn as sns


@dataclass(frozen=True)
class PlotStyle:
    """Centralized plotting defaults used across QC figures."""

    dpi: int = 200
    figsize_distribution: tuple[float, float] = (9.0, 4.5)
    figsize_means: tuple[float, float] = (4.5, 4.5)
    condition_colors: tuple[str, ...] = ("#4C72B0", "#DD8452")
    violin_alpha: float = 0.75
    box_width: float = 0.15
    point_size: float = 8.0
    legend_fontsize: int = 8
    axis_label_fontsize: int = 10
    title_fontsize: int = 11
    tick_fontsize: int = 9
    tick_rotation: float = 45.0


DEFAULT_PLOT_STYLE = PlotStyle()


def apply_plot_style(style: PlotStyle = DEFAULT_PLOT_STYLE) -> None:
    """Apply deterministic matplotlib rcParams for pipeline plots."""
    sns.set_style("ticks")
    plt.rcParams.update(
        {
            "figure.dpi": style.dpi,
            "savefig.dpi": style.dpi,
            "savefig.facecolor": "white",
            "font.family": "DejaVu Sans",
            "axes.titlesize": style.title_fontsize,
            "axes.labelsize": style.axis_label_fontsize,
            "xtick.labelsize": style.tick_fontsize,
            "ytick.labelsize": style.tick_fontsize,
            "legend.fontsize": style.legend_fontsize,
            "axes.grid": False,
            "axes.spines.top": False,
            "axes.spines.right": False,
        }
    )


def condition_palette(
    conditions: Sequence[str], style: PlotStyle = DEFAULT_PLOT_STYLE
) -> dict[str, str]:
    colors = style.condition_colors
    if len(conditions) > len(colors):
        raise ValueError(
            f"Style defines {len(colors)} condition colors but {len(conditions)} conditions were given."
        )
    return {str(c): colors[i] for i, c in enumerate(conditions)}


def plot_style_dict(style: PlotStyle = DEFAULT_PLOT_STYLE) -> dict[str, Any]:
    """Return style + dependency versions for metadata manifests."""
    d = asdict(style)
    d["matplotlib_version"] = str(matplotlib.__version__)
    d["seaborn_version"] = str(sns.__version__)
    return d
