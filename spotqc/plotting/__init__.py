"""Plotting API for spot-level QC figures."""

from spotqc.plotting.distributions import (
    plot_feature_distribution,
    plot_group_means,
    sample_order,
)
from spotqc.plotting.styles import (
    DEFAULT_PLOT_STYLE,
    PlotStyle,
    apply_plot_style,
    condition_palette,
    plot_style_dict,
)
from spotqc.plotting.utils import render_na_panel, save_figure

__all__ = [
    "PlotStyle",
    "DEFAULT_PLOT_STYLE",
    "apply_plot_style",
    "condition_palette",
    "plot_style_dict",
    "save_figure",
    "render_na_panel",
    "sample_order",
    "plot_feature_distribution",
    "plot_group_means",
]
