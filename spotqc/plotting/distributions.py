"""Per-spot feature distribution and group-mean figure factories."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

from spotqc.core.features import summarize_groups
from spotqc.core.types import TISSUE_ORDER
from spotqc.plotting.styles import DEFAULT_PLOT_STYLE, PlotStyle, condition_palette
from spotqc.plotting.utils import render_na_panel, save_figure

REQUIRED_COLUMNS = ("tissue", "sample", "condition", "value")


def _check_columns(table: pd.DataFrame, required: Sequence[str]) -> None:
    missing = [col for col in required if col not in table.columns]
    if missing:
        raise ValueError(f"Missing required feature columns: {missing}")


def _resolve_conditions(features: pd.DataFrame, conditions: Sequence[str] | None) -> list[str]:
    if conditions is not None:
        return [str(c) for c in conditions]
    return [str(c) for c in pd.unique(features["condition"])]


def sample_order(features: pd.DataFrame, conditions: Sequence[str]) -> list[str]:
    """Samples grouped by condition, then sorted by id within a condition."""
    pairs = features.loc[:, ["sample", "condition"]].drop_duplicates()
    rank = {c: i for i, c in enumerate(conditions)}
    pairs = pairs.assign(_rank=pairs["condition"].map(rank).fillna(len(rank)))
    return pairs.sort_values(["_rank", "sample"])["sample"].astype(str).tolist()


def plot_feature_distribution(
    features: pd.DataFrame,
    out_png: Path,
    *,
    ylabel: str,
    title: str | None = None,
    log_scale: bool = False,
    conditions: Sequence[str] | None = None,
    style: PlotStyle = DEFAULT_PLOT_STYLE,
) -> Path:
    """Violin + box of per-spot values by sample, one panel per tissue flag."""
    _check_columns(features, REQUIRED_COLUMNS)
    conds = _resolve_conditions(features, conditions)
    palette = condition_palette(conds, style=style)
    order = sample_order(features, conds)
    tissue = features["tissue"].astype(str)

    fig, axes = plt.subplots(
        1, len(TISSUE_ORDER), figsize=style.figsize_distribution, sharey=True
    )
    for i, (ax, flag) in enumerate(zip(axes, TISSUE_ORDER)):
        sub = features.loc[tissue == flag]
        panel_title = f"{flag} tissue"
        if sub.empty:
            render_na_panel(ax, panel_title, style=style)
            continue
        sns.violinplot(
            data=sub,
            x="sample",
            y="value",
            hue="condition",
            order=order,
            hue_order=conds,
            palette=palette,
            dodge=False,
            cut=0,
            inner=None,
            density_norm="width",
            log_scale=log_scale,
            alpha=style.violin_alpha,
            ax=ax,
        )
        sns.boxplot(
            data=sub,
            x="sample",
            y="value",
            order=order,
            width=style.box_width,
            showfliers=False,
            color="white",
            linecolor="black",
            log_scale=log_scale,
            ax=ax,
        )
        ax.set_title(panel_title, fontsize=style.title_fontsize)
        ax.set_xlabel("sample")
        ax.set_ylabel(ylabel if i == 0 else "")
        ax.tick_params(axis="x", rotation=style.tick_rotation)
        legend = ax.get_legend()
        if legend is not None and i < len(TISSUE_ORDER) - 1:
            legend.remove()
    if title:
        fig.suptitle(title, fontsize=style.title_fontsize)
    fig.tight_layout()
    return save_figure(fig, out_png, style=style)


def plot_group_means(
    features: pd.DataFrame,
    out_png: Path,
    *,
    ylabel: str,
    title: str | None = None,
    conditions: Sequence[str] | None = None,
    style: PlotStyle = DEFAULT_PLOT_STYLE,
) -> Path:
    """Mean per-spot value per (sample, tissue), positioned by tissue flag."""
    _check_columns(features, REQUIRED_COLUMNS)
    conds = _resolve_conditions(features, conditions)
    palette = condition_palette(conds, style=style)
    means = summarize_groups(features)
    means["tissue"] = means["tissue"].astype(str)

    fig, ax = plt.subplots(figsize=style.figsize_means)
    if means.empty:
        render_na_panel(ax, title or "", style=style)
        return save_figure(fig, out_png, style=style)
    sns.stripplot(
        data=means,
        x="tissue",
        y="mean",
        hue="condition",
        order=list(TISSUE_ORDER),
        hue_order=conds,
        palette=palette,
        dodge=True,
        jitter=False,
        size=style.point_size,
        ax=ax,
    )
    ax.set_xlabel("")
    ax.set_ylabel(ylabel)
    if title:
        ax.set_title(title, fontsize=style.title_fontsize)
    fig.tight_layout()
    return save_figure(fig, out_png, style=style)
