"""End-to-end run: load samples, extract per-spot features, write figures and tables."""

from __future__ import annotations

import importlib.metadata as importlib_metadata
import logging
import platform
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import anndata as ad
import matplotlib

# Use a non-interactive backend for reproducible headless runs.
matplotlib.use("Agg")
import numpy as np
import pandas as pd

from spotqc._version import __version__
from spotqc.config import AnalysisConfig
from spotqc.core.features import (
    extract_features,
    summarize_filtering,
    summarize_groups,
)
from spotqc.core.registry import SampleRegistry
from spotqc.core.spots import build_normalizer_table, normalizer_for
from spotqc.pipeline.io import (
    load_counts,
    load_tissue_mask,
    setup_logger,
    write_json,
    write_table,
)
from spotqc.plotting.distributions import plot_feature_distribution, plot_group_means
from spotqc.plotting.styles import apply_plot_style, plot_style_dict

LOGGER_NAME = "spotqc"

FIGURE_NAMES = {
    "gene_distribution": "genes_per_spot_distribution.png",
    "umi_distribution": "umis_per_spot_distribution.png",
    "gene_means": "mean_genes_per_spot.png",
    "umi_means": "mean_umis_per_spot.png",
}
VALUE_LABELS = {"gene": "genes per spot", "umi": "UMIs per spot"}


def _now_utc_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def load_samples(
    config: AnalysisConfig,
    registry: SampleRegistry,
    logger: logging.Logger,
) -> tuple[dict[str, ad.AnnData], dict[str, frozenset[str]]]:
    """Load count matrices and tissue masks for every configured sample."""
    normalizers = build_normalizer_table(config.rounded_spot_samples)
    counts: dict[str, ad.AnnData] = {}
    masks: dict[str, frozenset[str]] = {}
    for sample_id in config.sample_ids(registry):
        registry.get(sample_id)
        counts[sample_id] = load_counts(config.counts_path(sample_id), sample_id=sample_id)
        masks[sample_id] = load_tissue_mask(
            config.mask_path(sample_id), normalizer_for(sample_id, normalizers)
        )
        logger.info(
            "Loaded %s: %d spots x %d genes, %d under-tissue spots",
            sample_id,
            counts[sample_id].n_obs,
            counts[sample_id].n_vars,
            len(masks[sample_id]),
        )
    return counts, masks


def run_analysis(config: AnalysisConfig) -> dict[str, Any]:
    """Run the full spot QC pipeline and return a summary of written outputs."""
    root = Path(config.outdir)
    fig_dir = root / "figures"
    table_dir = root / "tables"
    logger = setup_logger(root / "logs" / "run.log", LOGGER_NAME)
    registry = config.build_registry()
    conditions = registry.conditions
    logger.info(
        "spotqc %s: %d samples from %s",
        __version__,
        len(config.sample_ids(registry)),
        config.data_dir,
    )

    counts, masks = load_samples(config, registry, logger)

    filtering = []
    for sample_id, adata in counts.items():
        summary = summarize_filtering(adata, masks[sample_id], sample_id, registry=registry)
        filtering.append(asdict(summary))
        logger.info(
            "%s: threshold=%.3f kept %d/%d spots (%d inside), %d/%d genes",
            sample_id,
            summary.threshold,
            summary.n_spots_kept,
            summary.n_spots_raw,
            summary.n_spots_inside,
            summary.n_genes_kept,
            summary.n_genes_raw,
        )
    filtering_table = pd.DataFrame(filtering)

    apply_plot_style()
    features: dict[str, pd.DataFrame] = {}
    tables: dict[str, str] = {}
    for mode in ("gene", "umi"):
        features[mode] = extract_features(counts, masks, mode, registry=registry)
        path = write_table(table_dir / f"features_{mode}.csv", features[mode])
        tables[f"features_{mode}"] = path.as_posix()
        logger.info("Extracted %d %s-mode feature records", len(features[mode]), mode)

    means = pd.concat(
        [summarize_groups(features[mode]).assign(mode=mode) for mode in ("gene", "umi")],
        ignore_index=True,
    )
    tables["sample_filtering"] = write_table(
        table_dir / "sample_filtering.csv", filtering_table
    ).as_posix()
    tables["group_means"] = write_table(table_dir / "group_means.csv", means).as_posix()

    figures = {
        "gene_distribution": plot_feature_distribution(
            features["gene"],
            fig_dir / FIGURE_NAMES["gene_distribution"],
            ylabel=VALUE_LABELS["gene"],
            title="Genes per spot",
            conditions=conditions,
        ),
        "umi_distribution": plot_feature_distribution(
            features["umi"],
            fig_dir / FIGURE_NAMES["umi_distribution"],
            ylabel=VALUE_LABELS["umi"],
            title="UMIs per spot",
            log_scale=config.log_scale_umi,
            conditions=conditions,
        ),
        "gene_means": plot_group_means(
            features["gene"],
            fig_dir / FIGURE_NAMES["gene_means"],
            ylabel=f"mean {VALUE_LABELS['gene']}",
            title="Mean genes per spot",
            conditions=conditions,
        ),
        "umi_means": plot_group_means(
            features["umi"],
            fig_dir / FIGURE_NAMES["umi_means"],
            ylabel=f"mean {VALUE_LABELS['umi']}",
            title="Mean UMIs per spot",
            conditions=conditions,
        ),
    }
    figures = {k: v.as_posix() for k, v in figures.items()}
    for name, path in figures.items():
        logger.info("Wrote %s figure: %s", name, path)

    metadata = {
        "timestamp_utc": _now_utc_iso(),
        "spotqc_version": __version__,
        "python_version": platform.python_version(),
        "versions": {
            "anndata": importlib_metadata.version("anndata"),
            "numpy": np.__version__,
            "pandas": pd.__version__,
            "scipy": importlib_metadata.version("scipy"),
        },
        "plot_style": plot_style_dict(),
        "config": config.to_dict(),
        "samples": [asdict(registry.get(s)) for s in counts],
        "n_records": {mode: int(len(df)) for mode, df in features.items()},
        "figures": figures,
        "tables": tables,
    }
    write_json(root / "metadata.json", metadata)
    logger.info("spotqc run complete. Results in %s", root.as_posix())
    return {
        "outdir": root.as_posix(),
        "figures": figures,
        "tables": tables,
        "n_records": metadata["n_records"],
    }
