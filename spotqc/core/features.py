"""Per-spot feature extraction: thresholding, long-form reshape, aggregation."""

from __future__ import annotations

from typing import Mapping

import anndata as ad
import numpy as np
import pandas as pd
import scipy.sparse as sp

from spotqc.core.registry import DEFAULT_REGISTRY, SampleRegistry
from spotqc.core.types import (
    FEATURE_COLUMNS,
    FEATURE_MODES,
    TISSUE_INSIDE,
    TISSUE_ORDER,
    TISSUE_OUTSIDE,
    FilterSummary,
)


def check_feature_mode(mode: str) -> str:
    if mode not in FEATURE_MODES:
        raise ValueError(
            f"Unsupported feature mode '{mode}'. Expected one of: {', '.join(FEATURE_MODES)}."
        )
    return mode


def _as_csr(X) -> sp.csr_matrix:
    return X.tocsr() if sp.issparse(X) else sp.csr_matrix(np.asarray(X))


def _totals(X, axis: int) -> np.ndarray:
    return np.asarray(_as_csr(X).sum(axis=axis)).ravel()


def filter_counts(counts: ad.AnnData, threshold: float) -> ad.AnnData:
    """Drop spots, then genes, whose total count is <= `threshold`.

    Gene totals are taken over the surviving spots only. Returns a copy.
    """
    keep_spots = _totals(counts.X, axis=1) > threshold
    spots = counts[keep_spots]
    keep_genes = _totals(spots.X, axis=0) > threshold
    return spots[:, keep_genes].copy()


def to_long(counts: ad.AnnData) -> pd.DataFrame:
    """One row per (spot, gene) pair with a nonzero count."""
    coo = _as_csr(counts.X).tocoo()
    nz = coo.data != 0
    return pd.DataFrame(
        {
            "spot": np.asarray(counts.obs_names)[coo.row[nz]],
            "gene": np.asarray(counts.var_names)[coo.col[nz]],
            "count": coo.data[nz].astype(np.int64),
        }
    )


def label_tissue(spots: pd.Series, mask: frozenset[str] | set[str]) -> pd.Categorical:
    labels = np.where(spots.isin(mask), TISSUE_INSIDE, TISSUE_OUTSIDE)
    return pd.Categorical(labels, categories=list(TISSUE_ORDER), ordered=True)


def _empty_features() -> pd.DataFrame:
    df = pd.DataFrame({col: pd.Series(dtype=object) for col in FEATURE_COLUMNS})
    df["tissue"] = pd.Categorical([], categories=list(TISSUE_ORDER), ordered=True)
    df["value"] = df["value"].astype(np.int64)
    return df


def aggregate_spots(long_df: pd.DataFrame, mode: str) -> pd.DataFrame:
    """Collapse long-form counts to one value per (spot, tissue)."""
    check_feature_mode(mode)
    grouped = long_df.groupby(["spot", "tissue"], observed=True, sort=True)
    if mode == "gene":
        values = grouped["gene"].nunique()
    else:
        values = grouped["count"].sum()
    return values.astype(np.int64).rename("value").reset_index()


def extract_sample_features(
    counts: ad.AnnData,
    mask: frozenset[str] | set[str],
    sample_id: str,
    mode: str,
    registry: SampleRegistry = DEFAULT_REGISTRY,
) -> pd.DataFrame:
    """Feature records for one sample in `mode` ('gene' or 'umi')."""
    check_feature_mode(mode)
    sample = registry.get(sample_id)
    kept = filter_counts(counts, sample.threshold)
    long_df = to_long(kept)
    if long_df.empty:
        return _empty_features()
    long_df["tissue"] = label_tissue(long_df["spot"], mask)
    out = aggregate_spots(long_df, mode)
    out["sample"] = sample.sample_id
    out["condition"] = sample.condition
    return out.loc[:, list(FEATURE_COLUMNS)]


def extract_features(
    counts_by_sample: Mapping[str, ad.AnnData],
    masks: Mapping[str, frozenset[str]],
    mode: str,
    registry: SampleRegistry = DEFAULT_REGISTRY,
) -> pd.DataFrame:
    """Concatenate per-sample feature records for every sample in `counts_by_sample`."""
    check_feature_mode(mode)
    frames = []
    for sample_id, counts in counts_by_sample.items():
        if sample_id not in masks:
            raise KeyError(f"No tissue mask loaded for sample '{sample_id}'.")
        frames.append(
            extract_sample_features(counts, masks[sample_id], sample_id, mode, registry=registry)
        )
    if not frames:
        return _empty_features()
    out = pd.concat(frames, ignore_index=True)
    out["tissue"] = pd.Categorical(out["tissue"], categories=list(TISSUE_ORDER), ordered=True)
    return out


def summarize_filtering(
    counts: ad.AnnData,
    mask: frozenset[str] | set[str],
    sample_id: str,
    registry: SampleRegistry = DEFAULT_REGISTRY,
) -> FilterSummary:
    sample = registry.get(sample_id)
    kept = filter_counts(counts, sample.threshold)
    n_inside = int(pd.Index(kept.obs_names).isin(list(mask)).sum())
    return FilterSummary(
        sample_id=sample.sample_id,
        threshold=float(sample.threshold),
        n_spots_raw=int(counts.n_obs),
        n_genes_raw=int(counts.n_vars),
        n_spots_kept=int(kept.n_obs),
        n_genes_kept=int(kept.n_vars),
        n_spots_inside=n_inside,
    )


def summarize_groups(features: pd.DataFrame) -> pd.DataFrame:
    """Spot count, mean and median value per (sample, condition, tissue)."""
    return (
        features.groupby(["sample", "condition", "tissue"], observed=True, sort=True)["value"]
        .agg(n_spots="size", mean="mean", median="median")
        .reset_index()
    )
