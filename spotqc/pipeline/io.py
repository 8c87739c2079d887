"""Pipeline I/O, logging, and loader helpers."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import anndata as ad
import numpy as np
import pandas as pd
import scipy.sparse as sp

from spotqc.core.spots import SpotNormalizer, normalize_spot_id, normalize_spot_ids


def ensure_dir(path: str | Path) -> None:
    p = Path(path)
    p.mkdir(parents=True, exist_ok=True)


def write_json(path: str | Path, payload: dict[str, Any]) -> None:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    with out.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, sort_keys=True, default=str)


def write_table(path: str | Path, table: pd.DataFrame) -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    table.to_csv(out, index=False)
    return out


def setup_logger(log_path: Path, logger_name: str) -> logging.Logger:
    ensure_dir(log_path.parent)
    logger = logging.getLogger(logger_name)
    logger.setLevel(logging.INFO)
    logger.handlers.clear()
    formatter = logging.Formatter("%(asctime)s | %(levelname)s | %(message)s")
    fh = logging.FileHandler(log_path, mode="w", encoding="utf-8")
    fh.setFormatter(formatter)
    logger.addHandler(fh)
    sh = logging.StreamHandler()
    sh.setFormatter(formatter)
    logger.addHandler(sh)
    return logger


def _require_file(path: str | Path, what: str) -> Path:
    p = Path(path)
    if not p.is_file():
        raise FileNotFoundError(f"{what} file '{p}' not found.")
    return p


def load_counts(path: str | Path, sample_id: str | None = None) -> ad.AnnData:
    """Read a gene-by-spot TSV and return it as a spot-by-gene AnnData.

    The first column holds gene identifiers and the header holds spot ids.
    Gzip compression is inferred from the file suffix.
    """
    p = _require_file(path, "Count")
    # read_csv renames repeated column labels, so check the raw header first
    header = pd.read_csv(p, sep="\t", header=None, nrows=1, dtype=str, keep_default_na=False)
    spots = header.iloc[0, 1:]
    if spots.duplicated().any():
        dup = spots[spots.duplicated()].unique().tolist()[:5]
        raise ValueError(f"Duplicate spot identifiers in '{p}': {dup}")

    # gene ids such as "NA" or "null" are labels, not missing values
    table = pd.read_csv(p, sep="\t", index_col=0, keep_default_na=False, na_values=[])
    if table.index.has_duplicates:
        dup = table.index[table.index.duplicated()].unique().tolist()[:5]
        raise ValueError(f"Duplicate gene identifiers in '{p}': {dup}")
    values = table.to_numpy()
    if not np.issubdtype(values.dtype, np.integer):
        raise ValueError(f"Non-integer counts in '{p}'.")
    if (values < 0).any():
        raise ValueError(f"Negative counts in '{p}'.")

    adata = ad.AnnData(
        X=sp.csr_matrix(values.T.astype(np.int64)),
        obs=pd.DataFrame(index=table.columns.astype(str)),
        var=pd.DataFrame(index=table.index.astype(str)),
    )
    if sample_id is not None:
        adata.uns["sample_id"] = str(sample_id)
    return adata


def load_tissue_mask(
    path: str | Path, normalizer: SpotNormalizer = normalize_spot_id
) -> frozenset[str]:
    """Read the first line of an under-tissue file as normalized spot ids."""
    p = _require_file(path, "Tissue mask")
    try:
        first = pd.read_csv(
            p, sep="\t", header=None, nrows=1, dtype=str, keep_default_na=False
        )
    except pd.errors.EmptyDataError as exc:
        raise ValueError(f"Tissue mask file '{p}' is empty.") from exc
    return normalize_spot_ids(first.iloc[0].tolist(), normalizer)
