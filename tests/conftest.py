from __future__ import annotations

import gzip
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from spotqc.core.registry import DEFAULT_REGISTRY


def _write_counts(path: Path, counts: pd.DataFrame) -> Path:
    counts.to_csv(path, sep="\t", compression="gzip" if path.suffix == ".gz" else None)
    return path


def _write_mask(path: Path, spot_ids: list[str]) -> Path:
    opener = gzip.open if path.suffix == ".gz" else open
    with opener(path, "wt", encoding="utf-8") as fh:
        fh.write("\t".join(spot_ids) + "\n")
    return path


def _synthetic_counts(seed: int, n_genes: int = 30, grid: int = 6) -> pd.DataFrame:
    rng = np.random.default_rng(seed)
    spots = [f"{x}x{y}" for x in range(1, grid + 1) for y in range(1, grid + 1)]
    genes = [f"ENSG{i:05d}" for i in range(n_genes)]
    values = rng.poisson(1.5, size=(n_genes, len(spots)))
    # empty spots, always thresholded away
    values[:, :3] = 0
    return pd.DataFrame(values, index=genes, columns=spots)


@pytest.fixture
def write_counts():
    """Write a gene-by-spot table the way the ST pipeline exports it."""
    return _write_counts


@pytest.fixture
def write_mask():
    return _write_mask


@pytest.fixture
def toy_counts() -> pd.DataFrame:
    """3 genes x 4 spots with spot sums 1, 5, 3, 0."""
    return pd.DataFrame(
        {
            "1x1": [1, 0, 0],
            "2x2": [2, 3, 0],
            "3x3": [2, 0, 1],
            "4x4": [0, 0, 0],
        },
        index=["g1", "g2", "g3"],
    )


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Six samples of synthetic counts and masks using the default file patterns."""
    root = tmp_path / "data"
    root.mkdir()
    for i, sample_id in enumerate(DEFAULT_REGISTRY.sample_ids):
        counts = _synthetic_counts(seed=i)
        _write_counts(root / f"{sample_id}_downsamp_stdata.tsv.gz", counts)
        inside = list(counts.columns[: len(counts.columns) // 2])
        if sample_id == "S4":
            coords = [s.split("x") for s in inside]
            raw = [f"{int(x) + 0.3:.2f}_{int(y) - 0.2:.2f}" for x, y in coords]
        else:
            raw = [s.replace("x", "_") for s in inside]
        _write_mask(root / f"{sample_id}_stdata_under_tissue_IDs.txt.gz", raw)
    return root
