"""Typed containers and shared constants for spot-level QC."""

from __future__ import annotations

from dataclasses import dataclass

FEATURE_MODES: tuple[str, ...] = ("gene", "umi")
TISSUE_INSIDE = "inside"
TISSUE_OUTSIDE = "outside"
TISSUE_ORDER: tuple[str, ...] = (TISSUE_INSIDE, TISSUE_OUTSIDE)

# Depth is divided by this to get the per-sample count threshold.
DEPTH_DIVISOR = 1_000_000

FEATURE_COLUMNS: tuple[str, ...] = ("spot", "tissue", "sample", "condition", "value")


@dataclass(frozen=True)
class Sample:
    """One tissue section and the protocol it was prepared with."""

    sample_id: str
    condition: str
    depth: int

    @property
    def threshold(self) -> float:
        return self.depth / DEPTH_DIVISOR


@dataclass(frozen=True)
class FilterSummary:
    """Spot and gene counts before and after thresholding one sample.

    - `n_spots_inside`: surviving spots that are under tissue.
    """

    sample_id: str
    threshold: float
    n_spots_raw: int
    n_genes_raw: int
    n_spots_kept: int
    n_genes_kept: int
    n_spots_inside: int
