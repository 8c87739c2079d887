"""Core registry, spot-id and feature extraction subpackage."""

from spotqc.core.features import (
    extract_features,
    extract_sample_features,
    filter_counts,
    summarize_filtering,
    summarize_groups,
)
from spotqc.core.registry import DEFAULT_REGISTRY, SampleRegistry
from spotqc.core.spots import normalize_rounded_spot_id, normalize_spot_id, normalizer_for
from spotqc.core.types import FEATURE_MODES, TISSUE_ORDER, FilterSummary, Sample

__all__ = [
    "Sample",
    "FilterSummary",
    "FEATURE_MODES",
    "TISSUE_ORDER",
    "SampleRegistry",
    "DEFAULT_REGISTRY",
    "normalize_spot_id",
    "normalize_rounded_spot_id",
    "normalizer_for",
    "filter_counts",
    "extract_sample_features",
    "extract_features",
    "summarize_filtering",
    "summarize_groups",
]
