"""spotqc public API."""

from spotqc._version import __version__
from spotqc.config import AnalysisConfig, load_json_config
from spotqc.core.features import extract_features, extract_sample_features
from spotqc.core.registry import DEFAULT_REGISTRY, SampleRegistry


def run_analysis(*args, **kwargs):
    """Lazy wrapper to avoid selecting the matplotlib backend at import time."""
    from spotqc.pipeline.run import run_analysis as _run_analysis

    return _run_analysis(*args, **kwargs)


__all__ = [
    "__version__",
    "AnalysisConfig",
    "load_json_config",
    "SampleRegistry",
    "DEFAULT_REGISTRY",
    "extract_features",
    "extract_sample_features",
    "run_analysis",
]
