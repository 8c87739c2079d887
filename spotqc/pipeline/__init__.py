"""Pipeline loaders and end-to-end run entrypoints."""

from spotqc.pipeline.io import load_counts, load_tissue_mask


def run_analysis(*args, **kwargs):
    from spotqc.pipeline.run import run_analysis as _run_analysis

    return _run_analysis(*args, **kwargs)


__all__ = ["load_counts", "load_tissue_mask", "run_analysis"]
