import matplotlib

matplotlib.use("Agg")

import json
from pathlib import Path

import pandas as pd

from spotqc.config import AnalysisConfig
from spotqc.pipeline.run import FIGURE_NAMES, LOGGER_NAME, run_analysis


def _close_logger():
    import logging

    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def test_run_analysis_writes_all_outputs(tmp_path: Path, data_dir: Path):
    outdir = tmp_path / "results"
    try:
        summary = run_analysis(AnalysisConfig(data_dir=str(data_dir), outdir=str(outdir)))
    finally:
        _close_logger()

    for name in FIGURE_NAMES.values():
        assert (outdir / "figures" / name).exists()
    assert set(summary["figures"]) == set(FIGURE_NAMES)

    genes = pd.read_csv(outdir / "tables" / "features_gene.csv")
    umis = pd.read_csv(outdir / "tables" / "features_umi.csv")
    assert list(genes.columns) == ["spot", "tissue", "sample", "condition", "value"]
    assert set(genes["sample"]) == {"S1", "S2", "S3", "S4", "S5", "S6"}
    assert len(genes) == len(umis) == summary["n_records"]["gene"]
    assert (umis["value"] >= genes["value"]).all()

    filtering = pd.read_csv(outdir / "tables" / "sample_filtering.csv")
    assert len(filtering) == 6
    assert (filtering["n_spots_kept"] == 33).all()

    means = pd.read_csv(outdir / "tables" / "group_means.csv")
    assert set(means["mode"]) == {"gene", "umi"}
    assert len(means) == 6 * 2 * 2

    metadata = json.loads((outdir / "metadata.json").read_text(encoding="utf-8"))
    assert metadata["config"]["data_dir"] == str(data_dir)
    assert len(metadata["samples"]) == 6
    assert "Results in" in (outdir / "logs" / "run.log").read_text(encoding="utf-8")


def test_run_analysis_on_sample_subset(tmp_path: Path, data_dir: Path):
    outdir = tmp_path / "subset"
    try:
        summary = run_analysis(
            AnalysisConfig(data_dir=str(data_dir), outdir=str(outdir), samples=("S1", "S4"))
        )
    finally:
        _close_logger()
    genes = pd.read_csv(summary["tables"]["features_gene"])
    assert set(genes["sample"]) == {"S1", "S4"}
    assert set(genes["condition"]) == {"standard", "modified"}
