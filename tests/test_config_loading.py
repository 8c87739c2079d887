from __future__ import annotations

import json
from pathlib import Path

import pytest

from spotqc.config import AnalysisConfig, load_json_config
from spotqc.core.registry import DEFAULT_REGISTRY


def test_load_project_config():
    root = Path(__file__).resolve().parents[1]
    cfg = load_json_config(root / "configs" / "spotqc.json")
    assert "data_dir" in cfg
    assert "outdir" in cfg
    config = AnalysisConfig.from_dict(cfg)
    assert config.sample_ids() == DEFAULT_REGISTRY.sample_ids
    assert config.log_scale_umi is True


def test_missing_config_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError, match="Config file not found"):
        load_json_config(tmp_path / "absent.json")


def test_invalid_json_reports_line_and_column(tmp_path: Path):
    bad = tmp_path / "bad.json"
    bad.write_text('{"a": 1,}\n', encoding="utf-8")
    with pytest.raises(ValueError, match=r"line \d+, column \d+"):
        load_json_config(bad)


def test_non_object_json_config_rejected(tmp_path: Path):
    bad = tmp_path / "list.json"
    bad.write_text(json.dumps([1, 2, 3]), encoding="utf-8")
    with pytest.raises(ValueError, match="expected JSON object"):
        load_json_config(bad)


def test_non_json_extension_rejected(tmp_path: Path):
    bad = tmp_path / "cfg.yaml"
    bad.write_text("{}", encoding="utf-8")
    with pytest.raises(ValueError, match="Use a .json config file"):
        load_json_config(bad)


def test_unknown_keys_rejected():
    with pytest.raises(ValueError, match="Unknown config keys"):
        AnalysisConfig.from_dict({"data_dir": "x", "feature_mode": "gene"})


def test_unknown_sample_rejected():
    with pytest.raises(KeyError, match="Unknown sample 'S9'"):
        AnalysisConfig.from_dict({"samples": ["S1", "S9"]})


def test_pattern_needs_sample_placeholder():
    with pytest.raises(ValueError, match="placeholder"):
        AnalysisConfig(counts_pattern="counts.tsv.gz")


def test_paths_follow_patterns():
    config = AnalysisConfig(data_dir="/data/st")
    assert config.counts_path("S2") == Path("/data/st/S2_downsamp_stdata.tsv.gz")
    assert config.mask_path("S2") == Path("/data/st/S2_stdata_under_tissue_IDs.txt.gz")


def test_registry_override_from_config():
    config = AnalysisConfig.from_dict(
        {
            "registry": [
                {"sample_id": "A", "condition": "old", "depth": 2_000_000},
                {"sample_id": "B", "condition": "new", "depth": 3_000_000},
            ],
            "rounded_spot_samples": [],
        }
    )
    registry = config.build_registry()
    assert config.sample_ids(registry) == ("A", "B")
    assert registry.get("B").threshold == pytest.approx(3.0)
    assert config.to_dict()["registry"][0]["sample_id"] == "A"


def test_rounded_spot_samples_must_be_registered():
    with pytest.raises(KeyError, match="Rounded spot sample 'S44'"):
        AnalysisConfig.from_dict({"rounded_spot_samples": ["S44"]})


def test_registry_override_does_not_keep_default_rounded_sample():
    records = [
        {"sample_id": "A", "condition": "old", "depth": 2_000_000},
        {"sample_id": "B", "condition": "new", "depth": 3_000_000},
    ]
    with pytest.raises(KeyError, match="Rounded spot sample 'S4'"):
        AnalysisConfig.from_dict({"registry": records})
    config = AnalysisConfig.from_dict({"registry": records, "rounded_spot_samples": ["B"]})
    assert config.rounded_spot_samples == ("B",)


@pytest.mark.parametrize("value", ["false", 0, None])
def test_log_scale_umi_must_be_boolean(value):
    with pytest.raises(ValueError, match="log_scale_umi"):
        AnalysisConfig.from_dict({"log_scale_umi": value})
    assert AnalysisConfig.from_dict({"log_scale_umi": False}).log_scale_umi is False
