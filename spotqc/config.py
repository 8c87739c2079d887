"""Configuration loading utilities for spotqc runs."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from spotqc.core.registry import DEFAULT_REGISTRY, SampleRegistry
from spotqc.core.spots import ROUNDED_SPOT_SAMPLES

DEFAULT_COUNTS_PATTERN = "{sample}_downsamp_stdata.tsv.gz"
DEFAULT_MASK_PATTERN = "{sample}_stdata_under_tissue_IDs.txt.gz"


def load_json_config(path: str | Path) -> dict[str, Any]:
    """Load and validate a run config from a JSON file."""
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    if config_path.suffix.lower() != ".json":
        raise ValueError(
            f"Unsupported config format for '{config_path}'. Use a .json config file."
        )

    try:
        with open(config_path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    except json.JSONDecodeError as exc:
        raise ValueError(
            f"Invalid JSON in config '{config_path}' at line {exc.lineno}, "
            f"column {exc.colno}: {exc.msg}"
        ) from exc

    if not isinstance(data, dict):
        raise ValueError(
            f"Invalid config root in '{config_path}': expected JSON object, got {type(data).__name__}."
        )
    return data


@dataclass(frozen=True)
class AnalysisConfig:
    """Resolved settings for one pipeline run."""

    data_dir: str = "data"
    outdir: str = "results"
    samples: tuple[str, ...] | None = None
    counts_pattern: str = DEFAULT_COUNTS_PATTERN
    mask_pattern: str = DEFAULT_MASK_PATTERN
    log_scale_umi: bool = True
    registry: tuple[dict[str, Any], ...] | None = None
    rounded_spot_samples: tuple[str, ...] = field(default=ROUNDED_SPOT_SAMPLES)

    def __post_init__(self) -> None:
        for name in ("counts_pattern", "mask_pattern"):
            if "{sample}" not in getattr(self, name):
                raise ValueError(f"'{name}' must contain the '{{sample}}' placeholder.")
        registry = self.build_registry()
        for sample_id in self.sample_ids(registry):
            registry.get(sample_id)
        for sample_id in self.rounded_spot_samples:
            if sample_id not in registry:
                raise KeyError(
                    f"Rounded spot sample '{sample_id}' is not in the sample registry. "
                    f"Known samples: {', '.join(registry.sample_ids)}"
                )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AnalysisConfig":
        known = set(cls.__dataclass_fields__)
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown config keys: {unknown}. Allowed: {sorted(known)}")
        kwargs = dict(data)
        for key in ("samples", "registry", "rounded_spot_samples"):
            if kwargs.get(key) is not None:
                if not isinstance(kwargs[key], list):
                    raise ValueError(f"Config key '{key}' must be a list.")
                kwargs[key] = tuple(kwargs[key])
        if "log_scale_umi" in kwargs and not isinstance(kwargs["log_scale_umi"], bool):
            raise ValueError(
                f"Config key 'log_scale_umi' must be true or false, got {kwargs['log_scale_umi']!r}."
            )
        return cls(**kwargs)

    @classmethod
    def from_file(cls, path: str | Path) -> "AnalysisConfig":
        return cls.from_dict(load_json_config(path))

    def build_registry(self) -> SampleRegistry:
        if self.registry is None:
            return DEFAULT_REGISTRY
        return SampleRegistry.from_records(self.registry)

    def sample_ids(self, registry: SampleRegistry | None = None) -> tuple[str, ...]:
        if self.samples is not None:
            return tuple(str(s) for s in self.samples)
        return (registry or self.build_registry()).sample_ids

    def counts_path(self, sample_id: str) -> Path:
        return Path(self.data_dir) / self.counts_pattern.format(sample=sample_id)

    def mask_path(self, sample_id: str) -> Path:
        return Path(self.data_dir) / self.mask_pattern.format(sample=sample_id)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
