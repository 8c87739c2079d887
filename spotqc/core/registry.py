"""Sample registry: condition and sequencing depth per tissue section."""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Iterable, Iterator, Mapping

from spotqc.core.types import Sample

DEFAULT_SAMPLES: tuple[Sample, ...] = (
    Sample("S1", "standard", 12_400_000),
    Sample("S2", "standard", 15_100_000),
    Sample("S3", "standard", 9_800_000),
    Sample("S4", "modified", 14_300_000),
    Sample("S5", "modified", 11_600_000),
    Sample("S6", "modified", 16_900_000),
)


class SampleRegistry:
    """Read-only lookup of samples by identifier, in registration order."""

    def __init__(self, samples: Iterable[Sample]):
        by_id: dict[str, Sample] = {}
        for sample in samples:
            if sample.sample_id in by_id:
                raise ValueError(f"Duplicate sample id in registry: '{sample.sample_id}'.")
            if int(sample.depth) <= 0:
                raise ValueError(
                    f"Sequencing depth for '{sample.sample_id}' must be positive, got {sample.depth}."
                )
            by_id[sample.sample_id] = sample
        if not by_id:
            raise ValueError("Sample registry is empty.")
        conditions = {s.condition for s in by_id.values()}
        if len(conditions) != 2:
            raise ValueError(
                f"Sample registry must contain exactly two conditions, got {sorted(conditions)}."
            )
        self._samples: Mapping[str, Sample] = MappingProxyType(by_id)

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> "SampleRegistry":
        samples = []
        for i, rec in enumerate(records):
            if not isinstance(rec, Mapping):
                raise ValueError(f"Registry record {i} must be an object, got {type(rec).__name__}.")
            missing = [k for k in ("sample_id", "condition", "depth") if k not in rec]
            if missing:
                raise ValueError(f"Registry record {i} is missing keys: {missing}")
            samples.append(
                Sample(str(rec["sample_id"]), str(rec["condition"]), int(rec["depth"]))
            )
        return cls(samples)

    def get(self, sample_id: str) -> Sample:
        try:
            return self._samples[sample_id]
        except KeyError:
            raise KeyError(
                f"Unknown sample '{sample_id}'. Known samples: {', '.join(self._samples)}"
            ) from None

    def condition(self, sample_id: str) -> str:
        return self.get(sample_id).condition

    def depth(self, sample_id: str) -> int:
        return self.get(sample_id).depth

    @property
    def sample_ids(self) -> tuple[str, ...]:
        return tuple(self._samples)

    @property
    def conditions(self) -> tuple[str, ...]:
        """Condition labels in order of first registration."""
        return tuple(dict.fromkeys(s.condition for s in self._samples.values()))

    def __contains__(self, sample_id: object) -> bool:
        return sample_id in self._samples

    def __iter__(self) -> Iterator[Sample]:
        return iter(self._samples.values())

    def __len__(self) -> int:
        return len(self._samples)


DEFAULT_REGISTRY = SampleRegistry(DEFAULT_SAMPLES)
