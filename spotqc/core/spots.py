"""Spot identifier normalization for under-tissue spot lists."""

from __future__ import annotations

from types import MappingProxyType
from typing import Callable, Iterable, Mapping

SpotNormalizer = Callable[[str], str]

MASK_DELIMITER = "_"
SPOT_DELIMITER = "x"

# Section whose under-tissue list was exported with sub-spot (float) coordinates.
ROUNDED_SPOT_SAMPLES: tuple[str, ...] = ("S4",)


def format_spot_id(x: int, y: int) -> str:
    return f"{int(x)}{SPOT_DELIMITER}{int(y)}"


def _split_coordinates(raw: str) -> tuple[str, str]:
    parts = str(raw).strip().split(MASK_DELIMITER)
    if len(parts) != 2 or not all(parts):
        raise ValueError(f"Malformed spot identifier '{raw}': expected '<x>{MASK_DELIMITER}<y>'.")
    return parts[0], parts[1]


def normalize_spot_id(raw: str) -> str:
    """Convert an integer-coordinate id such as '12_7' to '12x7'."""
    x, y = _split_coordinates(raw)
    try:
        ix, iy = int(x), int(y)
    except ValueError as exc:
        raise ValueError(
            f"Non-integer coordinates in spot identifier '{raw}'; "
            "float-coordinate samples need the rounding normalizer."
        ) from exc
    return format_spot_id(ix, iy)


def normalize_rounded_spot_id(raw: str) -> str:
    """Round float coordinates to the nearest integer, e.g. '12.4_7.6' -> '12x8'.

    Uses Python's `round`, so exact halves go to the even neighbour.
    """
    x, y = _split_coordinates(raw)
    try:
        fx, fy = float(x), float(y)
    except ValueError as exc:
        raise ValueError(f"Non-numeric coordinates in spot identifier '{raw}'.") from exc
    return format_spot_id(round(fx), round(fy))


def build_normalizer_table(
    rounded_samples: Iterable[str] = ROUNDED_SPOT_SAMPLES,
) -> Mapping[str, SpotNormalizer]:
    return MappingProxyType({str(s): normalize_rounded_spot_id for s in rounded_samples})


SPOT_NORMALIZERS: Mapping[str, SpotNormalizer] = build_normalizer_table()


def normalizer_for(
    sample_id: str, table: Mapping[str, SpotNormalizer] = SPOT_NORMALIZERS
) -> SpotNormalizer:
    return table.get(sample_id, normalize_spot_id)


def normalize_spot_ids(raw_ids: Iterable[str], normalizer: SpotNormalizer) -> frozenset[str]:
    return frozenset(normalizer(r) for r in raw_ids if str(r).strip() != "")
