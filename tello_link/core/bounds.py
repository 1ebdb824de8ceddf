"""Saturating bounds for command parameters."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List


@dataclass(frozen=True)
class IntRange:
    """Closed integer range ``[lo, hi]``."""

    lo: int
    hi: int

    def __post_init__(self) -> None:
        if self.lo > self.hi:
            raise ValueError(f"Invalid range: {self.lo} > {self.hi}")


def clamp(value: int, bounds: IntRange) -> int:
    """Saturate ``value`` at the edges of ``bounds``."""
    return max(bounds.lo, min(value, bounds.hi))


def clamp_all(values: Iterable[int], bounds: IntRange) -> List[int]:
    return [clamp(value, bounds) for value in values]


def render(values: Iterable[int]) -> str:
    """Join already clamped values with single spaces, keeping their order."""
    return " ".join(str(value) for value in values)
