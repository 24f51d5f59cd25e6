"""Viewport intersection tracking used to defer diagram rendering."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Box:
    """Vertical extent of an element in document coordinates."""

    top: float
    height: float

    @property
    def bottom(self) -> float:
        return self.top + self.height


@dataclass(frozen=True)
class Viewport:
    top: float
    height: float

    @property
    def bottom(self) -> float:
        return self.top + self.height


@dataclass(frozen=True)
class IntersectionEntry:
    target: Any
    ratio: float


def intersection_ratio(box: Box, viewport: Viewport, root_margin: float = 0.0) -> float:
    """Fraction of ``box`` inside the viewport grown by ``root_margin`` px."""
    lo = viewport.top - root_margin
    hi = viewport.bottom + root_margin
    if box.height <= 0:
        return 1.0 if lo <= box.top <= hi else 0.0
    overlap = min(box.bottom, hi) - max(box.top, lo)
    if overlap <= 0:
        return 0.0
    return min(overlap / box.height, 1.0)


class IntersectionWatcher:
    """Reports observed targets that cross the visibility threshold.

    Targets are keyed by identity, so two structurally equal elements are
    tracked separately.
    """

    def __init__(self, root_margin: float = 50.0, threshold: float = 0.1) -> None:
        self.root_margin = root_margin
        self.threshold = threshold
        self._observed: dict[int, tuple[Any, Box]] = {}

    def observe(self, target: Any, box: Box) -> None:
        self._observed[id(target)] = (target, box)

    def unobserve(self, target: Any) -> None:
        self._observed.pop(id(target), None)

    def disconnect(self) -> None:
        self._observed.clear()

    def is_observing(self, target: Any) -> bool:
        return id(target) in self._observed

    def __len__(self) -> int:
        return len(self._observed)

    def scan(self, viewport: Viewport) -> list[IntersectionEntry]:
        entries: list[IntersectionEntry] = []
        for target, box in list(self._observed.values()):
            ratio = intersection_ratio(box, viewport, self.root_margin)
            if ratio > 0 and ratio >= self.threshold:
                entries.append(IntersectionEntry(target=target, ratio=ratio))
        return entries
