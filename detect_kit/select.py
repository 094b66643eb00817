from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List, Optional

from .types import Detection, DetectionSet


@dataclass(frozen=True)
class SelectConfig:
    """
    Selection policy applied after decoding.

    - threshold: in [0, 1]; a detection is kept only if its confidence is strictly greater
    - reduce_to_single_best: keep at most the single most confident detection
    """

    threshold: float = 0.5
    reduce_to_single_best: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.threshold, bool) or not isinstance(self.threshold, (int, float)):
            raise ValueError("threshold must be a number")
        if math.isnan(self.threshold) or not 0.0 <= self.threshold <= 1.0:
            raise ValueError(f"threshold must be in [0, 1], got {self.threshold!r}")
        if not isinstance(self.reduce_to_single_best, bool):
            raise ValueError("reduce_to_single_best must be a boolean")


def select(
    detections: Iterable[Detection],
    threshold: float,
    reduce_to_single_best: bool = False,
) -> DetectionSet:
    if reduce_to_single_best:
        best: Optional[Detection] = None
        for det in detections:
            if not det.confidence > threshold:
                continue
            if best is None or det.confidence > best.confidence:
                best = det
        return DetectionSet(() if best is None else (best,))

    kept: List[Detection] = [det for det in detections if det.confidence > threshold]
    return DetectionSet(tuple(kept))


def select_with(detections: Iterable[Detection], cfg: SelectConfig) -> DetectionSet:
    return select(detections, cfg.threshold, cfg.reduce_to_single_best)
