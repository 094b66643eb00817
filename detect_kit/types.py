from dataclasses import dataclass
from typing import Iterator, Optional, Tuple


@dataclass(frozen=True)
class Detection:
    """
    One decoded candidate box.

    Geometry is center/size normalized to [0, 1] of the model input side.
    """

    x: float
    y: float
    w: float
    h: float
    confidence: float
    label: str

    def as_xyxy(self) -> Tuple[float, float, float, float]:
        half_w = self.w / 2
        half_h = self.h / 2
        return self.x - half_w, self.y - half_h, self.x + half_w, self.y + half_h


@dataclass(frozen=True)
class PixelRect:
    left: float
    top: float
    right: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top


@dataclass(frozen=True)
class DetectionSet:
    """
    Result of one decode + select pass. Never mutated after construction, so it
    can be handed from the worker thread to the rendering thread as-is.
    """

    detections: Tuple[Detection, ...] = ()

    def __len__(self) -> int:
        return len(self.detections)

    def __iter__(self) -> Iterator[Detection]:
        return iter(self.detections)

    def __getitem__(self, index: int) -> Detection:
        return self.detections[index]

    def best(self) -> Optional[Detection]:
        best: Optional[Detection] = None
        for det in self.detections:
            if best is None or det.confidence > best.confidence:
                best = det
        return best
