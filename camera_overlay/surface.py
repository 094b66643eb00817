from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator, Optional, Tuple

import numpy as np

from detect_kit.types import DetectionSet
from detect_kit.visualize import draw_detections


class OverlaySurface:
    """
    Transparent BGRA layer drawn over the camera preview.

    Drawing goes through `frame()`: the canvas is cleared on entry and the
    result is always presented on exit, even if nothing was drawn or drawing
    raised, so the previous frame's boxes never linger.
    """

    def __init__(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Surface size must be positive, got {width}x{height}")
        self.width = int(width)
        self.height = int(height)
        self._canvas = np.zeros((self.height, self.width, 4), dtype=np.uint8)
        self._presented = np.zeros_like(self._canvas)
        self._lock = threading.Lock()
        self.presented_count = 0

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    @contextmanager
    def frame(self) -> Iterator[np.ndarray]:
        if not self._lock.acquire(blocking=False):
            raise RuntimeError("Overlay surface is already locked.")
        try:
            self._canvas[:] = 0
            try:
                yield self._canvas
            finally:
                self._presented = self._canvas.copy()
                self.presented_count += 1
        finally:
            self._lock.release()

    def render(self, detections: Optional[DetectionSet]) -> None:
        with self.frame() as canvas:
            if detections:
                draw_detections(canvas, detections)

    def presented(self) -> np.ndarray:
        return self._presented.copy()

    def composite(self, frame_bgr: np.ndarray) -> np.ndarray:
        """
        Blend the last presented overlay onto a BGR frame and return a copy.

        The overlay is scaled to the frame size if they differ.
        """

        if frame_bgr is None or not hasattr(frame_bgr, "shape"):
            raise TypeError("frame_bgr must be a NumPy array (BGR).")
        if frame_bgr.ndim != 3 or frame_bgr.shape[2] != 3:
            raise ValueError(f"Expected image shape (H, W, 3), got {getattr(frame_bgr, 'shape', None)}")

        overlay = self._presented
        h, w = frame_bgr.shape[:2]
        if (w, h) != (self.width, self.height):
            import cv2  # type: ignore

            overlay = cv2.resize(overlay, (w, h), interpolation=cv2.INTER_NEAREST)

        alpha = overlay[:, :, 3:4].astype(np.float32) / 255.0
        out = frame_bgr.astype(np.float32) * (1.0 - alpha) + overlay[:, :, :3].astype(np.float32) * alpha
        return out.astype(np.uint8)
