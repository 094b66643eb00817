from __future__ import annotations

import math
from typing import Iterable, Tuple

import numpy as np

from .mapping import to_pixel_rect
from .types import Detection


def format_label(det: Detection) -> str:
    return f"{det.label} {det.confidence:.2f}"


def _color_for_canvas(canvas: np.ndarray, color: Tuple[int, int, int]) -> Tuple[int, ...]:
    # BGRA canvases need an opaque alpha so the box survives compositing.
    if canvas.shape[2] == 4:
        return (int(color[0]), int(color[1]), int(color[2]), 255)
    return (int(color[0]), int(color[1]), int(color[2]))


def draw_detections(
    canvas: np.ndarray,
    detections: Iterable[Detection],
    *,
    color: Tuple[int, int, int] = (0, 0, 255),
    box_thickness: int = 4,
    font_scale: float = 1.0,
    font_thickness: int = 2,
    text_offset: int = 10,
) -> np.ndarray:
    """
    Draw one rectangle and a "label 0.93" caption per detection, in place.

    Normalized geometry is scaled to the canvas size. The caption sits
    `text_offset` pixels above the box's top-left corner. Works on BGR and BGRA
    canvases; `color` is BGR.
    """

    try:
        import cv2  # type: ignore
    except Exception as e:  # pragma: no cover
        raise ImportError("OpenCV is required for draw_detections(). Install with `pip install opencv-python`.") from e

    if canvas is None or not hasattr(canvas, "shape"):
        raise TypeError("canvas must be a NumPy array.")
    if canvas.ndim != 3 or canvas.shape[2] not in (3, 4):
        raise ValueError(f"Expected canvas shape (H, W, 3|4), got {getattr(canvas, 'shape', None)}")

    h, w = canvas.shape[:2]
    paint = _color_for_canvas(canvas, color)

    for det in detections:
        rect = to_pixel_rect(det, float(w), float(h))
        if not all(math.isfinite(v) for v in (rect.left, rect.top, rect.right, rect.bottom)):
            continue
        # cv2 clips drawing to the image; only guard against absurd values.
        left = int(np.clip(round(rect.left), -w, 2 * w))
        top = int(np.clip(round(rect.top), -h, 2 * h))
        right = int(np.clip(round(rect.right), -w, 2 * w))
        bottom = int(np.clip(round(rect.bottom), -h, 2 * h))

        cv2.rectangle(canvas, (left, top), (right, bottom), paint, thickness=box_thickness)
        cv2.putText(
            canvas,
            format_label(det),
            (left, top - text_offset),
            cv2.FONT_HERSHEY_SIMPLEX,
            font_scale,
            paint,
            thickness=font_thickness,
            lineType=cv2.LINE_AA,
        )

    return canvas
