from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import cv2
import numpy as np


@dataclass(frozen=True)
class CaptureInfo:
    fps: Optional[float]
    width: Optional[int]
    height: Optional[int]


def open_capture(*, video: Optional[str] = None, webcam: Optional[int] = None, rtsp: Optional[str] = None) -> cv2.VideoCapture:
    sources = [video is not None, webcam is not None, rtsp is not None]
    if sum(bool(s) for s in sources) != 1:
        raise ValueError("Exactly one of video/webcam/rtsp must be provided.")

    if video is not None:
        cap = cv2.VideoCapture(video)
    elif rtsp is not None:
        cap = cv2.VideoCapture(rtsp)
    else:
        cap = cv2.VideoCapture(int(webcam))
        # Live preview only ever wants the newest frame.
        cap.set(cv2.CAP_PROP_BUFFERSIZE, 1)

    if not cap.isOpened():
        raise RuntimeError("Failed to open video source.")
    return cap


def get_capture_info(cap: cv2.VideoCapture) -> CaptureInfo:
    fps = cap.get(cv2.CAP_PROP_FPS)
    fps_val = float(fps) if fps and fps > 0 else None

    w = cap.get(cv2.CAP_PROP_FRAME_WIDTH)
    h = cap.get(cv2.CAP_PROP_FRAME_HEIGHT)
    w_val = int(w) if w and w > 0 else None
    h_val = int(h) if h and h > 0 else None

    return CaptureInfo(fps=fps_val, width=w_val, height=h_val)


def planes_to_nv21(y: np.ndarray, u: np.ndarray, v: np.ndarray) -> np.ndarray:
    """
    Pack camera YUV_420_888 planes into one NV21 byte buffer: Y, then V, then U.

    Assumes the chroma planes are already interleaved (pixel stride 2), which is
    what camera stacks hand out for NV21-compatible sensors.
    """

    return np.concatenate(
        [
            np.asarray(y, dtype=np.uint8).reshape(-1),
            np.asarray(v, dtype=np.uint8).reshape(-1),
            np.asarray(u, dtype=np.uint8).reshape(-1),
        ]
    )


def nv21_to_bgr(nv21: np.ndarray, width: int, height: int) -> np.ndarray:
    if width <= 0 or height <= 0 or width % 2 or height % 2:
        raise ValueError(f"NV21 frames need positive even dimensions, got {width}x{height}")
    buf = np.asarray(nv21, dtype=np.uint8).reshape(-1)
    needed = width * height * 3 // 2
    if buf.size < needed:
        raise ValueError(f"NV21 buffer has {buf.size} bytes, {width}x{height} needs {needed}")
    yuv = buf[:needed].reshape(height * 3 // 2, width)
    return cv2.cvtColor(yuv, cv2.COLOR_YUV2BGR_NV21)
