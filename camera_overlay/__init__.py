"""
Camera overlay application built on top of `detect_kit`.

`detect_kit` owns the tensor decoding; this package owns everything around a
live stream:
- profile config and logging setup
- frame ingest (OpenCV capture, NV21 conversion)
- the single worker thread with keep-only-latest backpressure
- the overlay surface the UI thread draws on
- the runner CLI
"""

from __future__ import annotations

from .channel import LatestSlot
from .config import OverlayProfile, load_overlay_profile
from .logging_setup import setup_logging
from .surface import OverlaySurface
from .worker import FrameAnalyzer

__all__ = [
    "LatestSlot",
    "OverlayProfile",
    "load_overlay_profile",
    "setup_logging",
    "OverlaySurface",
    "FrameAnalyzer",
]
