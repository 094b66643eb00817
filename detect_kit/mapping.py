from __future__ import annotations

from .types import Detection, PixelRect


def to_pixel_rect(d: Detection, dest_width: float, dest_height: float) -> PixelRect:
    """
    Map a normalized center/size detection onto a destination canvas.

    No clamping: boxes that leave the frame give negative or overflowing edges,
    clip at draw time if needed.
    """

    half_w = d.w / 2
    half_h = d.h / 2
    return PixelRect(
        left=(d.x - half_w) * dest_width,
        top=(d.y - half_h) * dest_height,
        right=(d.x + half_w) * dest_width,
        bottom=(d.y + half_h) * dest_height,
    )
