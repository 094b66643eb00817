from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class PreprocessConfig:
    """
    How a camera frame becomes the model input tensor.

    The frame is stretched straight to `input_size` x `input_size` (no letterbox),
    so decoded geometry stays normalized to the full frame.
    """

    input_size: int = 416
    # False -> NHWC (TFLite exports), True -> NCHW (ONNX exports).
    channels_first: bool = False
    # Frames arrive as OpenCV BGR; models are trained on RGB.
    swap_rb: bool = True

    def __post_init__(self) -> None:
        if self.input_size < 32:
            raise ValueError("input_size must be >= 32")


def preprocess(image_bgr: np.ndarray, cfg: PreprocessConfig = PreprocessConfig()) -> np.ndarray:
    """
    Resize (bilinear), convert to RGB, scale to [0, 1] and add a batch axis.

    Returns a float32 blob shaped (1, S, S, 3) or (1, 3, S, S).
    """
    try:
        import cv2  # type: ignore
    except Exception as e:  # pragma: no cover
        raise ImportError("OpenCV is required for preprocess(). Install with `pip install opencv-python`.") from e

    if image_bgr is None or not hasattr(image_bgr, "shape"):
        raise TypeError("image_bgr must be a NumPy array (BGR).")
    if image_bgr.ndim != 3 or image_bgr.shape[2] != 3:
        raise ValueError(f"Expected image shape (H, W, 3), got {getattr(image_bgr, 'shape', None)}")

    size = int(cfg.input_size)
    h, w = image_bgr.shape[:2]
    img = image_bgr
    if (w, h) != (size, size):
        img = cv2.resize(img, (size, size), interpolation=cv2.INTER_LINEAR)

    if cfg.swap_rb:
        img = img[:, :, ::-1]
    blob = img.astype(np.float32) / 255.0
    if cfg.channels_first:
        blob = np.transpose(blob, (2, 0, 1))
    return np.ascontiguousarray(blob[None, ...])
