from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional, Sequence, Union

import numpy as np

from .decode import decode
from .labels import LabelTable
from .layout import TensorLayout
from .preprocess import PreprocessConfig, preprocess
from .select import SelectConfig, select_with
from .types import DetectionSet


PathLike = Union[str, Path]

logger = logging.getLogger(__name__)


def find_project_root(
    start: Optional[PathLike] = None,
    markers: Sequence[str] = ("pyproject.toml", ".git"),
) -> Path:
    """
    Best-effort project root discovery, so `models/...` paths work from any cwd.
    """

    p = Path(start) if start is not None else Path.cwd()
    p = p.resolve()

    if p.is_file():
        p = p.parent

    for parent in (p, *p.parents):
        for m in markers:
            if (parent / m).exists():
                return parent
    return p


def resolve_path(path: PathLike, root: Optional[PathLike] = "auto") -> Path:
    """
    Resolve `path` to an absolute Path.

    - Absolute paths are returned as-is.
    - Relative paths are resolved against `root` if provided, the project root otherwise.
    """

    p = Path(path)
    if p.is_absolute():
        return p

    if root == "auto" or root is None:
        base = find_project_root()
    else:
        base = Path(root).resolve()

    return (base / p).resolve()


class DetectionPipeline:
    """
    preprocess -> inference -> decode -> select.

    Takes an OpenCV BGR frame and returns a DetectionSet with geometry
    normalized to that frame. One pipeline serves one stream; calls are not
    meant to overlap on the same backend.
    """

    def __init__(
        self,
        infer_fn: Callable[[np.ndarray], np.ndarray],
        layout: TensorLayout,
        labels: LabelTable,
        *,
        backend: Optional[object] = None,
        backend_name: Optional[str] = None,
        preprocess_cfg: PreprocessConfig = PreprocessConfig(),
        select_cfg: SelectConfig = SelectConfig(),
    ):
        self._infer_fn = infer_fn
        self.layout = layout
        self.labels = labels
        self.backend = backend
        self.backend_name = backend_name
        self.preprocess_cfg = preprocess_cfg
        self.select_cfg = select_cfg

    def preprocess(self, image_bgr: np.ndarray) -> np.ndarray:
        return preprocess(image_bgr, self.preprocess_cfg)

    def infer(self, blob: np.ndarray) -> np.ndarray:
        return self._infer_fn(blob)

    def decode_output(self, raw: object) -> DetectionSet:
        return select_with(decode(raw, self.layout, self.labels), self.select_cfg)

    def __call__(self, image_bgr: np.ndarray) -> DetectionSet:
        blob = self.preprocess(image_bgr)
        raw = self.infer(blob)
        return self.decode_output(raw)

    def close(self) -> None:
        close = getattr(self.backend, "close", None)
        if callable(close):
            close()


def load_pipeline(
    model_path: PathLike,
    layout: TensorLayout,
    labels: LabelTable,
    *,
    backend: Optional[str] = None,
    root: Optional[PathLike] = "auto",
    input_size: int = 416,
    select_cfg: SelectConfig = SelectConfig(),
    onnx_providers: Optional[Sequence[str]] = None,
    num_threads: int = 0,
) -> DetectionPipeline:
    """
    Create a pipeline for a model on disk.

        pipe = load_pipeline("models/detect.tflite", YOLO_TINY_416_TWO_CLASS, load_labels("models/labels.txt"))

    Args:
        model_path: relative paths resolve against the project root by default
        backend: "onnxruntime" / "tflite", or None to infer from the extension
        input_size: square model input side
    """

    resolved = resolve_path(model_path, root=root)
    chosen = backend
    if chosen is None:
        suffix = resolved.suffix.lower()
        if suffix == ".onnx":
            chosen = "onnxruntime"
        elif suffix == ".tflite":
            chosen = "tflite"
        else:
            raise ValueError(
                f"Could not infer backend from extension '{suffix}'. Pass backend=... explicitly."
            )

    chosen = chosen.lower()
    if chosen == "onnxruntime":
        from .backends.onnxruntime_backend import OnnxRuntimeBackend, OnnxRuntimeBackendConfig

        ort_backend = OnnxRuntimeBackend(
            resolved,
            OnnxRuntimeBackendConfig(
                providers=onnx_providers,
                input_size=input_size,
                intra_op_num_threads=num_threads,
            ),
        )
        logger.info("Loaded %s with onnxruntime providers=%s", resolved, list(ort_backend.providers_in_use))
        return DetectionPipeline(
            ort_backend.infer,
            layout,
            labels,
            backend=ort_backend,
            backend_name="onnxruntime",
            preprocess_cfg=PreprocessConfig(input_size=input_size, channels_first=True),
            select_cfg=select_cfg,
        )

    if chosen == "tflite":
        from .backends.tflite_backend import TFLiteBackend, TFLiteBackendConfig

        tfl_backend = TFLiteBackend(resolved, TFLiteBackendConfig(num_threads=num_threads))
        logger.info("Loaded %s with tflite input_shape=%s", resolved, tfl_backend.input_shape)
        return DetectionPipeline(
            tfl_backend.infer,
            layout,
            labels,
            backend=tfl_backend,
            backend_name="tflite",
            preprocess_cfg=PreprocessConfig(input_size=input_size, channels_first=False),
            select_cfg=select_cfg,
        )

    raise ValueError(f"Unsupported backend: {backend!r}")
