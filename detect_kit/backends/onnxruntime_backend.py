from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Sequence, Union

import numpy as np


PathLike = Union[str, Path]


@dataclass(frozen=True)
class OnnxRuntimeBackendConfig:
    """
    How to open an exported detector with ONNX Runtime.

    - providers: execution providers, CPU only when None
    - input_size: square side fed by the preprocessor; checked against the model's static H/W
    - output_name: pick a named output when the export has several (the first one otherwise)
    - intra_op_num_threads: 0 lets ORT decide
    """

    providers: Optional[Sequence[str]] = None
    input_size: Optional[int] = None
    output_name: Optional[str] = None
    intra_op_num_threads: int = 0


def check_input_shape(shape: Sequence[Any], input_size: Optional[int]) -> None:
    """
    Reject an NCHW model input that cannot take a (1, 3, S, S) blob.

    Symbolic or unknown dimensions (strings / None) are accepted as-is.
    """
    if len(shape) != 4:
        raise ValueError(f"Expected a 4-D NCHW model input, got shape {tuple(shape)}")
    channels, height, width = shape[1], shape[2], shape[3]
    if isinstance(channels, int) and channels != 3:
        raise ValueError(f"Model expects {channels} input channels; frames are converted to 3-channel RGB")
    if input_size is None:
        return
    for axis, dim in (("height", height), ("width", width)):
        if isinstance(dim, int) and dim != input_size:
            raise ValueError(f"Model input {axis} is {dim} but input_size is {input_size}")


class OnnxRuntimeBackend:
    """
    Runs an ONNX detector export and hands back its flat float32 output.

    Takes the NCHW blob from `preprocess(..., channels_first=True)` and returns
    the raw record tensor flattened to 1-D, ready for `decode`.
    """

    def __init__(self, model_path: PathLike, cfg: OnnxRuntimeBackendConfig = OnnxRuntimeBackendConfig()):
        try:
            import onnxruntime as ort  # type: ignore
        except Exception as e:  # pragma: no cover
            raise ImportError(
                "onnxruntime is required for .onnx detectors. Install it with `pip install yolo-camera-overlay[onnx]`."
            ) from e

        self.model_path = Path(model_path)
        if not self.model_path.exists():
            raise FileNotFoundError(str(self.model_path))

        sess_opts = ort.SessionOptions()
        if cfg.intra_op_num_threads > 0:
            sess_opts.intra_op_num_threads = int(cfg.intra_op_num_threads)
        providers = list(cfg.providers) if cfg.providers is not None else ["CPUExecutionProvider"]
        self.session = ort.InferenceSession(str(self.model_path), sess_options=sess_opts, providers=providers)

        model_input = self.session.get_inputs()[0]
        check_input_shape(model_input.shape, cfg.input_size)
        self.input_name = model_input.name
        self.output_name = cfg.output_name or self.session.get_outputs()[0].name

    @property
    def input_shape(self) -> Sequence[Any]:
        return tuple(self.session.get_inputs()[0].shape)

    @property
    def providers_in_use(self) -> Sequence[str]:
        return tuple(self.session.get_providers())

    def infer(self, blob: np.ndarray) -> np.ndarray:
        if self.session is None:
            raise RuntimeError("ONNX Runtime backend is closed.")
        (out,) = self.session.run([self.output_name], {self.input_name: blob})
        return np.asarray(out, dtype=np.float32).reshape(-1)

    def close(self) -> None:
        # InferenceSession has no explicit close; dropping the reference frees it.
        self.session = None  # type: ignore[assignment]
