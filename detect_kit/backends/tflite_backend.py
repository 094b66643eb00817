from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

import numpy as np


PathLike = Union[str, Path]


@dataclass(frozen=True)
class TFLiteBackendConfig:
    """
    Configuration for TFLite inference.

    - num_threads: interpreter threads; 0 uses cpu_count - 1
    - output_index: which model output holds the detection tensor
    """

    num_threads: int = 0
    output_index: int = 0


def _load_interpreter_cls() -> Any:
    try:
        import tflite_runtime.interpreter as tflite  # type: ignore

        return tflite.Interpreter
    except ImportError:
        pass
    try:
        from tensorflow.lite import Interpreter  # type: ignore
    except Exception as e:  # pragma: no cover
        raise ImportError(
            "A TFLite interpreter is required for the TFLite backend. "
            "Install it with `pip install tflite-runtime` (or `pip install tensorflow`)."
        ) from e
    return Interpreter


class TFLiteBackend:
    """
    TFLite backend for mobile-style exports.

    Expects an NHWC float32 blob shaped (1, S, S, 3); returns the selected
    output tensor as a NumPy array. Quantized uint8/int8 models are fed and read
    through their (scale, zero_point) parameters.
    """

    def __init__(self, model_path: PathLike, cfg: TFLiteBackendConfig = TFLiteBackendConfig()):
        interpreter_cls = _load_interpreter_cls()

        self.model_path = Path(model_path)
        if not self.model_path.exists():
            raise FileNotFoundError(str(self.model_path))

        threads = cfg.num_threads if cfg.num_threads > 0 else max(1, (os.cpu_count() or 2) - 1)
        self.interpreter: Optional[Any] = interpreter_cls(model_path=str(self.model_path), num_threads=threads)
        self.interpreter.allocate_tensors()

        outputs = self.interpreter.get_output_details()
        if not 0 <= cfg.output_index < len(outputs):
            raise ValueError(f"output_index {cfg.output_index} out of range, model has {len(outputs)} outputs")
        self._in = self.interpreter.get_input_details()[0]
        self._out = outputs[cfg.output_index]

    @property
    def input_shape(self):
        return tuple(int(v) for v in self._in["shape"])

    def infer(self, blob: np.ndarray) -> np.ndarray:
        if self.interpreter is None:
            raise RuntimeError("TFLite backend is closed.")

        in_dtype = self._in["dtype"]
        if in_dtype != np.float32:
            scale, zero = self._in.get("quantization") or (0.0, 0)
            if scale:
                blob = blob / scale + zero
            blob = np.clip(np.round(blob), np.iinfo(in_dtype).min, np.iinfo(in_dtype).max)
        self.interpreter.set_tensor(self._in["index"], blob.astype(in_dtype))
        self.interpreter.invoke()

        out = self.interpreter.get_tensor(self._out["index"])
        if out.dtype != np.float32:
            scale, zero = self._out.get("quantization") or (0.0, 0)
            out = out.astype(np.float32)
            if scale:
                out = (out - zero) * scale
        return out

    def close(self) -> None:
        self.interpreter = None
