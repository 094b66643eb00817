from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from detect_kit.errors import InvalidLayout
from detect_kit.layout import TensorLayout, YOLO_TINY_416_TWO_CLASS, layout_from_dict
from detect_kit.select import SelectConfig


@dataclass(frozen=True)
class OverlayProfile:
    schema_version: int
    layout: TensorLayout = YOLO_TINY_416_TWO_CLASS
    input_size: int = 416
    threshold: float = 0.5
    reduce_to_single_best: bool = False
    labels: Optional[str] = None
    model: Optional[str] = None
    notes: Optional[str] = None

    def __post_init__(self) -> None:
        if self.schema_version != 1:
            raise ValueError("overlay profile schema_version must be 1")
        if self.input_size < 32:
            raise ValueError("input_size must be >= 32")
        # Threshold range is owned by SelectConfig so profile and CLI agree.
        SelectConfig(threshold=self.threshold, reduce_to_single_best=self.reduce_to_single_best)

    @property
    def select_cfg(self) -> SelectConfig:
        return SelectConfig(threshold=self.threshold, reduce_to_single_best=self.reduce_to_single_best)


def _require_int(payload: Dict[str, Any], key: str) -> int:
    if key not in payload:
        raise ValueError(f"Missing required key: {key}")
    value = payload[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key} must be an integer")
    return int(value)


def _optional_number(payload: Dict[str, Any], key: str, default: float) -> float:
    value = payload.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key} must be a number")
    return float(value)


def _optional_str(payload: Dict[str, Any], key: str) -> Optional[str]:
    value = payload.get(key)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"{key} must be a string if provided")
    return value


def load_overlay_profile(path: Path) -> OverlayProfile:
    """
    Load a JSON profile describing the exported model:

        {
          "schema_version": 1,
          "layout": "yolo_tiny_416_two_class",
          "input_size": 416,
          "threshold": 0.5,
          "reduce_to_single_best": false,
          "labels": "models/labels.txt",
          "model": "models/detect.tflite"
        }

    `layout` is a preset name or a layout object (see `detect_kit.layout_from_dict`).
    Unknown keys are rejected.
    """

    if not path.exists():
        raise FileNotFoundError(f"Overlay profile not found: {path}")
    raw = path.read_text(encoding="utf-8")
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid overlay profile JSON: {path}") from exc
    if not isinstance(payload, dict):
        raise ValueError("Overlay profile must be a JSON object")

    allowed = {
        "schema_version",
        "layout",
        "input_size",
        "threshold",
        "reduce_to_single_best",
        "labels",
        "model",
        "notes",
    }
    unknown = sorted(set(payload.keys()) - allowed)
    if unknown:
        raise ValueError(f"Unknown overlay profile keys: {unknown}")

    schema_version = _require_int(payload, "schema_version")

    layout = YOLO_TINY_416_TWO_CLASS
    if "layout" in payload:
        try:
            layout = layout_from_dict(payload["layout"])
        except InvalidLayout as exc:
            raise ValueError(f"Invalid layout in {path}: {exc}") from exc

    input_size = payload.get("input_size", 416)
    if isinstance(input_size, bool) or not isinstance(input_size, int):
        raise ValueError("input_size must be an integer")

    single_best = payload.get("reduce_to_single_best", False)
    if not isinstance(single_best, bool):
        raise ValueError("reduce_to_single_best must be a boolean")

    return OverlayProfile(
        schema_version=schema_version,
        layout=layout,
        input_size=int(input_size),
        threshold=_optional_number(payload, "threshold", 0.5),
        reduce_to_single_best=single_best,
        labels=_optional_str(payload, "labels"),
        model=_optional_str(payload, "model"),
        notes=_optional_str(payload, "notes"),
    )
