"""
Decoding and selection of YOLO-style detector output.

Works on the flat float tensor a detector emits: a TensorLayout says how it is
sliced into records, `decode` turns records into Detections and `select`
applies the confidence threshold / single-best policy. Core needs only NumPy;
OpenCV is used for preprocessing and drawing, inference runtimes are optional.
"""

from .types import Detection, DetectionSet, PixelRect
from .errors import DetectKitError, InvalidLayout, LayoutMismatch
from .layout import (
    OBJECT_CLASS_416,
    PRESETS,
    YOLO_TINY_416_TWO_CLASS,
    ObjectClassConfidence,
    SingleConfidenceWithClassScores,
    TensorLayout,
    layout_from_dict,
)
from .labels import LabelTable, load_class_names, load_labels
from .decode import decode
from .select import SelectConfig, select, select_with
from .mapping import to_pixel_rect
from .preprocess import PreprocessConfig, preprocess
from .runtime import DetectionPipeline, load_pipeline, find_project_root, resolve_path
from .visualize import draw_detections, format_label

__all__ = [
    "Detection",
    "DetectionSet",
    "PixelRect",
    "DetectKitError",
    "InvalidLayout",
    "LayoutMismatch",
    "OBJECT_CLASS_416",
    "PRESETS",
    "YOLO_TINY_416_TWO_CLASS",
    "ObjectClassConfidence",
    "SingleConfidenceWithClassScores",
    "TensorLayout",
    "layout_from_dict",
    "LabelTable",
    "load_class_names",
    "load_labels",
    "decode",
    "SelectConfig",
    "select",
    "select_with",
    "to_pixel_rect",
    "PreprocessConfig",
    "preprocess",
    "DetectionPipeline",
    "load_pipeline",
    "find_project_root",
    "resolve_path",
    "draw_detections",
    "format_label",
]
