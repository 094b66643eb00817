from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Tuple, Union

from .errors import InvalidLayout


@dataclass(frozen=True)
class SingleConfidenceWithClassScores:
    """
    Record holds one scalar confidence plus a contiguous block of per-class scores.

    The class scores only pick the label; the emitted confidence is the scalar.
    `class_score_offsets` is a half-open range (start, stop).
    """

    confidence_offset: int
    class_score_offsets: Tuple[int, int]
    unknown_label: str = "?"

    @property
    def class_score_range(self) -> range:
        start, stop = self.class_score_offsets
        return range(start, stop)


@dataclass(frozen=True)
class ObjectClassConfidence:
    """
    Record holds object confidence, a float-encoded class index and the class confidence.

    Emitted confidence is object_confidence * class_confidence.
    """

    object_confidence_offset: int
    class_index_offset: int
    class_confidence_offset: int
    unknown_label: str = "Unknown"


ConfidenceEncoding = Union[SingleConfidenceWithClassScores, ObjectClassConfidence]


@dataclass(frozen=True)
class TensorLayout:
    """
    How a flat float buffer is sliced into fixed-stride detection records.

    Validated at construction; a layout that exists is always usable by `decode`.
    """

    record_stride: int
    record_count: int
    confidence: ConfidenceEncoding
    geometry_offsets: Tuple[int, int, int, int] = (0, 1, 2, 3)

    def __post_init__(self) -> None:
        if isinstance(self.record_stride, bool) or not isinstance(self.record_stride, int):
            raise InvalidLayout("record_stride must be an integer")
        if isinstance(self.record_count, bool) or not isinstance(self.record_count, int):
            raise InvalidLayout("record_count must be an integer")
        if self.record_stride < 1:
            raise InvalidLayout("record_stride must be >= 1")
        if self.record_count < 0:
            raise InvalidLayout("record_count must be >= 0")
        if len(self.geometry_offsets) != 4:
            raise InvalidLayout("geometry_offsets must have exactly four entries (cx, cy, w, h)")

        for off in self.geometry_offsets:
            self._check_offset("geometry_offsets", off)

        enc = self.confidence
        if isinstance(enc, SingleConfidenceWithClassScores):
            self._check_offset("confidence_offset", enc.confidence_offset)
            if len(enc.class_score_offsets) != 2:
                raise InvalidLayout("class_score_offsets must be a (start, stop) pair")
            start, stop = enc.class_score_offsets
            if stop <= start:
                raise InvalidLayout(f"class_score_offsets range is empty: {enc.class_score_offsets}")
            self._check_offset("class_score_offsets", start)
            self._check_offset("class_score_offsets", stop - 1)
            overlap = sorted(set(self.geometry_offsets) & set(enc.class_score_range))
            if overlap:
                raise InvalidLayout(f"class_score_offsets overlap geometry offsets at {overlap}")
        elif isinstance(enc, ObjectClassConfidence):
            self._check_offset("object_confidence_offset", enc.object_confidence_offset)
            self._check_offset("class_index_offset", enc.class_index_offset)
            self._check_offset("class_confidence_offset", enc.class_confidence_offset)
        else:
            raise InvalidLayout(f"Unsupported confidence encoding: {type(enc).__name__}")

    def _check_offset(self, name: str, offset: int) -> None:
        if isinstance(offset, bool) or not isinstance(offset, int):
            raise InvalidLayout(f"{name} must be integers, got {offset!r}")
        if not 0 <= offset < self.record_stride:
            raise InvalidLayout(f"{name} offset {offset} is outside [0, {self.record_stride})")

    @property
    def required_length(self) -> int:
        return self.record_count * self.record_stride


# Exported yolov3-tiny style model at 416x416: 10647 candidates, two classes.
YOLO_TINY_416_TWO_CLASS = TensorLayout(
    record_stride=7,
    record_count=10647,
    confidence=SingleConfidenceWithClassScores(confidence_offset=4, class_score_offsets=(5, 7)),
)

OBJECT_CLASS_416 = TensorLayout(
    record_stride=7,
    record_count=10647,
    confidence=ObjectClassConfidence(
        object_confidence_offset=4,
        class_index_offset=5,
        class_confidence_offset=6,
    ),
)

PRESETS: Dict[str, TensorLayout] = {
    "yolo_tiny_416_two_class": YOLO_TINY_416_TWO_CLASS,
    "object_class_416": OBJECT_CLASS_416,
}


def _require_int(payload: Mapping[str, Any], key: str) -> int:
    if key not in payload:
        raise InvalidLayout(f"Missing required layout key: {key}")
    value = payload[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidLayout(f"layout.{key} must be an integer")
    return int(value)


def _int_pair(value: Any, key: str) -> Tuple[int, int]:
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise InvalidLayout(f"layout.{key} must be a [start, stop] pair")
    return _require_int({key: value[0]}, key), _require_int({key: value[1]}, key)


def layout_from_dict(payload: Union[str, Mapping[str, Any]]) -> TensorLayout:
    """
    Build a layout from a preset name or a mapping such as

        {"record_stride": 7, "record_count": 10647,
         "geometry_offsets": [0, 1, 2, 3],
         "encoding": "single_confidence", "confidence_offset": 4,
         "class_score_offsets": [5, 7]}

    or, for the object/class variant,

        {..., "encoding": "object_class", "object_confidence_offset": 4,
         "class_index_offset": 5, "class_confidence_offset": 6}
    """

    if isinstance(payload, str):
        key = payload.strip().lower()
        if key not in PRESETS:
            raise InvalidLayout(f"Unknown layout preset {payload!r}. Known presets: {sorted(PRESETS)}")
        return PRESETS[key]

    if not isinstance(payload, Mapping):
        raise InvalidLayout("layout must be a preset name or an object")

    encoding = payload.get("encoding")
    common = {"record_stride", "record_count", "geometry_offsets", "encoding", "unknown_label"}
    if encoding == "single_confidence":
        allowed = common | {"confidence_offset", "class_score_offsets"}
    elif encoding == "object_class":
        allowed = common | {"object_confidence_offset", "class_index_offset", "class_confidence_offset"}
    else:
        raise InvalidLayout("layout.encoding must be 'single_confidence' or 'object_class'")
    unknown = sorted(set(payload.keys()) - allowed)
    if unknown:
        raise InvalidLayout(f"Unknown layout keys: {unknown}")

    extra: Dict[str, Any] = {}
    if "unknown_label" in payload:
        if not isinstance(payload["unknown_label"], str):
            raise InvalidLayout("layout.unknown_label must be a string")
        extra["unknown_label"] = payload["unknown_label"]

    if encoding == "single_confidence":
        if "class_score_offsets" not in payload:
            raise InvalidLayout("Missing required layout key: class_score_offsets")
        conf: ConfidenceEncoding = SingleConfidenceWithClassScores(
            confidence_offset=_require_int(payload, "confidence_offset"),
            class_score_offsets=_int_pair(payload["class_score_offsets"], "class_score_offsets"),
            **extra,
        )
    else:
        conf = ObjectClassConfidence(
            object_confidence_offset=_require_int(payload, "object_confidence_offset"),
            class_index_offset=_require_int(payload, "class_index_offset"),
            class_confidence_offset=_require_int(payload, "class_confidence_offset"),
            **extra,
        )

    geometry = payload.get("geometry_offsets", [0, 1, 2, 3])
    if not isinstance(geometry, (list, tuple)) or len(geometry) != 4:
        raise InvalidLayout("layout.geometry_offsets must list four offsets")

    return TensorLayout(
        record_stride=_require_int(payload, "record_stride"),
        record_count=_require_int(payload, "record_count"),
        confidence=conf,
        geometry_offsets=tuple(geometry),  # type: ignore[arg-type]
    )
