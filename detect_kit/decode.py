from __future__ import annotations

from typing import Iterator, Tuple

import numpy as np

from .errors import LayoutMismatch
from .labels import LabelTable
from .layout import ObjectClassConfidence, SingleConfidenceWithClassScores, TensorLayout
from .types import Detection


def as_records(buffer: object, layout: TensorLayout) -> np.ndarray:
    """
    View a raw output buffer as a (record_count, record_stride) float32 array.

    Any shape is accepted, the buffer is flattened first. Trailing floats past
    `record_count * record_stride` are ignored.
    """

    flat = np.asarray(buffer, dtype=np.float32).reshape(-1)
    needed = layout.required_length
    if flat.size < needed:
        raise LayoutMismatch(expected=needed, actual=flat.size)
    return flat[:needed].reshape(layout.record_count, layout.record_stride)


def decode(buffer: object, layout: TensorLayout, labels: LabelTable) -> Iterator[Detection]:
    """
    Turn a flat detector output into one Detection per record, in scan order.

    No filtering happens here. The length check runs before anything is yielded,
    so a short buffer raises `LayoutMismatch` from this call and never produces
    a partial result. The returned iterator is one-shot.
    """

    records = as_records(buffer, layout)
    geometry = records[:, list(layout.geometry_offsets)]
    confidences, class_ids, fallback = _resolve_confidence(records, layout)
    return _iter_detections(geometry, confidences, class_ids, labels, fallback)


def _resolve_confidence(records: np.ndarray, layout: TensorLayout) -> Tuple[np.ndarray, np.ndarray, str]:
    enc = layout.confidence

    if isinstance(enc, SingleConfidenceWithClassScores):
        start, stop = enc.class_score_offsets
        confidences = records[:, enc.confidence_offset]
        # argmax returns the first maximum, so ties go to the lowest class id.
        class_ids = np.argmax(records[:, start:stop], axis=1).astype(np.int64)
        return confidences, class_ids, enc.unknown_label

    if isinstance(enc, ObjectClassConfidence):
        obj_conf = records[:, enc.object_confidence_offset]
        cls_conf = records[:, enc.class_confidence_offset]
        raw_ids = records[:, enc.class_index_offset]
        # Truncate toward zero; NaN/inf become -1 so they fall back to the unknown label.
        finite = np.isfinite(raw_ids)
        class_ids = np.full(raw_ids.shape, -1, dtype=np.int64)
        class_ids[finite] = np.clip(np.trunc(raw_ids[finite]), -1, np.iinfo(np.int32).max).astype(np.int64)
        confidences = obj_conf * cls_conf
        return confidences, class_ids, enc.unknown_label

    raise TypeError(f"Unsupported confidence encoding: {type(enc).__name__}")


def _iter_detections(
    geometry: np.ndarray,
    confidences: np.ndarray,
    class_ids: np.ndarray,
    labels: LabelTable,
    fallback: str,
) -> Iterator[Detection]:
    for (cx, cy, w, h), conf, cls_id in zip(geometry.tolist(), confidences.tolist(), class_ids.tolist()):
        yield Detection(
            x=cx,
            y=cy,
            w=w,
            h=h,
            confidence=conf,
            label=labels.resolve(cls_id, fallback),
        )
