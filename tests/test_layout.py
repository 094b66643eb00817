import unittest

from detect_kit.errors import InvalidLayout
from detect_kit.layout import (
    OBJECT_CLASS_416,
    PRESETS,
    YOLO_TINY_416_TWO_CLASS,
    ObjectClassConfidence,
    SingleConfidenceWithClassScores,
    TensorLayout,
    layout_from_dict,
)


class TestTensorLayout(unittest.TestCase):
    def test_presets_describe_exported_model(self) -> None:
        self.assertEqual(YOLO_TINY_416_TWO_CLASS.record_stride, 7)
        self.assertEqual(YOLO_TINY_416_TWO_CLASS.record_count, 10647)
        self.assertEqual(YOLO_TINY_416_TWO_CLASS.required_length, 10647 * 7)
        self.assertEqual(YOLO_TINY_416_TWO_CLASS.confidence.class_score_range, range(5, 7))
        self.assertIsInstance(OBJECT_CLASS_416.confidence, ObjectClassConfidence)
        self.assertIs(PRESETS["yolo_tiny_416_two_class"], YOLO_TINY_416_TWO_CLASS)

    def test_offset_outside_stride_rejected(self) -> None:
        with self.assertRaises(InvalidLayout):
            TensorLayout(
                record_stride=6,
                record_count=1,
                confidence=SingleConfidenceWithClassScores(confidence_offset=4, class_score_offsets=(5, 7)),
            )
        with self.assertRaises(InvalidLayout):
            TensorLayout(
                record_stride=7,
                record_count=1,
                confidence=ObjectClassConfidence(object_confidence_offset=4, class_index_offset=7, class_confidence_offset=6),
            )
        with self.assertRaises(InvalidLayout):
            TensorLayout(
                record_stride=7,
                record_count=1,
                geometry_offsets=(0, 1, 2, -1),
                confidence=ObjectClassConfidence(4, 5, 6),
            )

    def test_class_scores_must_not_overlap_geometry(self) -> None:
        with self.assertRaises(InvalidLayout):
            TensorLayout(
                record_stride=7,
                record_count=1,
                confidence=SingleConfidenceWithClassScores(confidence_offset=4, class_score_offsets=(3, 6)),
            )

    def test_empty_class_score_range_rejected(self) -> None:
        with self.assertRaises(InvalidLayout):
            TensorLayout(
                record_stride=7,
                record_count=1,
                confidence=SingleConfidenceWithClassScores(confidence_offset=4, class_score_offsets=(5, 5)),
            )

    def test_bad_counts_rejected(self) -> None:
        enc = ObjectClassConfidence(4, 5, 6)
        with self.assertRaises(InvalidLayout):
            TensorLayout(record_stride=0, record_count=1, confidence=enc)
        with self.assertRaises(InvalidLayout):
            TensorLayout(record_stride=7, record_count=-1, confidence=enc)
        with self.assertRaises(InvalidLayout):
            TensorLayout(record_stride=7.0, record_count=1, confidence=enc)  # type: ignore[arg-type]

    def test_invalid_layout_is_a_value_error(self) -> None:
        with self.assertRaises(ValueError):
            TensorLayout(record_stride=7, record_count=1, confidence="combined")  # type: ignore[arg-type]

    def test_layout_is_frozen(self) -> None:
        with self.assertRaises(AttributeError):
            YOLO_TINY_416_TWO_CLASS.record_count = 1  # type: ignore[misc]


class TestLayoutFromDict(unittest.TestCase):
    def test_preset_name(self) -> None:
        self.assertIs(layout_from_dict("object_class_416"), OBJECT_CLASS_416)
        self.assertIs(layout_from_dict(" YOLO_TINY_416_TWO_CLASS "), YOLO_TINY_416_TWO_CLASS)

    def test_unknown_preset(self) -> None:
        with self.assertRaises(InvalidLayout):
            layout_from_dict("yolov99")

    def test_single_confidence_mapping(self) -> None:
        layout = layout_from_dict(
            {
                "record_stride": 8,
                "record_count": 100,
                "encoding": "single_confidence",
                "confidence_offset": 4,
                "class_score_offsets": [5, 8],
            }
        )
        self.assertEqual(layout.record_stride, 8)
        self.assertEqual(layout.geometry_offsets, (0, 1, 2, 3))
        self.assertEqual(layout.confidence, SingleConfidenceWithClassScores(4, (5, 8)))

    def test_object_class_mapping_with_custom_label(self) -> None:
        layout = layout_from_dict(
            {
                "record_stride": 7,
                "record_count": 3,
                "geometry_offsets": [0, 1, 2, 3],
                "encoding": "object_class",
                "object_confidence_offset": 4,
                "class_index_offset": 5,
                "class_confidence_offset": 6,
                "unknown_label": "n/a",
            }
        )
        self.assertEqual(layout.confidence.unknown_label, "n/a")

    def test_unknown_key_rejected(self) -> None:
        with self.assertRaises(InvalidLayout):
            layout_from_dict(
                {
                    "record_stride": 7,
                    "record_count": 3,
                    "encoding": "object_class",
                    "object_confidence_offset": 4,
                    "class_index_offset": 5,
                    "class_confidence_offset": 6,
                    "class_score_offsets": [5, 7],
                }
            )

    def test_missing_encoding_rejected(self) -> None:
        with self.assertRaises(InvalidLayout):
            layout_from_dict({"record_stride": 7, "record_count": 3})


if __name__ == "__main__":
    unittest.main()
