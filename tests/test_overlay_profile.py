import json
import tempfile
import unittest
from pathlib import Path

from camera_overlay.config import OverlayProfile, load_overlay_profile
from detect_kit.layout import OBJECT_CLASS_416, YOLO_TINY_416_TWO_CLASS, ObjectClassConfidence


class TestOverlayProfile(unittest.TestCase):
    def _write_profile(self, payload: dict) -> Path:
        tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(tmpdir.cleanup)
        path = Path(tmpdir.name) / "profile.json"
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path

    def test_load_ok(self) -> None:
        path = self._write_profile(
            {
                "schema_version": 1,
                "layout": "object_class_416",
                "input_size": 320,
                "threshold": 0.4,
                "reduce_to_single_best": True,
                "labels": "models/labels.txt",
                "model": "models/detect.tflite",
                "notes": "front camera",
            }
        )
        profile = load_overlay_profile(path)
        self.assertIsInstance(profile, OverlayProfile)
        self.assertIs(profile.layout, OBJECT_CLASS_416)
        self.assertEqual(profile.input_size, 320)
        self.assertEqual(profile.threshold, 0.4)
        self.assertTrue(profile.select_cfg.reduce_to_single_best)
        self.assertEqual(profile.labels, "models/labels.txt")
        self.assertEqual(profile.model, "models/detect.tflite")
        self.assertEqual(profile.notes, "front camera")

    def test_defaults(self) -> None:
        profile = load_overlay_profile(self._write_profile({"schema_version": 1}))
        self.assertIs(profile.layout, YOLO_TINY_416_TWO_CLASS)
        self.assertEqual(profile.input_size, 416)
        self.assertEqual(profile.threshold, 0.5)
        self.assertFalse(profile.reduce_to_single_best)
        self.assertIsNone(profile.labels)

    def test_inline_layout(self) -> None:
        path = self._write_profile(
            {
                "schema_version": 1,
                "layout": {
                    "record_stride": 7,
                    "record_count": 2535,
                    "encoding": "object_class",
                    "object_confidence_offset": 4,
                    "class_index_offset": 5,
                    "class_confidence_offset": 6,
                },
            }
        )
        profile = load_overlay_profile(path)
        self.assertEqual(profile.layout.record_count, 2535)
        self.assertIsInstance(profile.layout.confidence, ObjectClassConfidence)

    def test_unknown_keys_rejected(self) -> None:
        with self.assertRaises(ValueError):
            load_overlay_profile(self._write_profile({"schema_version": 1, "extra": 123}))

    def test_invalid_layout_rejected(self) -> None:
        path = self._write_profile(
            {
                "schema_version": 1,
                "layout": {
                    "record_stride": 5,
                    "record_count": 1,
                    "encoding": "single_confidence",
                    "confidence_offset": 4,
                    "class_score_offsets": [5, 7],
                },
            }
        )
        with self.assertRaises(ValueError):
            load_overlay_profile(path)

    def test_invalid_values_rejected(self) -> None:
        for payload in (
            {"schema_version": 2},
            {"schema_version": 1, "threshold": 1.5},
            {"schema_version": 1, "threshold": "high"},
            {"schema_version": 1, "input_size": 16},
            {"schema_version": 1, "reduce_to_single_best": "yes"},
            {"schema_version": 1, "labels": 3},
        ):
            with self.assertRaises(ValueError, msg=repr(payload)):
                load_overlay_profile(self._write_profile(payload))

    def test_threshold_range_matches_select_config(self) -> None:
        profile = load_overlay_profile(self._write_profile({"schema_version": 1, "threshold": 1.0}))
        self.assertEqual(profile.select_cfg.threshold, 1.0)
        with self.assertRaises(ValueError):
            OverlayProfile(schema_version=1, threshold=-0.1)

    def test_missing_file(self) -> None:
        with self.assertRaises(FileNotFoundError):
            load_overlay_profile(Path(tempfile.gettempdir()) / "no-such-overlay-profile.json")

    def test_not_an_object(self) -> None:
        with self.assertRaises(ValueError):
            load_overlay_profile(self._write_profile([1, 2, 3]))  # type: ignore[arg-type]


if __name__ == "__main__":
    unittest.main()
