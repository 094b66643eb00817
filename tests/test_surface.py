import unittest

import numpy as np

from camera_overlay.surface import OverlaySurface
from detect_kit.types import Detection, DetectionSet
from detect_kit.visualize import draw_detections, format_label


def _box(conf: float = 0.93, label: str = "dog") -> Detection:
    return Detection(x=0.5, y=0.5, w=0.5, h=0.5, confidence=conf, label=label)


class TestOverlaySurface(unittest.TestCase):
    def test_render_draws_then_clears_on_empty_frame(self) -> None:
        surface = OverlaySurface(200, 100)
        surface.render(DetectionSet((_box(),)))
        drawn = surface.presented()
        self.assertGreater(int(drawn[:, :, 3].max()), 0)

        surface.render(DetectionSet())
        self.assertEqual(int(surface.presented().max()), 0)
        self.assertEqual(surface.presented_count, 2)

    def test_frame_presents_even_when_drawing_fails(self) -> None:
        surface = OverlaySurface(50, 50)
        with self.assertRaises(RuntimeError):
            with surface.frame() as canvas:
                canvas[0, 0] = (255, 255, 255, 255)
                raise RuntimeError("draw failed")
        self.assertEqual(surface.presented_count, 1)
        self.assertEqual(int(surface.presented()[0, 0, 3]), 255)

        # Lock was released, so the next frame can be acquired and starts clean.
        with surface.frame() as canvas:
            self.assertEqual(int(canvas.max()), 0)

    def test_nested_frame_rejected(self) -> None:
        surface = OverlaySurface(10, 10)
        with surface.frame():
            with self.assertRaises(RuntimeError):
                with surface.frame():
                    pass

    def test_composite_only_changes_overlay_pixels(self) -> None:
        surface = OverlaySurface(100, 100)
        surface.render(DetectionSet((_box(),)))
        frame = np.full((100, 100, 3), 50, dtype=np.uint8)
        out = surface.composite(frame)
        self.assertEqual(out.shape, frame.shape)
        self.assertEqual(tuple(int(v) for v in out[99, 99]), (50, 50, 50))
        # Left edge of the box sits at x=25; red is (0, 0, 255) in BGR.
        self.assertEqual(tuple(int(v) for v in out[50, 25]), (0, 0, 255))

    def test_composite_scales_overlay_to_frame(self) -> None:
        surface = OverlaySurface(100, 100)
        surface.render(DetectionSet((_box(),)))
        out = surface.composite(np.zeros((200, 300, 3), dtype=np.uint8))
        self.assertEqual(out.shape, (200, 300, 3))

    def test_invalid_size(self) -> None:
        with self.assertRaises(ValueError):
            OverlaySurface(0, 10)


class TestDrawDetections(unittest.TestCase):
    def test_label_has_two_decimals(self) -> None:
        self.assertEqual(format_label(_box(conf=0.9)), "dog 0.90")
        self.assertEqual(format_label(_box(conf=0.456)), "dog 0.46")

    def test_draws_on_bgr_canvas(self) -> None:
        canvas = np.zeros((100, 100, 3), dtype=np.uint8)
        out = draw_detections(canvas, [_box()])
        self.assertIs(out, canvas)
        self.assertEqual(tuple(int(v) for v in canvas[50, 25]), (0, 0, 255))

    def test_out_of_frame_and_non_finite_boxes_do_not_raise(self) -> None:
        canvas = np.zeros((100, 100, 3), dtype=np.uint8)
        draw_detections(
            canvas,
            [
                Detection(x=5.0, y=-3.0, w=1.0, h=1.0, confidence=0.9, label="far"),
                Detection(x=float("nan"), y=0.5, w=0.1, h=0.1, confidence=0.9, label="nan"),
            ],
        )

    def test_rejects_bad_canvas(self) -> None:
        with self.assertRaises(ValueError):
            draw_detections(np.zeros((10, 10), dtype=np.uint8), [_box()])


if __name__ == "__main__":
    unittest.main()
