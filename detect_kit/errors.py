from __future__ import annotations


class DetectKitError(Exception):
    """
    Base class for errors raised by detect_kit.
    """


class InvalidLayout(DetectKitError, ValueError):
    """
    A TensorLayout was constructed with offsets that cannot describe a record.
    """


class LayoutMismatch(DetectKitError, ValueError):
    """
    The output buffer is shorter than the layout says it must be.

    Raised before any detection is produced. Callers running a camera loop
    should drop the frame and keep going.
    """

    def __init__(self, expected: int, actual: int):
        self.expected = int(expected)
        self.actual = int(actual)
        super().__init__(
            f"Output buffer has {self.actual} floats, layout needs at least {self.expected}."
        )
