from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional

from detect_kit.errors import LayoutMismatch
from detect_kit.types import DetectionSet

from .channel import LatestSlot

logger = logging.getLogger(__name__)


class FrameAnalyzer:
    """
    Runs detection on one dedicated worker thread with keep-only-latest backpressure.

    The capture loop calls `submit(frame)` for every frame. A frame is accepted
    only when the worker is idle; while a frame is in flight new ones are dropped,
    not queued. Results go into a `LatestSlot`, and the rendering thread picks up
    the newest one with `poll()`.

    A frame whose output does not match the tensor layout is logged and dropped.
    Any other failure stops the analyzer and is re-raised from `poll()`.
    """

    def __init__(self, analyze: Callable[[Any], DetectionSet], *, name: str = "frame-analyzer") -> None:
        self._analyze = analyze
        self._name = name
        self.results: LatestSlot[DetectionSet] = LatestSlot()

        self._lock = threading.Lock()
        self._wake = threading.Event()
        self._stop_event = threading.Event()
        self._idle = threading.Event()
        self._idle.set()
        self._pending: Any = None
        self._busy = False
        self._error: Optional[BaseException] = None
        self._thread: Optional[threading.Thread] = None

        self.submitted = 0
        self.dropped_busy = 0
        self.dropped_invalid = 0
        self.processed = 0

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def error(self) -> Optional[BaseException]:
        return self._error

    def start(self) -> "FrameAnalyzer":
        if self.running:
            return self
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._loop, name=self._name, daemon=True)
        self._thread.start()
        return self

    def submit(self, frame: Any) -> bool:
        """
        Hand a frame to the worker. Returns False if it was dropped because the
        worker is still busy with an earlier frame.
        """

        if self._error is not None:
            raise RuntimeError("Frame analyzer has stopped after an error.") from self._error
        if not self.running:
            raise RuntimeError("Frame analyzer is not running; call start() first.")

        with self._lock:
            if self._busy:
                self.dropped_busy += 1
                return False
            self._busy = True
            self._idle.clear()
            self._pending = frame
            self.submitted += 1
        self._wake.set()
        return True

    def poll(self) -> Optional[DetectionSet]:
        """
        Newest finished DetectionSet, or None if nothing new arrived since the last poll.
        """

        if self._error is not None:
            raise self._error
        return self.results.take()

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        return self._idle.wait(timeout)

    def close(self, timeout: Optional[float] = 2.0) -> None:
        self._stop_event.set()
        self._wake.set()
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                logger.warning("Worker thread %s did not stop within %.1fs", self._name, timeout or 0.0)
            self._thread = None

        close = getattr(self._analyze, "close", None)
        if callable(close):
            close()

    def __enter__(self) -> "FrameAnalyzer":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _loop(self) -> None:
        while True:
            self._wake.wait()
            self._wake.clear()
            if self._stop_event.is_set():
                break

            with self._lock:
                frame = self._pending
                self._pending = None

            try:
                result = self._analyze(frame)
            except LayoutMismatch as exc:
                self.dropped_invalid += 1
                logger.warning("Dropping frame: %s", exc)
            except Exception as exc:
                logger.exception("Frame analysis failed; stopping %s", self._name)
                self._error = exc
                self._finish_frame()
                break
            else:
                self.processed += 1
                self.results.put(result)
            self._finish_frame()

    def _finish_frame(self) -> None:
        with self._lock:
            self._busy = False
            self._idle.set()
