from __future__ import annotations

import threading
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class LatestSlot(Generic[T]):
    """
    Single-slot handoff between threads where the newest value wins.

    `put` overwrites whatever is waiting; `take` empties the slot. Values are
    expected to be immutable, so no copy is made on either side.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value: Optional[T] = None
        self._has_value = False
        self.overwritten = 0

    def put(self, value: T) -> None:
        with self._lock:
            if self._has_value:
                self.overwritten += 1
            self._value = value
            self._has_value = True

    def take(self) -> Optional[T]:
        with self._lock:
            if not self._has_value:
                return None
            value = self._value
            self._value = None
            self._has_value = False
            return value

    def peek(self) -> Optional[T]:
        with self._lock:
            return self._value if self._has_value else None

    @property
    def empty(self) -> bool:
        with self._lock:
            return not self._has_value
