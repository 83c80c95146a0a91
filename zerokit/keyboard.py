"""Buffering of typed keys for readers that wait for input."""

from __future__ import annotations

import threading
from collections import deque

__all__ = ["KeyboardBuffer", "KEYBOARD_BUFFER_MAX"]

KEYBOARD_BUFFER_MAX = 128


class KeyboardBuffer:
    """Keys in the order typed; when full, the oldest key is dropped."""

    def __init__(self, capacity: int = KEYBOARD_BUFFER_MAX) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._keys: deque[str] = deque(maxlen=capacity)
        self._ready = threading.Condition()

    @property
    def pending(self) -> int:
        """Number of keys waiting to be read."""
        with self._ready:
            return len(self._keys)

    def key_entered(self, key: str) -> None:
        """Record one typed character."""
        if not isinstance(key, str) or len(key) != 1:
            raise ValueError("a key is a single character")
        with self._ready:
            self._keys.append(key)
            self._ready.notify_all()

    def request(self, total: int, timeout: float | None = None) -> str:
        """Wait until ``total`` keys are buffered, then remove and return them.

        Raises TimeoutError if they do not arrive within ``timeout`` seconds.
        """
        if not 0 <= total <= self.capacity:
            raise ValueError(f"can request between 0 and {self.capacity} keys")
        with self._ready:
            if not self._ready.wait_for(lambda: len(self._keys) >= total, timeout):
                raise TimeoutError(f"{total} keys did not arrive in time")
            return "".join(self._keys.popleft() for _ in range(total))