"""A 16-bit Fibonacci linear-feedback shift register."""

from __future__ import annotations

from collections.abc import Iterator

__all__ = ["Lfsr", "DEFAULT_STATE"]

DEFAULT_STATE = 0xACF1
_MASK = 0xFFFF


class Lfsr:
    """Pseudo-random 16-bit generator with taps at bits 0, 2, 3 and 5."""

    def __init__(self, state: int = DEFAULT_STATE) -> None:
        self.start_state = state & _MASK
        self.state = self.start_state
        self.period = 0

    def seed(self, seed: int) -> None:
        """Record a new start state; the running register is left as it is."""
        self.start_state = seed & _MASK

    def next(self) -> int:
        """Shift the register once and return its new value."""
        s = self.state
        bit = (s ^ (s >> 2) ^ (s >> 3) ^ (s >> 5)) & 1
        self.state = (s >> 1) | (bit << 15)
        self.period += 1
        return self.state

    def __iter__(self) -> Iterator[int]:
        while True:
            yield self.next()