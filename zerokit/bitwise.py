"""Reading and writing single bits inside a mutable byte buffer.

Bit ``n`` lives in byte ``n // 8`` at position ``n % 8``, counting from the
least significant bit of that byte.
"""

from __future__ import annotations

__all__ = ["bit_set", "bit_clear", "bit_get"]


def _locate(index: int) -> tuple[int, int]:
    if index < 0:
        raise IndexError("bit index must not be negative")
    return divmod(index, 8)


def bit_set(mem: bytearray, index: int) -> None:
    """Set bit ``index`` of ``mem`` to 1."""
    byte, offset = _locate(index)
    mem[byte] |= 1 << offset


def bit_clear(mem: bytearray, index: int) -> None:
    """Set bit ``index`` of ``mem`` to 0."""
    byte, offset = _locate(index)
    mem[byte] &= ~(1 << offset) & 0xFF


def bit_get(mem: bytes | bytearray, index: int) -> int:
    """Return bit ``index`` of ``mem`` as 0 or 1."""
    byte, offset = _locate(index)
    return 1 if mem[byte] & (1 << offset) else 0