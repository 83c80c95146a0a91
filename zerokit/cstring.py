"""Integer/text conversions and the small formatter used for console output."""

from __future__ import annotations

import re

__all__ = ["itoa", "itoh", "atoi", "kformat"]

_HEX_DIGITS = "0123456789ABCDEF"
_DIGITS = re.compile(r"[0-9]*")
_DIRECTIVE = re.compile(r"%(.?)", re.DOTALL)
_STRING_LIMIT = 20


def _to_int32(number: int) -> int:
    """Wrap ``number`` to a signed 32-bit value."""
    return (int(number) + 0x80000000) % 0x100000000 - 0x80000000


def itoa(number: int) -> str:
    """Return the decimal text of ``number`` taken as a 32-bit signed int."""
    value = _to_int32(number)
    digits = str(abs(value))
    return f"-{digits}" if value < 0 else digits


def itoh(number: int) -> str:
    """Return ``number`` as exactly eight upper-case hexadecimal digits."""
    value = int(number) & 0xFFFFFFFF
    return "".join(_HEX_DIGITS[(value >> shift) & 0xF] for shift in range(28, -4, -4))


def atoi(text: str) -> int:
    """Parse the decimal digits at the start of ``text``.

    Parsing stops at the first non-digit. A leading ``-`` negates the result,
    but since it is itself not a digit the scan stops there and yields 0.
    """
    digits = _DIGITS.match(text).group()
    value = _to_int32(int(digits)) if digits else 0
    return _to_int32(-value) if text.startswith("-") else value


def _char(arg: int | str) -> str:
    if isinstance(arg, str):
        if len(arg) != 1:
            raise ValueError("%c needs a single character")
        return arg
    return chr(int(arg) & 0xFF)


def _string(arg: object) -> str:
    return str(arg).split("\0", 1)[0][:_STRING_LIMIT]


_CONVERSIONS = {
    "d": itoa,
    "x": itoh,
    "s": _string,
    "c": _char,
}


def kformat(fmt: str, *args: object) -> str:
    """Format ``fmt`` with the directives %d, %x, %s and %c.

    %d prints a signed decimal, %x eight hex digits, %s at most 20
    characters of a string, %c one character.
    """
    remaining = iter(args)

    def replace(match: re.Match[str]) -> str:
        spec = match.group(1)
        convert = _CONVERSIONS.get(spec)
        if convert is None:
            raise ValueError(f"unsupported format directive %{spec}")
        try:
            arg = next(remaining)
        except StopIteration:
            raise TypeError("not enough arguments for format string") from None
        return convert(arg)

    return _DIRECTIVE.sub(replace, fmt)