"""The initial ramdisk image: building it, writing it out, and reading it."""

from __future__ import annotations

import struct
import sys
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

__all__ = [
    "InitrdError",
    "InitrdEntry",
    "Initrd",
    "build_initrd",
    "write_initrd",
    "main",
    "INITRD_MAGIC",
    "NAME_MAX_LEN",
]

INITRD_MAGIC = 0x12345678
NAME_MAX_LEN = 24

_SUPERBLOCK = struct.Struct("<III")
_ENTRY = struct.Struct(f"<II{NAME_MAX_LEN}s")


class InitrdError(ValueError):
    """Raised for malformed images and unknown entries."""


@dataclass(frozen=True)
class InitrdEntry:
    name: str
    offset: int
    length: int


def _encode_name(name: str) -> bytes:
    raw = name.encode()
    if b"\0" in raw or len(raw) >= NAME_MAX_LEN:
        raise InitrdError(f"entry name {name!r} must be under {NAME_MAX_LEN} bytes")
    return raw


def build_initrd(files: Mapping[str, bytes] | Iterable[tuple[str, bytes]]) -> bytes:
    """Return an image holding ``files``, given as names and contents, in order."""
    items = list(files.items()) if isinstance(files, Mapping) else list(files)
    offset = _SUPERBLOCK.size + _ENTRY.size * len(items)
    table = []
    for name, content in items:
        table.append(_ENTRY.pack(offset, len(content), _encode_name(name)))
        offset += len(content)
    header = _SUPERBLOCK.pack(INITRD_MAGIC, _SUPERBLOCK.size, len(items))
    return b"".join([header, *table, *(bytes(content) for _, content in items)])


def write_initrd(out_path: str | Path, paths: Sequence[str | Path]) -> None:
    """Write an image to ``out_path`` holding each file under its path as given."""
    files = [(str(path), Path(path).read_bytes()) for path in paths]
    Path(out_path).write_bytes(build_initrd(files))


@dataclass(frozen=True)
class Initrd:
    """A parsed image."""

    data: bytes
    entries: tuple[InitrdEntry, ...]

    @classmethod
    def from_bytes(cls, data: bytes) -> Initrd:
        """Parse an image, checking its magic number and entry bounds."""
        data = bytes(data)
        if len(data) < _SUPERBLOCK.size:
            raise InitrdError("image is too short for a superblock")
        magic, entries_offset, count = _SUPERBLOCK.unpack_from(data)
        if magic != INITRD_MAGIC:
            raise InitrdError(f"bad magic number {magic:#x}")
        if entries_offset + count * _ENTRY.size > len(data):
            raise InitrdError("entry table runs past the end of the image")
        entries = []
        for position in range(count):
            offset, length, raw = _ENTRY.unpack_from(data, entries_offset + position * _ENTRY.size)
            if offset + length > len(data):
                raise InitrdError("entry contents run past the end of the image")
            try:
                name = raw.split(b"\0", 1)[0].decode()
            except UnicodeDecodeError as exc:
                raise InitrdError("entry name is not valid text") from exc
            entries.append(InitrdEntry(name=name, offset=offset, length=length))
        return cls(data=data, entries=tuple(entries))

    def names(self) -> list[str]:
        """Names of the entries, in image order."""
        return [entry.name for entry in self.entries]

    def size_of(self, name: str) -> int:
        """Length in bytes of the first entry called ``name``."""
        for entry in self.entries:
            if entry.name == name:
                return entry.length
        raise InitrdError(f"no entry named {name!r}")

    def read(self, name: str, length: int | None = None) -> bytes:
        """Return up to ``length`` bytes of the last entry called ``name``.

        An unknown name reads as no bytes at all.
        """
        entry = next((e for e in reversed(self.entries) if e.name == name), None)
        if entry is None:
            return b""
        size = entry.length if length is None else max(0, min(length, entry.length))
        return self.data[entry.offset : entry.offset + size]


def main(argv: Sequence[str] | None = None) -> int:
    """Command line entry: build an image from files."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) < 2:
        print("Format: makeinitrd <initrd out> <file1> <file2> ...", file=sys.stderr)
        return 1
    try:
        write_initrd(args[0], args[1:])
    except (OSError, InitrdError) as exc:
        print(f"makeinitrd: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())