"""Drives, the block devices carved out of their partitions, and their registry."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

__all__ = [
    "BlockRangeError",
    "PartitionTable",
    "MemoryDrive",
    "BlockDevice",
    "DriveRegistry",
    "MAX_DRIVES",
    "MAX_BLKDEVS",
]

MAX_DRIVES = 10
MAX_BLKDEVS = 10
DEFAULT_BLOCK_SIZE = 512


class BlockRangeError(IndexError):
    """Raised when a read or write falls outside a drive or block device."""


class PartitionTable(Protocol):
    """What a drive needs to describe its partitions, numbered from 1."""

    count: int

    def start(self, number: int) -> int: ...

    def length(self, number: int) -> int: ...


def _block_count(data: bytes, block_size: int) -> int:
    return -(-len(data) // block_size)


class MemoryDrive:
    """A drive whose blocks are kept in memory."""

    def __init__(
        self,
        block_size: int = DEFAULT_BLOCK_SIZE,
        block_count: int = 2048,
        partitions: PartitionTable | None = None,
    ) -> None:
        if block_size <= 0:
            raise ValueError("block size must be positive")
        if block_count <= 0:
            raise ValueError("block count must be positive")
        self.id: int | None = None
        self.block_size = block_size
        self.maxlba = block_count
        self.partitions = partitions
        self._data = bytearray(block_size * block_count)

    def _check(self, lba: int, count: int) -> None:
        if lba < 0 or count < 0 or lba + count > self.maxlba:
            raise BlockRangeError(
                f"blocks {lba}..{lba + count} lie outside a drive of {self.maxlba} blocks"
            )

    def read_lba(self, lba: int, count: int = 1) -> bytes:
        """Return ``count`` blocks starting at block ``lba``."""
        self._check(lba, count)
        start = lba * self.block_size
        return bytes(self._data[start : start + count * self.block_size])

    def write_lba(self, lba: int, data: bytes) -> None:
        """Write ``data`` from block ``lba``; a partial last block is zero-padded."""
        count = _block_count(data, self.block_size)
        self._check(lba, count)
        start = lba * self.block_size
        padded = bytes(data).ljust(count * self.block_size, b"\0")
        self._data[start : start + len(padded)] = padded


class BlockDevice:
    """A window ``[min_lba, max_lba)`` of a parent drive, addressed from 0."""

    def __init__(self, parent: MemoryDrive, min_lba: int, max_lba: int, block_size: int) -> None:
        if max_lba < min_lba:
            raise ValueError("max_lba must not be below min_lba")
        self.parent = parent
        self.min_lba = min_lba
        self.max_lba = max_lba
        self.block_size = block_size

    @property
    def length(self) -> int:
        """Number of blocks in the device."""
        return self.max_lba - self.min_lba

    def _check(self, lba: int, count: int) -> None:
        if lba < 0 or count < 0 or lba + count > self.length:
            raise BlockRangeError(
                f"blocks {lba}..{lba + count} lie outside a device of {self.length} blocks"
            )

    def read_lba(self, lba: int, count: int = 1) -> bytes:
        """Return ``count`` blocks starting at block ``lba`` of the device."""
        self._check(lba, count)
        return self.parent.read_lba(self.min_lba + lba, count)

    def write_lba(self, lba: int, data: bytes) -> None:
        """Write ``data`` starting at block ``lba`` of the device."""
        self._check(lba, _block_count(data, self.block_size))
        self.parent.write_lba(self.min_lba + lba, data)


class DriveRegistry:
    """Numbers drives and creates one block device per partition."""

    def __init__(self, on_blockdev: Callable[[BlockDevice], object] | None = None) -> None:
        self.on_blockdev = on_blockdev
        self.drives: list[MemoryDrive] = []
        self.blockdevs: list[BlockDevice] = []

    def register_drive(self, drive: MemoryDrive) -> list[BlockDevice]:
        """Register ``drive`` and return the block devices made from it."""
        if len(self.drives) >= MAX_DRIVES:
            raise OverflowError(f"at most {MAX_DRIVES} drives can be registered")
        drive.id = len(self.drives)
        self.drives.append(drive)

        table = drive.partitions
        if table is None:
            return []
        created = []
        for number in range(1, table.count + 1):
            if len(self.blockdevs) >= MAX_BLKDEVS:
                raise OverflowError(f"at most {MAX_BLKDEVS} block devices can be registered")
            start = table.start(number)
            device = BlockDevice(drive, start, start + table.length(number), drive.block_size)
            self.blockdevs.append(device)
            created.append(device)
            if self.on_blockdev is not None:
                self.on_blockdev(device)
        return created

    def find_blockdev(self, index: int) -> BlockDevice:
        """Return the block device registered at position ``index``."""
        if not 0 <= index < len(self.blockdevs):
            raise IndexError(f"no block device number {index}")
        return self.blockdevs[index]