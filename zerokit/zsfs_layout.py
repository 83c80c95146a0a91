"""On-disk structures of the ZSFS file system and its free block list.

Every structure fills one 512-byte block, except the superblock, which
occupies the start of block 0.
"""

from __future__ import annotations

import errno
import struct
from dataclasses import dataclass, field

from zerokit.bitwise import bit_clear, bit_get, bit_set

__all__ = [
    "Superblock",
    "DirEntry",
    "DirStructure",
    "FileBlock",
    "FreeBlockList",
    "check",
    "get_id",
    "format_device",
    "ZSFS_TYPE",
    "ZSFS_MAGIC",
    "ZSFS_NAME_MAX_LEN",
    "ZSFS_DSE_IN_DS",
    "ZSFS_BLOCK_SIZE",
    "FILE_DATA_LEN",
    "DEFAULT_FS_ID",
    "ENTRY_FILE",
    "ENTRY_DIR",
]

ZSFS_TYPE = 0
ZSFS_MAGIC = b"ZSFS"
ZSFS_MAGIC_LEN = 4
ZSFS_NAME_MAX_LEN = 24
ZSFS_DSE_IN_DS = 15
ZSFS_BLOCK_SIZE = 512
FILE_DATA_LEN = 508
DEFAULT_FS_ID = 0x1234ABCD

ENTRY_FILE = 0
ENTRY_DIR = 1

# Bits of the free block list looked at in each of its blocks.
FBL_BITS_PER_BLOCK = 512

_SUPERBLOCK = struct.Struct("<4s12xIIII")
_DSE = struct.Struct(f"<II{ZSFS_NAME_MAX_LEN}s")
_AUX = struct.Struct("<24xII")
_FILE = struct.Struct(f"<{FILE_DATA_LEN}sI")
_BLK_IDX_LIMIT = 1 << 31


def _need(data: bytes, size: int, what: str) -> None:
    if len(data) < size:
        raise ValueError(f"{what} needs {size} bytes, got {len(data)}")


@dataclass
class Superblock:
    """Block 0: magic, file system id and where the FBL and root directory live."""

    fs_id: int = DEFAULT_FS_ID
    fbl_index: int = 1
    fbl_len: int = 0
    rds_index: int = 0
    magic: bytes = ZSFS_MAGIC

    @property
    def fbl_blocks(self) -> int:
        """Number of blocks the free block list occupies."""
        return self.fbl_len // FBL_BITS_PER_BLOCK

    def pack(self) -> bytes:
        """Return the on-disk form of the superblock."""
        return _SUPERBLOCK.pack(
            self.magic, self.fs_id, self.fbl_index, self.fbl_len, self.rds_index
        )

    @classmethod
    def unpack(cls, data: bytes) -> Superblock:
        """Decode a superblock from the start of ``data``."""
        _need(data, _SUPERBLOCK.size, "superblock")
        magic, fs_id, fbl_index, fbl_len, rds_index = _SUPERBLOCK.unpack_from(data)
        return cls(
            fs_id=fs_id,
            fbl_index=fbl_index,
            fbl_len=fbl_len,
            rds_index=rds_index,
            magic=magic,
        )


@dataclass
class DirEntry:
    """A directory structure entry pointing at a file or a subdirectory."""

    type: int = ENTRY_FILE
    blk_idx: int = 0
    entry_len: int = 0
    name: str = ""

    def is_free(self) -> bool:
        """True if the slot holds no object."""
        return self.blk_idx == 0 and self.entry_len == 0

    @property
    def is_dir(self) -> bool:
        return self.type != ENTRY_FILE

    def pack(self) -> bytes:
        """Return the on-disk form of the entry."""
        if self.type not in (ENTRY_FILE, ENTRY_DIR):
            raise ValueError("entry type is 0 (file) or 1 (directory)")
        if not 0 <= self.blk_idx < _BLK_IDX_LIMIT:
            raise ValueError("block index must fit in 31 bits")
        raw = self.name.encode()
        if b"\0" in raw or len(raw) >= ZSFS_NAME_MAX_LEN:
            raise ValueError(f"entry names are shorter than {ZSFS_NAME_MAX_LEN} bytes")
        return _DSE.pack(self.type | (self.blk_idx << 1), self.entry_len, raw)

    @classmethod
    def unpack(cls, data: bytes) -> DirEntry:
        """Decode an entry from the start of ``data``."""
        _need(data, _DSE.size, "directory entry")
        word, entry_len, raw = _DSE.unpack_from(data)
        name = raw.split(b"\0", 1)[0].decode("utf-8", errors="replace")
        return cls(type=word & 1, blk_idx=word >> 1, entry_len=entry_len, name=name)


def _empty_entries() -> list[DirEntry]:
    return [DirEntry() for _ in range(ZSFS_DSE_IN_DS)]


@dataclass
class DirStructure:
    """One block of a directory: 15 entries and the auxiliary entry."""

    entries: list[DirEntry] = field(default_factory=_empty_entries)
    parent_ds: int = 0
    linked_dir: int = 0

    def pack(self) -> bytes:
        """Return the on-disk form of the block."""
        if len(self.entries) != ZSFS_DSE_IN_DS:
            raise ValueError(f"a directory block holds exactly {ZSFS_DSE_IN_DS} entries")
        body = b"".join(entry.pack() for entry in self.entries)
        return body + _AUX.pack(self.parent_ds, self.linked_dir)

    @classmethod
    def unpack(cls, data: bytes) -> DirStructure:
        """Decode a directory block."""
        _need(data, ZSFS_BLOCK_SIZE, "directory structure")
        entries = [
            DirEntry.unpack(data[offset : offset + _DSE.size])
            for offset in range(0, ZSFS_DSE_IN_DS * _DSE.size, _DSE.size)
        ]
        parent_ds, linked_dir = _AUX.unpack_from(data, ZSFS_DSE_IN_DS * _DSE.size)
        return cls(entries=entries, parent_ds=parent_ds, linked_dir=linked_dir)


@dataclass
class FileBlock:
    """One block of file contents and the index of the next block, 0 at the end."""

    data: bytes = b""
    next_blk: int = 0

    def pack(self) -> bytes:
        """Return the on-disk form of the block."""
        if len(self.data) > FILE_DATA_LEN:
            raise ValueError(f"a file block holds at most {FILE_DATA_LEN} bytes")
        return _FILE.pack(bytes(self.data), self.next_blk)

    @classmethod
    def unpack(cls, data: bytes) -> FileBlock:
        """Decode a file block; ``data`` keeps all 508 bytes."""
        _need(data, ZSFS_BLOCK_SIZE, "file block")
        content, next_blk = _FILE.unpack_from(data)
        return cls(data=content, next_blk=next_blk)


def check(block: bytes) -> bool:
    """Return True if ``block``, a device's first block, holds a ZSFS superblock."""
    return bytes(block[:ZSFS_MAGIC_LEN]) == ZSFS_MAGIC


def get_id(block: bytes) -> int:
    """Return the file system id stored in a superblock."""
    return Superblock.unpack(block).fs_id


def _device_blocks(device) -> int:
    length = getattr(device, "length", None)
    return device.maxlba if length is None else length


def format_device(device, fs_id: int = DEFAULT_FS_ID) -> Superblock:
    """Write an empty ZSFS onto ``device`` and return its superblock."""
    if device.block_size != ZSFS_BLOCK_SIZE:
        raise ValueError(f"ZSFS needs {ZSFS_BLOCK_SIZE}-byte blocks")
    blocks = _device_blocks(device)
    fbl_len = (blocks // device.block_size + 1) * FBL_BITS_PER_BLOCK
    sb = Superblock(fs_id=fs_id, fbl_index=1, fbl_len=fbl_len)
    sb.rds_index = sb.fbl_index + sb.fbl_blocks
    if sb.rds_index >= blocks:
        raise ValueError(f"a device of {blocks} blocks is too small for ZSFS")

    empty = bytes(ZSFS_BLOCK_SIZE)
    for index in range(sb.fbl_index, sb.fbl_index + sb.fbl_blocks):
        device.write_lba(index, empty)

    # Mark the superblock, the free block list and the root directory as used.
    first = bytearray(ZSFS_BLOCK_SIZE)
    for index in range(sb.rds_index + 1):
        bit_set(first, index)
    device.write_lba(sb.fbl_index, bytes(first))

    device.write_lba(sb.rds_index, DirStructure().pack())
    device.write_lba(0, sb.pack())
    return sb


class FreeBlockList:
    """The bitmap of used blocks on a formatted device."""

    def __init__(self, device) -> None:
        block = device.read_lba(0, 1)
        if not check(block):
            raise ValueError("device does not hold a ZSFS file system")
        self.device = device
        self.superblock = Superblock.unpack(block)

    def _locate(self, index: int) -> tuple[int, int]:
        if not 0 <= index < self.superblock.fbl_len:
            raise IndexError(f"block {index} is outside the free block list")
        block_no, bit = divmod(index, FBL_BITS_PER_BLOCK)
        return self.superblock.fbl_index + block_no, bit

    def get(self, index: int) -> int:
        """Return 1 if block ``index`` is in use, else 0."""
        lba, bit = self._locate(index)
        return bit_get(self.device.read_lba(lba, 1), bit)

    def _update(self, index: int, change) -> None:
        lba, bit = self._locate(index)
        block = bytearray(self.device.read_lba(lba, 1))
        change(block, bit)
        self.device.write_lba(lba, bytes(block))

    def set(self, index: int) -> None:
        """Mark block ``index`` as used."""
        self._update(index, bit_set)

    def clear(self, index: int) -> None:
        """Mark block ``index`` as free."""
        self._update(index, bit_clear)

    def allocate(self) -> int:
        """Mark the lowest free block as used and return its index."""
        cached_lba = None
        block = b""
        for index in range(self.superblock.fbl_len):
            lba, bit = self._locate(index)
            if lba != cached_lba:
                block = self.device.read_lba(lba, 1)
                cached_lba = lba
            if not bit_get(block, bit):
                self.set(index)
                return index
        raise OSError(errno.ENOSPC, "no free block left")

    def free(self, index: int) -> None:
        """Give block ``index`` back."""
        self.clear(index)