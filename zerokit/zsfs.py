"""The ZSFS file system: directories, files and the block chains behind them."""

from __future__ import annotations

import errno
from collections.abc import Iterator
from dataclasses import dataclass

from zerokit.fsmanager import FsNode, FsType, NodeType
from zerokit.zsfs_layout import (
    ENTRY_DIR,
    ENTRY_FILE,
    FILE_DATA_LEN,
    ZSFS_DSE_IN_DS,
    ZSFS_TYPE,
    DirEntry,
    DirStructure,
    FileBlock,
    FreeBlockList,
    check,
    get_id,
)

__all__ = ["ZsfsError", "Zsfs", "ZsfsType", "FileInode", "DirInode"]


class ZsfsError(OSError):
    """Raised when a ZSFS operation cannot be carried out."""


@dataclass(frozen=True)
class FileInode:
    """Where a file's directory entry lives: the DS block and slot."""

    ds_blk_idx: int
    ds_entry_idx: int


@dataclass(frozen=True)
class DirInode:
    """The first directory structure block of a directory."""

    blk_idx: int


def _device_blocks(device) -> int:
    length = getattr(device, "length", None)
    return device.maxlba if length is None else length


class Zsfs:
    """A mounted ZSFS file system on a formatted block device."""

    def __init__(self, device) -> None:
        self.device = device
        self._fbl = FreeBlockList(device)
        self.superblock = self._fbl.superblock
        self.fs_id = self.superblock.fs_id
        self._blocks = _device_blocks(device)

    # Block access

    def _read_ds(self, lba: int) -> DirStructure:
        return DirStructure.unpack(self.device.read_lba(lba, 1))

    def _write_ds(self, lba: int, ds: DirStructure) -> None:
        self.device.write_lba(lba, ds.pack())

    def _read_file(self, lba: int) -> FileBlock:
        return FileBlock.unpack(self.device.read_lba(lba, 1))

    def _write_file(self, lba: int, block: FileBlock) -> None:
        self.device.write_lba(lba, block.pack())

    def _chain(self, first: int) -> Iterator[tuple[int, DirStructure]]:
        lba = first
        while True:
            ds = self._read_ds(lba)
            yield lba, ds
            if not ds.linked_dir:
                return
            lba = ds.linked_dir

    def _allocate(self) -> int:
        index = self._fbl.allocate()
        if index >= self._blocks:
            self._fbl.free(index)
            raise OSError(errno.ENOSPC, "no free block left on the device")
        return index

    # Nodes

    def _file_node(self, name: str, ds_lba: int, slot: int) -> FsNode:
        return FsNode(name=name, type=NodeType.FILE, fs=self, inode=FileInode(ds_lba, slot))

    def _dir_node(self, name: str, blk_idx: int) -> FsNode:
        return FsNode(name=name, type=NodeType.DIRECTORY, fs=self, inode=DirInode(blk_idx))

    def _dir_block(self, directory: FsNode) -> int:
        if directory.type != NodeType.DIRECTORY or not isinstance(directory.inode, DirInode):
            raise NotADirectoryError(errno.ENOTDIR, f"{directory.name} is not a directory")
        return directory.inode.blk_idx

    def _file_inode(self, node: FsNode) -> FileInode:
        if node.type != NodeType.FILE or not isinstance(node.inode, FileInode):
            raise IsADirectoryError(errno.EISDIR, f"{node.name} is not a file")
        return node.inode

    def root(self) -> FsNode:
        """Return the node of the root directory."""
        return self._dir_node("/", self.superblock.rds_index)

    def finddir(self, directory: FsNode, name: str) -> FsNode | None:
        """Return the entry called ``name`` in ``directory``, or None."""
        first = self._dir_block(directory)
        if not name:
            return None
        for lba, ds in self._chain(first):
            for slot, entry in enumerate(ds.entries):
                if entry.name == name:
                    if entry.type == ENTRY_FILE:
                        return self._file_node(name, lba, slot)
                    return self._dir_node(name, entry.blk_idx)
        return None

    def open(self, path: str) -> FsNode:
        """Return the node at the absolute ``path``."""
        if not path.startswith("/"):
            raise ValueError("ZSFS paths must be absolute")
        node = self.root()
        for component in (part for part in path.split("/") if part):
            if node.type != NodeType.DIRECTORY:
                raise NotADirectoryError(errno.ENOTDIR, f"{node.name} is not a directory")
            found = self.finddir(node, component)
            if found is None:
                raise FileNotFoundError(errno.ENOENT, f"no such file or directory: {path}")
            node = found
        return node

    def readdir(self, directory: FsNode, index: int) -> str | None:
        """Return the name in slot ``index`` of ``directory``, or None past the end.

        Listing stops at the first free slot.
        """
        if index < 0:
            raise IndexError("directory index must not be negative")
        for _lba, ds in self._chain(self._dir_block(directory)):
            if index < ZSFS_DSE_IN_DS:
                entry = ds.entries[index]
                return None if entry.is_free() else entry.name
            index -= ZSFS_DSE_IN_DS
        return None

    def length(self, node: FsNode) -> int:
        """Return the length of a file in bytes."""
        inode = self._file_inode(node)
        return self._read_ds(inode.ds_blk_idx).entries[inode.ds_entry_idx].entry_len

    # File contents

    def _follow(self, block: FileBlock) -> FileBlock:
        if not block.next_blk:
            raise ZsfsError(errno.EIO, "file block chain ends early")
        return self._read_file(block.next_blk)

    def _advance(self, lba: int, block: FileBlock) -> tuple[int, FileBlock]:
        """Write ``block`` back and move to the next one, adding it if missing."""
        if not block.next_blk:
            new = self._allocate()
            self._write_file(new, FileBlock())
            block.next_blk = new
        self._write_file(lba, block)
        return block.next_blk, self._read_file(block.next_blk)

    def read(self, node: FsNode, offset: int, length: int) -> bytes:
        """Return up to ``length`` bytes of a file starting at ``offset``."""
        if offset < 0 or length < 0:
            raise ValueError("offset and length must not be negative")
        inode = self._file_inode(node)
        entry = self._read_ds(inode.ds_blk_idx).entries[inode.ds_entry_idx]
        end = min(offset + length, entry.entry_len)
        if offset >= end:
            return b""
        skip, pos = divmod(offset, FILE_DATA_LEN)
        block = self._read_file(entry.blk_idx)
        for _ in range(skip):
            block = self._follow(block)
        out = bytearray()
        remaining = end - offset
        while True:
            take = min(FILE_DATA_LEN - pos, remaining)
            out += block.data[pos : pos + take]
            remaining -= take
            if not remaining:
                return bytes(out)
            block = self._follow(block)
            pos = 0

    def write(self, node: FsNode, offset: int, data: bytes) -> int:
        """Write ``data`` into a file at ``offset``, growing it as needed."""
        if offset < 0:
            raise ValueError("offset must not be negative")
        data = bytes(data)
        inode = self._file_inode(node)
        if not data:
            return 0
        ds = self._read_ds(inode.ds_blk_idx)
        entry = ds.entries[inode.ds_entry_idx]
        lba = entry.blk_idx
        block = self._read_file(lba)
        skip, pos = divmod(offset, FILE_DATA_LEN)
        for _ in range(skip):
            lba, block = self._advance(lba, block)
        written = 0
        while True:
            take = min(FILE_DATA_LEN - pos, len(data) - written)
            buf = bytearray(block.data)
            buf[pos : pos + take] = data[written : written + take]
            block.data = bytes(buf)
            written += take
            if written == len(data):
                break
            lba, block = self._advance(lba, block)
            pos = 0
        self._write_file(lba, block)
        if offset + len(data) > entry.entry_len:
            entry.entry_len = offset + len(data)
            self._write_ds(inode.ds_blk_idx, ds)
        return len(data)

    # Creating and deleting

    @staticmethod
    def _check_name(name: str) -> None:
        if not name or "/" in name:
            raise ValueError(f"invalid entry name {name!r}")
        DirEntry(name=name).pack()

    def _fill(self, ds_lba: int, ds: DirStructure, slot: int, name: str, entry_type: int) -> FsNode:
        target = self._allocate()
        if entry_type == ENTRY_DIR:
            self._write_ds(target, DirStructure(parent_ds=ds_lba))
        else:
            self._write_file(target, FileBlock())
        ds.entries[slot] = DirEntry(type=entry_type, blk_idx=target, entry_len=0, name=name)
        self._write_ds(ds_lba, ds)
        if entry_type == ENTRY_DIR:
            return self._dir_node(name, target)
        return self._file_node(name, ds_lba, slot)

    def _create(self, parent: FsNode, name: str, entry_type: int) -> FsNode:
        first = self._dir_block(parent)
        self._check_name(name)
        if self.finddir(parent, name) is not None:
            raise FileExistsError(errno.EEXIST, f"{name} already exists")
        last_lba, last_ds = first, None
        for lba, ds in self._chain(first):
            slot = next((i for i, e in enumerate(ds.entries) if e.is_free()), None)
            if slot is not None:
                return self._fill(lba, ds, slot, name, entry_type)
            last_lba, last_ds = lba, ds
        linked = self._allocate()
        new_ds = DirStructure(parent_ds=last_lba)
        self._write_ds(linked, new_ds)
        last_ds.linked_dir = linked
        self._write_ds(last_lba, last_ds)
        return self._fill(linked, new_ds, 0, name, entry_type)

    def create_file(self, parent: FsNode, name: str) -> FsNode:
        """Create an empty file ``name`` in ``parent`` and return its node."""
        return self._create(parent, name, ENTRY_FILE)

    def create_dir(self, parent: FsNode, name: str) -> FsNode:
        """Create an empty directory ``name`` in ``parent`` and return its node."""
        return self._create(parent, name, ENTRY_DIR)

    def delete(self, node: FsNode) -> None:
        """Remove a file, or a directory that is empty."""
        if node.type == NodeType.FILE:
            inode = self._file_inode(node)
            ds = self._read_ds(inode.ds_blk_idx)
            lba = ds.entries[inode.ds_entry_idx].blk_idx
            while lba:
                block = self._read_file(lba)
                self._fbl.free(lba)
                lba = block.next_blk
            ds.entries[inode.ds_entry_idx] = DirEntry()
            self._write_ds(inode.ds_blk_idx, ds)
            return

        blk = self._dir_block(node)
        if blk == self.superblock.rds_index:
            raise ZsfsError(errno.EBUSY, "the root directory cannot be deleted")
        ds = self._read_ds(blk)
        if ds.linked_dir or not all(entry.is_free() for entry in ds.entries):
            raise ZsfsError(errno.ENOTEMPTY, f"directory {node.name} is not empty")
        self._fbl.free(blk)
        parent = self._read_ds(ds.parent_ds)
        parent.entries = [DirEntry() if e.blk_idx == blk else e for e in parent.entries]
        self._write_ds(ds.parent_ds, parent)


class ZsfsType(FsType):
    """The ZSFS file system type, for registration with a file system manager."""

    fs_type = ZSFS_TYPE

    def check_type(self, block: bytes) -> bool:
        return check(block)

    def get_id(self, block: bytes) -> int:
        return get_id(block)

    def mount(self, device) -> Zsfs:
        return Zsfs(device)