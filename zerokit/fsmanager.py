"""File system types, file system nodes, and matching devices to file systems."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import IntEnum
from typing import Any

__all__ = ["NodeType", "FsNode", "FsType", "FsManager", "MAX_FSES", "FS_NODE_NAME_MAXLEN"]

MAX_FSES = 5
FS_NODE_NAME_MAXLEN = 32


class NodeType(IntEnum):
    FILE = 0x01
    DIRECTORY = 0x02
    CHARDEVICE = 0x03
    BLOCKDEVICE = 0x04
    PIPE = 0x05
    SYMLINK = 0x06
    MOUNTPOINT = 0x08


@dataclass
class FsNode:
    """A named object in a file system; ``inode`` is file-system specific."""

    name: str
    type: NodeType
    fs: Any = None
    inode: Any = None
    offset: int = 0
    flags: int = 0

    def __post_init__(self) -> None:
        if len(self.name.encode()) >= FS_NODE_NAME_MAXLEN:
            raise ValueError(f"node names are shorter than {FS_NODE_NAME_MAXLEN} bytes")


class FsType(ABC):
    """A kind of file system that can recognise and mount block devices."""

    fs_type: int = 0

    @abstractmethod
    def check_type(self, block: bytes) -> bool:
        """Return True if ``block``, a device's first block, belongs to this type."""

    @abstractmethod
    def get_id(self, block: bytes) -> int:
        """Return the file system id recorded in a device's first block."""

    @abstractmethod
    def mount(self, device) -> Any:
        """Return a file system instance working on ``device``."""


class FsManager:
    """Holds the known file system types and the file systems in use."""

    def __init__(self) -> None:
        self._types: list[FsType] = []
        self._active: list[tuple[int, Any]] = []

    def register_fstype(self, fstype: FsType) -> None:
        """Make ``fstype`` available for matching devices."""
        if len(self._types) >= MAX_FSES:
            raise OverflowError(f"at most {MAX_FSES} file system types can be registered")
        self._types.append(fstype)

    def check(self, device) -> Any | None:
        """Mount ``device`` with the first type that claims it.

        Returns the mounted file system, or None if no type recognises it.
        """
        block = device.read_lba(0, 1)
        for fstype in self._types:
            if fstype.check_type(block):
                filesystem = fstype.mount(device)
                self.add_active(fstype.get_id(block), filesystem)
                return filesystem
        return None

    def add_active(self, fs_id: int, filesystem: Any) -> None:
        """Record ``filesystem`` as active under ``fs_id``."""
        if len(self._active) >= MAX_FSES:
            raise OverflowError(f"at most {MAX_FSES} file systems can be active")
        self._active.append((fs_id, filesystem))

    def find_id(self, fs_id: int) -> Any | None:
        """Return the active file system with id ``fs_id``, or None."""
        return next((fs for known, fs in self._active if known == fs_id), None)