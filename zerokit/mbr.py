"""Master boot record partition tables."""

from __future__ import annotations

import struct
from collections.abc import Sequence
from dataclasses import dataclass

__all__ = [
    "MbrPartition",
    "MbrPartitionTable",
    "partition_offset",
    "parse_partition_table",
    "setup_partition_table",
    "MAX_MBR_PARTITIONS",
    "MBR_PARTINFO_START",
]

MAX_MBR_PARTITIONS = 4
MBR_PART_1 = 0x1BE
MBR_PART_2 = 0x1CE
MBR_PART_3 = 0x1DE
MBR_PART_4 = 0x1EE
MBR_PARTINFO_START = MBR_PART_1

_ENTRY = struct.Struct("<BBHBBHII")


def partition_offset(number: int) -> int:
    """Return the byte offset of entry ``number`` in the boot sector, or 0."""
    # Number 4 shares slot 3's offset in the kernel's table.
    return {1: MBR_PART_1, 2: MBR_PART_2, 3: MBR_PART_3, 4: MBR_PART_3}.get(number, 0)


def _chs(sector: int, cylinder: int) -> int:
    if not 0 <= sector < 64:
        raise ValueError("CHS sector must fit in 6 bits")
    if not 0 <= cylinder < 1024:
        raise ValueError("CHS cylinder must fit in 10 bits")
    return sector | (cylinder << 6)


@dataclass(frozen=True)
class MbrPartition:
    """One 16-byte partition entry."""

    is_bootable: int = 0
    starting_head: int = 0
    starting_sector: int = 0
    starting_cylinder: int = 0
    sys_id: int = 0
    ending_head: int = 0
    ending_sector: int = 0
    ending_cylinder: int = 0
    start_lba: int = 0
    total_sectors: int = 0

    @property
    def bootable(self) -> bool:
        return self.is_bootable == 0x80

    def pack(self) -> bytes:
        """Return the on-disk form of the entry."""
        return _ENTRY.pack(
            self.is_bootable,
            self.starting_head,
            _chs(self.starting_sector, self.starting_cylinder),
            self.sys_id,
            self.ending_head,
            _chs(self.ending_sector, self.ending_cylinder),
            self.start_lba,
            self.total_sectors,
        )

    @classmethod
    def unpack(cls, data: bytes) -> MbrPartition:
        """Decode an entry from the first 16 bytes of ``data``."""
        if len(data) < _ENTRY.size:
            raise ValueError("partition entry needs 16 bytes")
        boot, head, start_chs, sys_id, end_head, end_chs, lba, total = _ENTRY.unpack_from(data)
        return cls(
            is_bootable=boot,
            starting_head=head,
            starting_sector=start_chs & 0x3F,
            starting_cylinder=start_chs >> 6,
            sys_id=sys_id,
            ending_head=end_head,
            ending_sector=end_chs & 0x3F,
            ending_cylinder=end_chs >> 6,
            start_lba=lba,
            total_sectors=total,
        )


class MbrPartitionTable:
    """The four primary partitions, numbered from 1."""

    def __init__(self, partitions: Sequence[MbrPartition]) -> None:
        if len(partitions) != MAX_MBR_PARTITIONS:
            raise ValueError(f"an MBR holds exactly {MAX_MBR_PARTITIONS} partitions")
        self.partitions = tuple(partitions)
        self.count = MAX_MBR_PARTITIONS

    def _get(self, number: int) -> MbrPartition:
        if not 1 <= number <= self.count:
            raise IndexError(f"partition number {number} is not between 1 and {self.count}")
        return self.partitions[number - 1]

    def start(self, number: int) -> int:
        """First LBA of partition ``number``."""
        return self._get(number).start_lba

    def length(self, number: int) -> int:
        """Number of sectors in partition ``number``."""
        return self._get(number).total_sectors


def parse_partition_table(sector: bytes) -> MbrPartitionTable:
    """Decode the partition table held in a boot sector."""
    end = MBR_PARTINFO_START + MAX_MBR_PARTITIONS * _ENTRY.size
    if len(sector) < end:
        raise ValueError("boot sector is too short to hold a partition table")
    return MbrPartitionTable(
        [
            MbrPartition.unpack(sector[offset : offset + _ENTRY.size])
            for offset in range(MBR_PARTINFO_START, end, _ENTRY.size)
        ]
    )


def setup_partition_table(drive) -> MbrPartitionTable:
    """Read the first block of ``drive`` and attach its partition table."""
    table = parse_partition_table(drive.read_lba(0, 1))
    drive.partitions = table
    return table