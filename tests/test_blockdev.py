import pytest

from zerokit.blockdev import (
    MAX_DRIVES,
    BlockDevice,
    BlockRangeError,
    DriveRegistry,
    MemoryDrive,
)


class _Table:
    def __init__(self, spans):
        self.spans = spans
        self.count = len(spans)

    def start(self, number):
        return self.spans[number - 1][0]

    def length(self, number):
        return self.spans[number - 1][1]


def test_memory_drive_round_trip():
    drive = MemoryDrive(block_size=16, block_count=8)
    data = bytes(range(32))
    drive.write_lba(2, data)
    assert drive.read_lba(2, 2) == data


def test_partial_block_is_zero_padded():
    drive = MemoryDrive(16, 4)
    drive.write_lba(0, b"\xff" * 16)
    drive.write_lba(0, b"abc")
    assert drive.read_lba(0, 1) == b"abc".ljust(16, b"\0")


@pytest.mark.parametrize("lba,count", [(3, 2), (-1, 1), (4, 1)])
def test_drive_read_out_of_range(lba, count):
    drive = MemoryDrive(16, 4)
    with pytest.raises(BlockRangeError):
        drive.read_lba(lba, count)


def test_drive_write_out_of_range():
    drive = MemoryDrive(16, 4)
    with pytest.raises(BlockRangeError):
        drive.write_lba(3, bytes(17))


def test_block_device_translates_addresses():
    drive = MemoryDrive(16, 16)
    device = BlockDevice(drive, 4, 10, 16)
    device.write_lba(1, b"hello")
    assert drive.read_lba(4 + 1, 1).startswith(b"hello")
    assert device.read_lba(1, 1) == drive.read_lba(4 + 1, 1)


def test_block_device_bounds():
    drive = MemoryDrive(16, 16)
    device = BlockDevice(drive, 4, 10, 16)
    assert device.read_lba(device.length - 1, 1) == bytes(16)
    with pytest.raises(BlockRangeError):
        device.read_lba(device.length, 1)
    with pytest.raises(BlockRangeError):
        device.write_lba(device.length - 1, bytes(32))


def test_registry_creates_devices_for_partitions():
    seen = []
    registry = DriveRegistry(on_blockdev=seen.append)
    spans = [(2, 6), (8, 4)]
    drive = MemoryDrive(16, 32, partitions=_Table(spans))
    devices = registry.register_drive(drive)
    assert seen == devices
    assert drive.id == 0
    for device, (start, length) in zip(devices, spans):
        assert device.min_lba == start
        assert device.length == length
        assert device.parent is drive
        assert device.block_size == drive.block_size
    assert registry.find_blockdev(1) is devices[1]


def test_registry_numbers_drives_in_order():
    registry = DriveRegistry()
    first, second = MemoryDrive(16, 4), MemoryDrive(16, 4)
    assert registry.register_drive(first) == []
    registry.register_drive(second)
    assert (first.id, second.id) == (0, 1)


def test_find_missing_blockdev():
    registry = DriveRegistry()
    with pytest.raises(IndexError):
        registry.find_blockdev(0)


def test_too_many_drives():
    registry = DriveRegistry()
    for _ in range(MAX_DRIVES):
        registry.register_drive(MemoryDrive(16, 1))
    with pytest.raises(OverflowError):
        registry.register_drive(MemoryDrive(16, 1))