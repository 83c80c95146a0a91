import pytest

from zerokit.blockdev import BlockDevice, DriveRegistry, MemoryDrive
from zerokit.fsmanager import MAX_FSES, FsManager, FsNode, FsType, NodeType

FS_ID = 0x1234ABCD


class _Fake(FsType):
    fs_type = 7

    def check_type(self, block):
        return block[:4] == b"TEST"

    def get_id(self, block):
        return int.from_bytes(block[4:8], "little")

    def mount(self, device):
        return {"device": device}


def _device(first_block):
    drive = MemoryDrive(16, 8)
    device = BlockDevice(drive, 0, 8, 16)
    device.write_lba(0, first_block)
    return device


def test_check_mounts_matching_device():
    manager = FsManager()
    manager.register_fstype(_Fake())
    device = _device(b"TEST" + FS_ID.to_bytes(4, "little"))
    filesystem = manager.check(device)
    assert filesystem["device"] is device
    assert manager.find_id(FS_ID) is filesystem


def test_unrecognised_device():
    manager = FsManager()
    manager.register_fstype(_Fake())
    assert manager.check(_device(b"NOPE")) is None
    assert manager.find_id(0) is None


def test_registry_hands_devices_to_manager():
    class Table:
        count = 1

        def start(self, number):
            return 2

        def length(self, number):
            return 4

    manager = FsManager()
    manager.register_fstype(_Fake())
    drive = MemoryDrive(16, 8, partitions=Table())
    drive.write_lba(2, b"TEST" + FS_ID.to_bytes(4, "little"))
    (device,) = DriveRegistry(on_blockdev=manager.check).register_drive(drive)
    assert manager.find_id(FS_ID)["device"] is device


def test_add_active_directly():
    manager = FsManager()
    marker = object()
    manager.add_active(5, marker)
    assert manager.find_id(5) is marker


def test_too_many_types():
    manager = FsManager()
    for _ in range(MAX_FSES):
        manager.register_fstype(_Fake())
    with pytest.raises(OverflowError):
        manager.register_fstype(_Fake())


def test_node_name_limit():
    with pytest.raises(ValueError):
        FsNode(name="x" * 40, type=NodeType.FILE)