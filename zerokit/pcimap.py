"""Names of known PCI vendors and devices."""

from __future__ import annotations

from typing import NamedTuple

__all__ = ["lookup_vendor", "lookup_device", "lookup_driver", "VENDORS", "DEVICES"]


class _Device(NamedTuple):
    name: str
    driver: str | None


VENDORS: dict[int, str] = {
    0x8086: "Intel",
    0x10EC: "Realtek",
    0x1022: "AMD",
    0x1AF4: "Virtio",
}

DEVICES: dict[int, _Device] = {
    0x8029: _Device("NE2000 Ethernet", None),
    0x100E: _Device("E1000 Ethernet", None),
    0x2000: _Device("PCNET Ethernet", None),
    0x8139: _Device("rtl8139 Ethernet", "rtl8139"),
    0x1000: _Device("Virtio", None),
}


def lookup_vendor(vendor_id: int) -> str | None:
    """Return the vendor name for ``vendor_id``, or None if unknown."""
    return VENDORS.get(vendor_id)


def lookup_device(device_id: int) -> str | None:
    """Return the device name for ``device_id``, or None if unknown."""
    device = DEVICES.get(device_id)
    return device.name if device else None


def lookup_driver(device_id: int) -> str | None:
    """Return the name of the driver that initialises the device, or None."""
    device = DEVICES.get(device_id)
    return device.driver if device else None