"""ZSFS filesystem, initrd images, MBR tables, block devices and kernel helpers."""

__version__ = "0.4.0"

__all__ = ["__version__"]