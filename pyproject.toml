[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "zerokit"
version = "0.4.0"
description = "A small hobby-kernel toolkit: the ZSFS filesystem, initrd images, MBR tables, block devices, ELF headers and kernel helpers"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "filesystem",
    "zsfs",
    "initrd",
    "mbr",
    "elf",
    "kernel",
    "block-device",
    "lfsr",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Filesystems",
    "Topic :: System :: Operating System Kernels",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
zerokit-makeinitrd = "zerokit.initrd:main"

[tool.hatch.build.targets.wheel]
packages = ["zerokit"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
