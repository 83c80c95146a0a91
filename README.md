# zerokit

`zerokit` is a pure-Python toolkit modelled on the pieces of a small hobby
kernel. It lets you build and inspect the on-disk structures such a kernel
uses, and experiment with a few of its in-memory helpers, without any
hardware or emulator.

- **ZSFS** – a simple block filesystem with a superblock, a free-block list,
  directory structures and chained file blocks (`zerokit.zsfs`,
  `zerokit.zsfs_layout`).
- **initrd images** – a flat archive format with a superblock, an entry table
  and the file contents (`zerokit.initrd`), plus a command to build one.
- **MBR partition tables** – decoding the four primary entries
  (`zerokit.mbr`).
- **Drives and block devices** – in-memory drives, partition-bounded block
  devices, a registry that creates a device per partition, and a manager
  that recognises and mounts filesystems on them (`zerokit.blockdev`,
  `zerokit.fsmanager`).
- **Kernel odds and ends** – a work queue, a keyboard buffer, an alarm
  clock, a 16-bit LFSR, ELF header parsing, PCI id lookup, bit helpers and
  the integer/format helpers of a freestanding C library.

The package has no runtime dependencies and supports Python 3.10 and later.

## Installation

```console
pip install zerokit
```

For running the test suite:

```console
pip install "zerokit[test]"
pytest
```

## Building an initrd image

The `zerokit-makeinitrd` command writes an initrd image holding the given
files, in the order given, each stored under its path as written on the
command line (names must be shorter than 24 bytes):

```console
zerokit-makeinitrd initrd.img echo cat ls shell
```

It needs an output path and at least one input file; with fewer arguments it
prints its usage to standard error and exits with status 1. Unreadable files
or over-long names are reported the same way.

The same can be done from Python, and an image can be read back:

```python
from zerokit.initrd import Initrd, build_initrd

image = build_initrd({"hello": b"hello, world\n", "motd": b"welcome\n"})

initrd = Initrd.from_bytes(image)
print(initrd.names())              # ['hello', 'motd']
print(initrd.size_of("hello"))     # 13
print(initrd.read("hello", 5))     # b'hello'
```

`write_initrd(out_path, paths)` builds an image from files on disk.
`Initrd.from_bytes` raises `InitrdError` for a bad magic number or entries
that run past the end of the image; `size_of` raises it for an unknown name,
while `read` returns `b""` for one.

## ZSFS

A ZSFS filesystem lives on a device with 512-byte blocks.
`zerokit.zsfs_layout` holds the on-disk structures (`Superblock`,
`DirEntry`, `DirStructure`, `FileBlock`, `FreeBlockList`) and
`format_device` to lay down a fresh filesystem; `zerokit.zsfs.Zsfs` works on
a formatted device:

```python
from zerokit.blockdev import MemoryDrive
from zerokit.zsfs import Zsfs
from zerokit.zsfs_layout import format_device

drive = MemoryDrive(block_size=512, block_count=4096)
format_device(drive)

fs = Zsfs(drive)
root = fs.root()
notes = fs.create_file(root, "notes")
fs.write(notes, 0, b"hello")
print(fs.read(fs.open("/notes"), 0, 5))   # b'hello'
print(fs.readdir(root, 0))                # 'notes'
```

- `root()`, `open(path)` (absolute paths only), `finddir(directory, name)`
  and `readdir(directory, index)` look things up. `open` raises
  `FileNotFoundError` for a missing component; `finddir` and `readdir`
  return `None`.
- `create_file(parent, name)` and `create_dir(parent, name)` return the new
  node and raise `FileExistsError` if the name is taken. A full directory
  block gets a linked block of 15 more entries.
- `read(node, offset, length)`, `write(node, offset, data)` and
  `length(node)` handle file contents, stored in 508-byte chunks chained
  through block indices.
- `delete(node)` removes a file, or a directory that is empty; a non-empty
  directory or the root raises `ZsfsError`. Running out of blocks raises
  `OSError` with `ENOSPC`.

`ZsfsType` plugs the filesystem into `zerokit.fsmanager.FsManager`.
Passing `manager.check` as the `on_blockdev` callback of
`zerokit.blockdev.DriveRegistry` mounts ZSFS on each partition that holds
it as drives are registered; `manager.find_id(fs_id)` then returns the
mounted filesystem. Partition tables come from `zerokit.mbr`
(`parse_partition_table`, `setup_partition_table`).

## Small helpers

```python
from zerokit.bitwise import bit_set, bit_get, bit_clear
from zerokit.cstring import itoa, itoh, atoi, kformat
from zerokit.lfsr import Lfsr

bits = bytearray(2)
bit_set(bits, 9)
print(bit_get(bits, 9))            # 1
bit_clear(bits, 9)

print(itoa(-42))                   # '-42'
print(itoh(255))                   # '000000FF'
print(atoi("123abc"))              # 123
print(kformat("pid %d at %x", 7, 4096))   # 'pid 7 at 00001000'

rng = Lfsr(0xACF1)
print(rng.next())
```

Also included:

- `zerokit.elf` – `is_elf`, `parse_elf32_header`, `parse_elf64_header`,
  `elf32_program_headers`, `elf32_section_headers` and
  `elf64_program_headers`, raising `ElfError` for malformed data.
- `zerokit.pcimap` – `lookup_vendor`, `lookup_device` and `lookup_driver`
  for a handful of known PCI ids.
- `zerokit.keyboard.KeyboardBuffer` – keys in typing order, dropping the
  oldest when full; `request(total, timeout)` waits for and removes keys.
- `zerokit.timing.Clock` – `set_alarm(callback, period_ms)` and `tick()`,
  which fires alarms that fall due.
- `zerokit.workqueue.WorkQueue` – runs `Tasklet`s, most recently added
  first, on worker threads started with `spawn_worker(stop)`.

## What zerokit does not do

zerokit has no memory allocators, no pipes, no per-process file descriptor
table and no command shell or command-line parser. It does not load or run
ELF programs; it only reads their headers. Apart from
`zerokit-makeinitrd`, everything is used from Python.