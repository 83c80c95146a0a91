"""Parsing of ELF file, program and section headers (32- and 64-bit)."""

from __future__ import annotations

import struct
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

__all__ = [
    "ElfError",
    "Elf32Header",
    "Elf32ProgramHeader",
    "Elf32SectionHeader",
    "Elf64Header",
    "Elf64ProgramHeader",
    "is_elf",
    "parse_elf32_header",
    "parse_elf64_header",
    "elf32_program_headers",
    "elf32_section_headers",
    "elf64_program_headers",
]

ELF_MAGIC = b"\x7fELF"
ELF_MAGIC_LEN = 4
ELF_NIDENT = 16

EI_CLASS = 4
EI_DATA = 5
EI_VERSION = 6
EI_OSABI = 7
EI_ABIVERSION = 8
EI_PAD = 9

ELFCLASS32 = 1
ELFCLASS64 = 2
ELFDATA2LSB = 1
ELFDATA2MSB = 2

ET_NONE = 0
ET_REL = 1
ET_EXEC = 2
ET_SHARE = 3

MACHINE_X86 = 0x3

SHN_UNDEF = 0x00
SHT_NULL = 0
SHT_PROGBITS = 1
SHT_SYMTAB = 2
SHT_STRTAB = 3
SHT_RELA = 4
SHT_NOBITS = 8
SHT_REL = 9
SHF_WRITE = 0x1
SHF_ALLOC = 0x2

PT_NULL = 0
PT_LOAD = 0x1
PT_DYNAMIC = 0x2
PT_INTERP = 0x3

_EHDR32 = "16sHHIIIIIHHHHHH"
_PHDR32 = "8I"
_SHDR32 = "10I"
_EHDR64 = "16sHHIqqqIHHHHHH"
_PHDR64 = "IIqqqQQQ"


class ElfError(ValueError):
    """Raised when data is not a well-formed ELF image of the expected kind."""


@dataclass(frozen=True)
class Elf32Header:
    e_ident: bytes
    e_type: int
    e_machine: int
    e_version: int
    e_entry: int
    e_phoff: int
    e_shoff: int
    e_flags: int
    e_ehsize: int
    e_phentsize: int
    e_phnum: int
    e_shentsize: int
    e_shnum: int
    e_shstrndx: int


@dataclass(frozen=True)
class Elf64Header:
    e_ident: bytes
    e_type: int
    e_machine: int
    e_version: int
    e_entry: int
    e_phoff: int
    e_shoff: int
    e_flags: int
    e_ehsize: int
    e_phentsize: int
    e_phnum: int
    e_shentsize: int
    e_shnum: int
    e_shstrndx: int


@dataclass(frozen=True)
class Elf32ProgramHeader:
    p_type: int
    p_offset: int
    p_vaddr: int
    p_paddr: int
    p_filesize: int
    p_memsize: int
    p_flags: int
    p_align: int


@dataclass(frozen=True)
class Elf64ProgramHeader:
    p_type: int
    p_flags: int
    p_offset: int
    p_vaddr: int
    p_paddr: int
    p_filesize: int
    p_memsize: int
    p_align: int


@dataclass(frozen=True)
class Elf32SectionHeader:
    sh_name: int
    sh_type: int
    sh_flags: int
    sh_addr: int
    sh_offset: int
    sh_size: int
    sh_link: int
    sh_info: int
    sh_addralign: int
    sh_entsize: int


T = TypeVar("T")


def is_elf(data: bytes) -> bool:
    """Return True if ``data`` starts with the ELF signature."""
    return bytes(data[:ELF_MAGIC_LEN]) == ELF_MAGIC


def _byte_order(data: bytes) -> str:
    if not is_elf(data):
        raise ElfError("missing ELF signature")
    if len(data) < ELF_NIDENT:
        raise ElfError("truncated identification bytes")
    encoding = data[EI_DATA]
    if encoding == ELFDATA2LSB:
        return "<"
    if encoding == ELFDATA2MSB:
        return ">"
    raise ElfError(f"unknown data encoding {encoding}")


def _unpack(fmt: str, data: bytes, offset: int, what: str) -> tuple:
    size = struct.calcsize(fmt)
    if offset < 0 or offset + size > len(data):
        raise ElfError(f"truncated {what} at offset {offset}")
    return struct.unpack_from(fmt, data, offset)


def _parse_header(data: bytes, elf_class: int, fmt: str, cls: type[T]) -> T:
    order = _byte_order(data)
    if data[EI_CLASS] != elf_class:
        raise ElfError(f"expected class {elf_class}, found {data[EI_CLASS]}")
    return cls(*_unpack(order + fmt, data, 0, "file header"))


def _table(
    data: bytes,
    fmt: str,
    offset: int,
    count: int,
    entsize: int,
    what: str,
    build: Callable[[tuple], T],
) -> list[T]:
    order = _byte_order(data)
    full = order + fmt
    if count and entsize < struct.calcsize(full):
        raise ElfError(f"{what} entry size {entsize} is too small")
    return [
        build(_unpack(full, data, offset + i * entsize, what)) for i in range(count)
    ]


def parse_elf32_header(data: bytes) -> Elf32Header:
    """Parse the file header of a 32-bit ELF image."""
    return _parse_header(data, ELFCLASS32, _EHDR32, Elf32Header)


def parse_elf64_header(data: bytes) -> Elf64Header:
    """Parse the file header of a 64-bit ELF image."""
    return _parse_header(data, ELFCLASS64, _EHDR64, Elf64Header)


def elf32_program_headers(data: bytes, header: Elf32Header) -> list[Elf32ProgramHeader]:
    """Return the program header table described by ``header``."""
    return _table(
        data,
        _PHDR32,
        header.e_phoff,
        header.e_phnum,
        header.e_phentsize,
        "program header",
        lambda values: Elf32ProgramHeader(*values),
    )


def elf32_section_headers(data: bytes, header: Elf32Header) -> list[Elf32SectionHeader]:
    """Return the section header table described by ``header``."""
    return _table(
        data,
        _SHDR32,
        header.e_shoff,
        header.e_shnum,
        header.e_shentsize,
        "section header",
        lambda values: Elf32SectionHeader(*values),
    )


def elf64_program_headers(data: bytes, header: Elf64Header) -> list[Elf64ProgramHeader]:
    """Return the program header table described by ``header``."""
    return _table(
        data,
        _PHDR64,
        header.e_phoff,
        header.e_phnum,
        header.e_phentsize,
        "program header",
        lambda values: Elf64ProgramHeader(*values),
    )