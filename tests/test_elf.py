import struct

import pytest

from zerokit.elf import (
    ELF_MAGIC,
    ELFCLASS32,
    ELFCLASS64,
    ELFDATA2LSB,
    ELFDATA2MSB,
    ET_EXEC,
    MACHINE_X86,
    PT_LOAD,
    SHF_ALLOC,
    SHT_PROGBITS,
    ElfError,
    elf32_program_headers,
    elf32_section_headers,
    elf64_program_headers,
    is_elf,
    parse_elf32_header,
    parse_elf64_header,
)

ENTRY = 0x8048000
PH32 = (PT_LOAD, 0x1000, ENTRY, 0, 0x200, 0x300, 5, 0x1000)
SH32 = (11, SHT_PROGBITS, SHF_ALLOC, ENTRY, 0x1000, 0x200, 0, 0, 16, 0)
PH64 = (PT_LOAD, 5, 0x1000, 0x400000, 0x400000, 0x80, 0x100, 0x1000)


def _ident(elf_class, order):
    encoding = ELFDATA2LSB if order == "<" else ELFDATA2MSB
    return ELF_MAGIC + bytes([elf_class, encoding, 1]) + bytes(9)


def _elf32_image(order="<"):
    phoff = 52
    shoff = phoff + 32
    header = struct.pack(
        order + "16sHHIIIIIHHHHHH",
        _ident(ELFCLASS32, order),
        ET_EXEC,
        MACHINE_X86,
        1,
        ENTRY,
        phoff,
        shoff,
        0,
        52,
        32,
        1,
        40,
        1,
        0,
    )
    return header + struct.pack(order + "8I", *PH32) + struct.pack(order + "10I", *SH32)


def _elf64_image():
    header = struct.pack(
        "<16sHHIqqqIHHHHHH",
        _ident(ELFCLASS64, "<"),
        ET_EXEC,
        0x3E,
        1,
        0x400000,
        64,
        0,
        0,
        64,
        56,
        1,
        0,
        0,
        0,
    )
    return header + struct.pack("<IIqqqQQQ", *PH64)


def test_is_elf():
    assert is_elf(_elf32_image())
    assert not is_elf(b"ZSFS" + bytes(60))
    assert not is_elf(b"")


def test_parse_elf32_header():
    header = parse_elf32_header(_elf32_image())
    assert header.e_type == ET_EXEC
    assert header.e_machine == MACHINE_X86
    assert header.e_entry == ENTRY
    assert header.e_phnum == 1
    assert header.e_shnum == 1
    assert header.e_ident[:4] == ELF_MAGIC


def test_elf32_program_headers():
    data = _elf32_image()
    (ph,) = elf32_program_headers(data, parse_elf32_header(data))
    assert (
        ph.p_type,
        ph.p_offset,
        ph.p_vaddr,
        ph.p_paddr,
        ph.p_filesize,
        ph.p_memsize,
        ph.p_flags,
        ph.p_align,
    ) == PH32


def test_elf32_section_headers():
    data = _elf32_image()
    (sh,) = elf32_section_headers(data, parse_elf32_header(data))
    assert sh.sh_type == SHT_PROGBITS
    assert sh.sh_flags == SHF_ALLOC
    assert sh.sh_addr == ENTRY
    assert sh.sh_name == SH32[0]
    assert sh.sh_addralign == SH32[8]


def test_big_endian_image_parses_same():
    little = parse_elf32_header(_elf32_image("<"))
    big = parse_elf32_header(_elf32_image(">"))
    assert big.e_entry == little.e_entry
    assert big.e_phoff == little.e_phoff


def test_parse_elf64_and_program_headers():
    data = _elf64_image()
    header = parse_elf64_header(data)
    assert header.e_entry == 0x400000
    (ph,) = elf64_program_headers(data, header)
    assert (ph.p_type, ph.p_flags, ph.p_offset, ph.p_vaddr) == PH64[:4]
    assert (ph.p_filesize, ph.p_memsize, ph.p_align) == PH64[5:]


def test_wrong_class_rejected():
    with pytest.raises(ElfError):
        parse_elf64_header(_elf32_image())
    with pytest.raises(ElfError):
        parse_elf32_header(_elf64_image())


def test_missing_magic_rejected():
    with pytest.raises(ElfError):
        parse_elf32_header(bytes(64))


def test_truncated_header_rejected():
    with pytest.raises(ElfError):
        parse_elf32_header(_elf32_image()[:40])


def test_truncated_program_table_rejected():
    data = _elf32_image()
    header = parse_elf32_header(data)
    with pytest.raises(ElfError):
        elf32_program_headers(data[:60], header)


def test_bad_encoding_rejected():
    data = bytearray(_elf32_image())
    data[5] = 7
    with pytest.raises(ElfError):
        parse_elf32_header(bytes(data))