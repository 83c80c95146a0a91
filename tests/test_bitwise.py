import pytest

from zerokit.bitwise import bit_clear, bit_get, bit_set


def test_set_bit_in_second_byte():
    mem = bytearray(2)
    bit_set(mem, 9)
    assert mem == bytearray(b"\x00\x02")


def test_lowest_bit_is_first_in_byte():
    mem = bytearray(1)
    bit_set(mem, 0)
    assert mem == bytearray(b"\x01")


@pytest.mark.parametrize("index", [0, 1, 7, 8, 15, 31])
def test_set_then_get(index):
    mem = bytearray(4)
    bit_set(mem, index)
    assert bit_get(mem, index) == 1
    assert sum(bit_get(mem, i) for i in range(32)) == 1


@pytest.mark.parametrize("index", [0, 5, 12, 31])
def test_clear_only_touches_one_bit(index):
    mem = bytearray(b"\xff" * 4)
    bit_clear(mem, index)
    assert bit_get(mem, index) == 0
    assert sum(bit_get(mem, i) for i in range(32)) == 31


def test_set_is_idempotent():
    mem = bytearray(1)
    bit_set(mem, 3)
    once = bytes(mem)
    bit_set(mem, 3)
    assert bytes(mem) == once


def test_clear_restores_original():
    mem = bytearray(b"\x10\x20")
    original = bytes(mem)
    bit_set(mem, 2)
    bit_clear(mem, 2)
    assert bytes(mem) == original


def test_get_works_on_immutable_bytes():
    assert bit_get(b"\x80", 7) == 1
    assert bit_get(b"\x80", 6) == 0


def test_index_past_buffer_raises():
    with pytest.raises(IndexError):
        bit_set(bytearray(1), 8)


def test_negative_index_raises():
    with pytest.raises(IndexError):
        bit_get(bytearray(1), -1)