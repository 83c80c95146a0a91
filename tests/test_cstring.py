import pytest

from zerokit.cstring import atoi, itoa, itoh, kformat


@pytest.mark.parametrize("number", [0, 7, 123, -45, 2147483647, -2147483647])
def test_itoa_round_trips_through_int(number):
    assert int(itoa(number)) == number


def test_itoa_negative_has_sign():
    assert itoa(-45).startswith("-")
    assert not itoa(45).startswith("-")


def test_itoa_wraps_to_32_bits():
    assert itoa(2**31) == itoa(-(2**31))
    assert itoa(2**32 + 5) == itoa(5)


@pytest.mark.parametrize("number", [0, 1, 0xABCDEF, 0x7FFFFFFF, -1, -256])
def test_itoh_round_trip(number):
    text = itoh(number)
    assert len(text) == 8
    assert int(text, 16) == number & 0xFFFFFFFF
    assert text == text.upper()


def test_itoh_pads_with_zeros():
    assert itoh(0xABCDEF) == "00ABCDEF"


def test_itoh_of_minus_one():
    assert itoh(-1) == "FFFFFFFF"


@pytest.mark.parametrize("number", [0, 9, 10, 4096, 2147483647])
def test_atoi_reads_itoa_output(number):
    assert atoi(itoa(number)) == number


def test_atoi_stops_at_first_non_digit():
    assert atoi("42abc") == 42
    assert atoi("12 34") == 12


def test_atoi_without_digits_is_zero():
    assert atoi("") == 0
    assert atoi(" 5") == 0


def test_atoi_leading_minus_stops_scan():
    assert atoi("-7") == 0


def test_kformat_plain_text_unchanged():
    assert kformat("Starting userland shell\n") == "Starting userland shell\n"


def test_kformat_decimal():
    assert kformat("Allocating %d bytes for shell binary...\n", 512) == (
        "Allocating 512 bytes for shell binary...\n"
    )


def test_kformat_hex_matches_itoh():
    assert kformat("Initrd at %x\n", 0x1000) == "Initrd at " + itoh(0x1000) + "\n"


def test_kformat_string_and_char():
    assert kformat("Copying over %s%c", "/echo", "!") == "Copying over /echo!"


def test_kformat_char_from_code():
    assert kformat("%c", ord("Z")) == "Z"


def test_kformat_string_truncated_to_twenty():
    assert kformat("%s", "a" * 30) == "a" * 20


def test_kformat_unknown_directive():
    with pytest.raises(ValueError):
        kformat("%q", 1)


def test_kformat_trailing_percent():
    with pytest.raises(ValueError):
        kformat("100%")


def test_kformat_missing_argument():
    with pytest.raises(TypeError):
        kformat("%d and %d", 1)