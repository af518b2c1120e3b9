import pytest

from euicc.bertlv.primitive import (
    BitString,
    decode_big_int,
    decode_bit_string,
    decode_bool,
    decode_int,
    encode_big_int,
    encode_bit_string,
    encode_bool,
    encode_int,
)


def test_big_int_round_trip():
    value = decode_big_int(b"\x7f")
    assert value == 127
    assert encode_big_int(value) == b"\x7f"


def test_big_int_zero_is_empty():
    assert encode_big_int(0) == b""
    assert decode_big_int(b"") == 0


def test_bit_string_round_trip():
    bits = decode_bit_string(bytes([0x06, 0x6E, 0x5D, 0xC0]))
    assert str(bits) == "011011100101110111"
    assert encode_bit_string(bits) == bytes([0x06, 0x6E, 0x5D, 0xC0])


def test_bit_string_invalid_padding():
    with pytest.raises(ValueError, match="invalid padding bits"):
        decode_bit_string(bytes([0x08, 0x6E, 0x5D, 0xC0]))


def test_bit_string_nonzero_padding_bits_rejected():
    with pytest.raises(ValueError, match="invalid padding bits"):
        decode_bit_string(bytes([0x01, 0x01]))


def test_bit_string_str():
    assert str(BitString([True, False, True])) == "101"


@pytest.mark.parametrize(
    "expected, variants",
    [
        (False, [b"\x00", b"\x01"]),
        (True, [b"\xff"]),
    ],
)
def test_boolean(expected, variants):
    for variant in variants:
        assert decode_bool(variant) is expected
    assert encode_bool(expected) == variants[0]


INT_FIXTURES = [
    (0, 8, [b"\x00"]),
    (127, 8, [b"\x7f", b"\x00\x7f"]),
    (128, 8, [b"\x00\x80"]),
    (256, 8, [b"\x01\x00"]),
    (-1, 8, [b"\xff", b"\xff\xff", b"\xff\xff\xff\xff"]),
    (-128, 8, [b"\x80", b"\xff\x80"]),
    (-129, 8, [b"\xff\x7f", b"\xff\xff\xff\x7f"]),
    (-1000, 8, [b"\xfc\x18", b"\xff\xff\xfc\x18"]),
    (-8388607, 8, [b"\x80\x00\x01"]),
    (2**63 - 1, 8, [b"\x7f\xff\xff\xff\xff\xff\xff\xff"]),
    (-(2**63), 8, [b"\x80\x00\x00\x00\x00\x00\x00\x00"]),
    (-(2**31), 4, [b"\x80\x00\x00\x00"]),
    (2**31 - 1, 4, [b"\x7f\xff\xff\xff"]),
    (-(2**15), 2, [b"\x80\x00"]),
    (2**15 - 1, 2, [b"\x7f\xff"]),
    (0, 1, [b"\x00"]),
    (1, 1, [b"\x01"]),
    (127, 1, [b"\x7f"]),
    (-128, 1, [b"\x80"]),
    (-1, 1, [b"\xff"]),
]


@pytest.mark.parametrize("expected, size, variants", INT_FIXTURES)
def test_integer(expected, size, variants):
    for variant in variants:
        assert decode_int(variant, size) == expected
    assert encode_int(expected) == variants[0]


def test_integer_empty_decodes_to_zero():
    assert decode_int(b"", 1) == 0


def test_integer_too_large():
    with pytest.raises(ValueError, match="expected at most 1 bytes, got 2"):
        decode_int(b"\xff\xff", 1)


def test_integer_out_of_range_encode():
    with pytest.raises(OverflowError):
        encode_int(2**63)