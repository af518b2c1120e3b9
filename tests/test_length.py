import io

import pytest

from euicc.bertlv.length import TLVDecodeError, marshal_length, read_length


@pytest.mark.parametrize(
    "length, expected",
    [
        (0x00, b"\x00"),
        (0x01, b"\x01"),
        (0x7F, b"\x7f"),
        (0x80, b"\x81\x80"),
        (0xFF, b"\x81\xff"),
        (0x100, b"\x82\x01\x00"),
        (0xFFFF, b"\x82\xff\xff"),
        (0x10000, b"\x83\x01\x00\x00"),
    ],
)
def test_length(length, expected):
    assert marshal_length(length) == expected
    assert read_length(io.BytesIO(expected)) == length


@pytest.mark.parametrize(
    "data, message",
    [
        (b"", "failed to read length: expected 1 bytes, got 0"),
        (
            b"\x80",
            "failed to read length: if length is greater than 127, "
            "first byte must indicate encoding of length",
        ),
        (b"\x81", "failed to read length: expected 1 bytes, got 0"),
        (b"\x82", "failed to read length: expected 2 bytes, got 0"),
        (b"\x82\x01", "failed to read length: expected 2 bytes, got 1"),
    ],
)
def test_length_errors(data, message):
    with pytest.raises(TLVDecodeError) as excinfo:
        read_length(io.BytesIO(data))
    assert str(excinfo.value) == message


def test_length_too_large():
    with pytest.raises(ValueError, match="TLV too large: 16777216"):
        marshal_length(0x1000000)


def test_largest_length():
    assert marshal_length(0xFFFFFF) == b"\x83\xff\xff\xff"