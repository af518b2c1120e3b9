"""Encoders and decoders for BER primitive values."""

from __future__ import annotations

from typing import Iterable

_TRUE = 0xFF
_FALSE = 0x00


class BitString(list):
    """A sequence of booleans holding the bits of a BER BIT STRING."""

    def __str__(self) -> str:
        return "".join("1" if bit else "0" for bit in self)


def encode_int(value: int) -> bytes:
    """Encode a signed 64-bit integer as minimal two's-complement bytes."""
    buf = value.to_bytes(8, "big", signed=True)
    start = 0
    while start < len(buf) - 1 and (
        (buf[start] == 0x00 and buf[start + 1] & 0x80 == 0x00)
        or (buf[start] == 0xFF and buf[start + 1] & 0x80 == 0x80)
    ):
        start += 1
    return buf[start:]


def decode_int(data: bytes, size: int = 8) -> int:
    """Decode a two's-complement integer that must fit into ``size`` bytes.

    Empty data decodes to zero.
    """
    if not data:
        return 0
    if len(data) > size:
        raise ValueError(
            f"the value is too large, expected at most {size} bytes, got {len(data)}"
        )
    return int.from_bytes(data, "big", signed=True)


def encode_bool(value: bool) -> bytes:
    """Encode a boolean as a single byte: 0xFF for true, 0x00 for false."""
    octet = _TRUE if bool(value) else _FALSE
    return bytes((octet,))


def decode_bool(data: bytes) -> bool:
    """Decode a boolean; only the single byte 0xFF is true."""
    return len(data) == 1 and data[0] == _TRUE


def encode_bit_string(bits: Iterable[bool]) -> bytes:
    """Encode bits as a BIT STRING with a leading padding-count byte."""
    bits = list(bits)
    data = bytearray(len(bits) // 8 + 2)
    data[0] = 8 - len(bits) % 8
    for index, bit in enumerate(bits):
        if bit:
            data[1 + index // 8] |= 0x80 >> (index % 8)
    return bytes(data)


def decode_bit_string(data: bytes) -> BitString:
    """Decode a BIT STRING into a :class:`BitString`."""
    if not data:
        raise ValueError("bit string is empty")
    padding = data[0]
    if (
        padding > 7
        or (len(data) == 1 and padding > 0)
        or data[-1] & ((1 << padding) - 1) != 0
    ):
        raise ValueError("invalid padding bits")
    body = data[1:]
    bit_length = len(body) * 8 - padding
    return BitString(
        (body[i // 8] >> (7 - i % 8)) & 1 == 1 for i in range(bit_length)
    )


def encode_big_int(value: int) -> bytes:
    """Encode the magnitude of an integer as minimal big-endian bytes."""
    magnitude = abs(value)
    return magnitude.to_bytes((magnitude.bit_length() + 7) // 8, "big")


def decode_big_int(data: bytes) -> int:
    """Decode big-endian bytes as an unsigned integer."""
    return int.from_bytes(data, "big")