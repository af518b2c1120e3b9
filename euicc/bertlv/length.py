"""BER length octets and stream helpers."""

from __future__ import annotations

from typing import BinaryIO


class TLVDecodeError(ValueError):
    """Raised when BER-TLV data cannot be decoded."""


_LENGTH_PREFIXES = ((0x81, 1), (0x82, 2), (0x83, 3))


def marshal_length(n: int) -> bytes:
    """Encode a content length in definite form, at most three length bytes."""
    if n < 0x80:
        return bytes([n])
    for prefix, size in _LENGTH_PREFIXES:
        if n < 1 << (8 * size):
            return bytes([prefix]) + n.to_bytes(size, "big")
    raise ValueError(
        f"TLV too large: {n} exceeds 3-byte length limit (3 bytes max)"
    )


def read_length(stream: BinaryIO) -> int:
    """Read definite-form length octets from a binary stream."""
    first = _read_exact(stream, 1)
    if not first:
        raise TLVDecodeError("failed to read length: expected 1 bytes, got 0")
    octet = first[0]
    for prefix, size in _LENGTH_PREFIXES:
        if octet == prefix:
            rest = _read_exact(stream, size)
            if len(rest) != size:
                raise TLVDecodeError(
                    f"failed to read length: expected {size} bytes, got {len(rest)}"
                )
            return int.from_bytes(rest, "big")
    if octet >= 0x80:
        raise TLVDecodeError(
            "failed to read length: if length is greater than 127, "
            "first byte must indicate encoding of length"
        )
    return octet


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    """Read up to ``size`` bytes, stopping early only at end of stream."""
    buf = bytearray()
    while len(buf) < size:
        chunk = stream.read(size - len(buf))
        if not chunk:
            break
        buf += chunk
    return bytes(buf)


class _CountingReader:
    """Wraps a binary stream and counts the bytes read through it."""

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream
        self.count = 0

    def read(self, size: int = -1) -> bytes:
        data = self._stream.read(size)
        self.count += len(data)
        return data