"""BER tags: class, form and tag number."""

from __future__ import annotations

import enum
from typing import BinaryIO

from .length import TLVDecodeError, _read_exact


class TagClass(enum.IntEnum):
    """The class bits of a BER tag."""

    UNIVERSAL = 0b00
    APPLICATION = 0b01
    CONTEXT_SPECIFIC = 0b10
    PRIVATE = 0b11

    def primitive(self, number: int) -> "Tag":
        return new_tag(self, Form.PRIMITIVE, number)

    def constructed(self, number: int) -> "Tag":
        return new_tag(self, Form.CONSTRUCTED, number)


class Form(enum.IntEnum):
    """The primitive/constructed bit of a BER tag."""

    PRIMITIVE = 0b0
    CONSTRUCTED = 0b1

    def universal(self, number: int) -> "Tag":
        return new_tag(TagClass.UNIVERSAL, self, number)

    def application(self, number: int) -> "Tag":
        return new_tag(TagClass.APPLICATION, self, number)

    def context_specific(self, number: int) -> "Tag":
        return new_tag(TagClass.CONTEXT_SPECIFIC, self, number)

    def private(self, number: int) -> "Tag":
        return new_tag(TagClass.PRIVATE, self, number)


class Tag(bytes):
    """The encoded identifier octets of a BER tag."""

    @classmethod
    def read(cls, stream: BinaryIO) -> "Tag":
        """Read one tag from a binary stream."""
        first = _read_exact(stream, 1)
        if not first:
            raise TLVDecodeError("tag encoding with less than one byte\nEOF")
        if first[0] & 0x1F != 0x1F:
            return cls(first)
        encoded = bytearray(first)
        while True:
            octet = _read_exact(stream, 1)
            if not octet:
                raise TLVDecodeError(
                    f"tag encoding with more than {len(encoded) + 1} bytes\nEOF"
                )
            encoded += octet
            if octet[0] >> 7 == 0:
                return cls(bytes(encoded))

    def number(self) -> int:
        low = self[0] & 0x1F
        if low != 0x1F:
            return low
        value = 0
        for octet in self[1:]:
            value = (value << 7) | (octet & 0x7F)
            if octet >> 7 == 0:
                break
        return value

    def tag_class(self) -> TagClass:
        return TagClass(self[0] >> 6)

    def form(self) -> Form:
        return Form((self[0] >> 5) & 0b1)

    def is_primitive(self) -> bool:
        return self.form() is Form.PRIMITIVE

    def is_constructed(self) -> bool:
        return self.form() is Form.CONSTRUCTED

    def is_universal(self) -> bool:
        return self.tag_class() is TagClass.UNIVERSAL

    def is_application(self) -> bool:
        return self.tag_class() is TagClass.APPLICATION

    def is_context_specific(self) -> bool:
        return self.tag_class() is TagClass.CONTEXT_SPECIFIC

    def is_private(self) -> bool:
        return self.tag_class() is TagClass.PRIVATE

    def matches(self, klass: TagClass, form: Form, number: int) -> bool:
        return (
            self.tag_class() == klass
            and self.form() == form
            and self.number() == number
        )

    def __str__(self) -> str:
        klass = self.tag_class()
        if klass is TagClass.CONTEXT_SPECIFIC:
            return f"[{self.number()}]"
        return f"[{klass.name.upper()} {self.number()}]"

    def __repr__(self) -> str:
        return f"Tag({bytes(self)!r})"


def new_tag(klass: TagClass, form: Form, number: int) -> Tag:
    """Build the encoded tag for a class, form and tag number."""
    if number < 0:
        raise ValueError("tag number must not be negative")
    mask = (int(klass) << 6) | (int(form) << 5)
    if number < 0x1F:
        return Tag(bytes([mask | number]))
    groups = []
    while True:
        groups.append(number & 0x7F)
        number >>= 7
        if not number:
            break
    groups.reverse()
    encoded = bytearray([mask | 0x1F])
    encoded.extend(group | 0x80 for group in groups[:-1])
    encoded.append(groups[-1])
    return Tag(bytes(encoded))