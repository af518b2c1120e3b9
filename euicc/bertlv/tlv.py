"""BER-TLV objects: decoding, encoding and navigation."""

from __future__ import annotations

import base64
import io
from dataclasses import dataclass, field
from typing import BinaryIO, Callable, Iterable, Iterator, List, Optional, TypeVar

from .length import (
    TLVDecodeError,
    _CountingReader,
    _read_exact,
    marshal_length,
    read_length,
)
from .tag import Tag

_MAX_LENGTH = 0xFFFFFF

T = TypeVar("T")


@dataclass
class TLV:
    """A BER-TLV node holding either a value or child nodes."""

    tag: Tag
    value: bytes = b""
    children: List[Optional["TLV"]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not isinstance(self.tag, Tag):
            self.tag = Tag(self.tag)
        self.value = bytes(self.value or b"")
        self.children = list(self.children or [])

    # decoding

    @classmethod
    def read(cls, stream: BinaryIO) -> "TLV":
        """Read one TLV from a binary stream."""
        return cls._read_from(_CountingReader(stream))

    @classmethod
    def _read_from(cls, reader: _CountingReader) -> "TLV":
        tag = Tag.read(reader)
        label = tag.hex().upper()
        try:
            length = read_length(reader)
        except TLVDecodeError as exc:
            raise TLVDecodeError(f"tag {label}: invalid length encoding\n{exc}") from exc
        if tag.is_constructed():
            children = []
            consumed = 0
            while consumed < length:
                start = reader.count
                try:
                    child = cls._read_from(reader)
                except TLVDecodeError as exc:
                    raise TLVDecodeError(
                        f"tag {label}: invalid child object\n{exc}"
                    ) from exc
                children.append(child)
                consumed += reader.count - start
            return cls(tag, children=children)
        value = _read_exact(reader, length) if length else b""
        if len(value) != length:
            reason = "EOF" if not value else "unexpected EOF"
            raise TLVDecodeError(f"tag {label}: invalid length encoding\n{reason}")
        return cls(tag, value=value)

    @classmethod
    def from_bytes(cls, data: bytes) -> "TLV":
        return cls.read(io.BytesIO(data))

    @classmethod
    def from_text(cls, text) -> "TLV":
        """Decode a TLV from base64 text; characters outside the alphabet are ignored."""
        if isinstance(text, str):
            text = text.encode("ascii")
        return cls.from_bytes(base64.b64decode(text))

    # encoding

    def content_length(self) -> int:
        if self.tag.is_primitive():
            return len(self.value)
        return sum(child.encoded_length() for child in self.children if child is not None)

    def encoded_length(self) -> int:
        n = self.content_length()
        return len(self.tag) + len(marshal_length(n)) + n

    def _chunks(self) -> Iterator[bytes]:
        length = self.content_length()
        if self.value and self.tag.is_constructed():
            raise ValueError("tlv: constructed tag cannot have value")
        if self.children and self.tag.is_primitive():
            raise ValueError("tlv: primitive tag cannot have children")
        if length > _MAX_LENGTH:
            raise ValueError(
                f"tlv: length exceeds maximum ({_MAX_LENGTH}), got {length}"
            )
        yield bytes(self.tag)
        yield marshal_length(length)
        if self.tag.is_primitive():
            yield self.value
            return
        for child in self.children:
            if child is not None:
                yield from child._chunks()

    def write_to(self, stream: BinaryIO) -> int:
        """Write the encoding to a binary stream and return the byte count."""
        written = 0
        for chunk in self._chunks():
            stream.write(chunk)
            written += len(chunk)
        return written

    def to_bytes(self) -> bytes:
        return b"".join(self._chunks())

    def to_text(self) -> str:
        return base64.b64encode(self.to_bytes()).decode("ascii")

    def clone(self) -> "TLV":
        """Deep copy, dropping empty child slots."""
        if self.tag.is_primitive():
            return TLV(Tag(bytes(self.tag)), value=self.value)
        return TLV(
            Tag(bytes(self.tag)),
            children=[child.clone() for child in self.children if child is not None],
        )

    # navigation

    def at(self, index: int) -> Optional["TLV"]:
        count = len(self.children)
        if -count <= index < count:
            return self.children[index]
        raise IndexError("tlv: index out of bounds")

    def first(self, tag: bytes) -> Optional["TLV"]:
        return next(
            (child for child in self.children if child is not None and child.tag == tag),
            None,
        )

    def find(self, tag: bytes) -> List["TLV"]:
        return [child for child in self.children if child is not None and child.tag == tag]

    def select(self, *tags: bytes) -> Optional["TLV"]:
        node: Optional[TLV] = self
        for tag in tags:
            node = node.first(tag)
            if node is None:
                return None
        return node

    # values

    def marshal_value(self, marshaler: Callable[[], bytes]) -> None:
        """Set the value from a zero-argument callable returning bytes."""
        if not self.tag.is_primitive():
            raise ValueError("cannot marshal value on constructed")
        self.value = bytes(marshaler())

    def unmarshal_value(self, unmarshaler: Callable[[bytes], T]) -> T:
        """Pass the value to a decoder and return its result."""
        if not self.tag.is_primitive():
            raise ValueError("cannot unmarshal value on constructed")
        return unmarshaler(self.value)

    def __str__(self) -> str:
        if self.tag.is_primitive():
            return f"{self.tag} ({len(self.value)} byte)"
        return f"{self.tag} ({len(self.children)} elem)"


def new_value(tag: Tag, value: bytes) -> TLV:
    if tag.is_constructed():
        raise ValueError("tlv: constructed tag cannot have value")
    return TLV(tag, value=value)


def new_children(tag: Tag, *children: Optional[TLV]) -> TLV:
    if tag.is_primitive():
        raise ValueError("tlv: primitive tag cannot have children")
    return TLV(tag, children=list(children))


def new_children_iter(tag: Tag, children: Iterable[Optional[TLV]]) -> TLV:
    return new_children(tag, *children)


def marshal_value(tag: Tag, marshaler: Callable[[], bytes]) -> TLV:
    tlv = new_value(tag, b"")
    tlv.marshal_value(marshaler)
    return tlv