"""MBIM message framing: requests, command payloads and command responses."""

from __future__ import annotations

import struct
import time
from dataclasses import dataclass
from typing import Any, Callable, Protocol, Union

from .codes import MessageType
from .status import MBIMStatus, MBIMStatusError

_HEADER = struct.Struct("<III")
_DEFAULT_TIMEOUT = 30.0


def _enum(kind, value):
    try:
        return kind(value)
    except ValueError:
        return value


class _Connection(Protocol):
    def sendall(self, data: bytes) -> None:
        ...

    def recv(self, size: int) -> bytes:
        ...

    def settimeout(self, value: float) -> None:
        ...


class _Payload(Protocol):
    def to_bytes(self) -> bytes:
        ...


def _ignore(data: bytes) -> None:
    return None


def _recv_exact(conn: _Connection, size: int) -> bytes:
    buf = bytearray()
    while len(buf) < size:
        chunk = conn.recv(size - len(buf))
        if not chunk:
            raise EOFError("connection closed" if not buf else "unexpected EOF")
        buf += chunk
    return bytes(buf)


@dataclass
class Command:
    """The payload of an MBIM command message."""

    fragment_total: int = 1
    fragment_current: int = 0
    service_id: bytes = bytes(16)
    command_id: int = 0
    command_type: int = 0
    data: bytes = b""

    def __post_init__(self) -> None:
        self.service_id = bytes(self.service_id)
        if len(self.service_id) != 16:
            raise ValueError("service ID must be 16 bytes")
        self.data = bytes(self.data)

    def to_bytes(self) -> bytes:
        return (
            struct.pack("<II", self.fragment_total, self.fragment_current)
            + self.service_id
            + struct.pack("<III", self.command_id, self.command_type, len(self.data))
            + self.data
        )


@dataclass
class Request:
    """An MBIM request with a decoder for the information buffer of its answer.

    ``command`` is raw bytes or an object with ``to_bytes()``. After a
    successful exchange ``result`` holds what ``response`` returned.
    """

    message_type: MessageType
    transaction_id: int
    command: Union[bytes, _Payload] = b""
    response: Callable[[bytes], Any] = _ignore
    read_timeout: float = 0.0
    result: Any = None
    message_length: int = 0

    def to_bytes(self) -> bytes:
        if isinstance(self.command, (bytes, bytearray)):
            payload = bytes(self.command)
        else:
            payload = self.command.to_bytes()
        self.message_length = _HEADER.size + len(payload)
        return (
            _HEADER.pack(self.message_type, self.message_length, self.transaction_id)
            + payload
        )

    def write_to(self, conn: _Connection) -> int:
        data = self.to_bytes()
        conn.sendall(data)
        return len(data)

    def read_from(self, conn: _Connection) -> int:
        """Wait for the answer to this request, decode it; return its size."""
        timeout = self.read_timeout or _DEFAULT_TIMEOUT
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            conn.settimeout(1.0)
            try:
                header = _recv_exact(conn, _HEADER.size)
            except TimeoutError:
                continue
            message_type, length, transaction_id = _HEADER.unpack(header)
            if length < _HEADER.size:
                raise ValueError(f"invalid MBIM message length {length}")
            message = header + _recv_exact(conn, length - _HEADER.size)
            if (
                message_type & 0x7FFFFFFF != int(self.message_type)
                or transaction_id != self.transaction_id
            ):
                continue
            self.result = CommandResponse.parse(message, self.response).result
            return len(message)
        raise TimeoutError(f"transaction ID {self.transaction_id} not found in response")

    def transmit(self, conn: _Connection) -> None:
        """Send the request and wait for its answer."""
        self.write_to(conn)
        self.read_from(conn)


@dataclass
class CommandResponse:
    """A parsed MBIM response message."""

    message_type: Union[MessageType, int]
    message_length: int
    transaction_id: int
    fragment_total: int
    fragment_current: int
    service_id: bytes
    command_id: int
    status: Union[MBIMStatus, int]
    response_buffer: bytes
    result: Any = None

    @classmethod
    def parse(cls, data: bytes, unmarshal: Callable[[bytes], Any] = _ignore) -> "CommandResponse":
        """Parse a response; raise :class:`MBIMStatusError` on a failure status."""
        data = bytes(data)
        offset = 0

        def take(size: int) -> bytes:
            nonlocal offset
            chunk = data[offset:offset + size]
            offset = min(offset + size, len(data))
            return chunk if len(chunk) == size else bytes(size)

        def u32() -> int:
            return struct.unpack("<I", take(4))[0]

        message_type, message_length, transaction_id = u32(), u32(), u32()
        fragment_total = fragment_current = command_id = 0
        service_id = bytes(16)
        if message_length > 16:
            fragment_total, fragment_current = u32(), u32()
            service_id = take(16)
            command_id = u32()
        status = u32()
        if status != MBIMStatus.NONE:
            raise MBIMStatusError(status)
        buffer = take(u32())
        return cls(
            _enum(MessageType, message_type),
            message_length,
            transaction_id,
            fragment_total,
            fragment_current,
            service_id,
            command_id,
            MBIMStatus.NONE,
            buffer,
            unmarshal(buffer),
        )