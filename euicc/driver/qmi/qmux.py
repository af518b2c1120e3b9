"""QMI messages framed with a QMUX header, as spoken by the QMI proxy."""

from __future__ import annotations

import io
import struct
import time
from dataclasses import dataclass, field
from typing import Protocol, Union

from .constants import (
    QMUX_HEADER_CONTROL_FLAG_REQUEST,
    QMUX_HEADER_IF_TYPE,
    MessageID,
    MessageType,
    ServiceType,
)
from .tlvs import Request, TLVs

_HEADER = struct.Struct("<BHBBB")
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


@dataclass
class QMUXHeader:
    """The QMUX framing header."""

    if_type: int
    length: int
    control_flags: int
    service_type: Union[ServiceType, int]
    client_id: int

    def to_bytes(self) -> bytes:
        return _HEADER.pack(
            self.if_type, self.length, self.control_flags, self.service_type, self.client_id
        )

    @classmethod
    def parse(cls, data: bytes) -> "QMUXHeader":
        if_type, length, flags, service, client = _HEADER.unpack_from(data)
        return cls(if_type, length, flags, _enum(ServiceType, service), client)


@dataclass
class QMUXResponse:
    """A parsed QMUX-framed QMI message."""

    header: QMUXHeader
    transaction_id: int
    message_id: Union[MessageID, int]
    message_type: Union[MessageType, int]
    message_length: int
    value: TLVs = field(default_factory=TLVs)

    @classmethod
    def parse(cls, data: bytes) -> "QMUXResponse":
        """Parse a frame; a non-empty TLV body must report success."""
        data = bytes(data)
        if len(data) < 11:
            raise ValueError(f"data too short: got {len(data)} bytes")
        padded = data + bytes(12)
        header = QMUXHeader.parse(padded)
        message_type = padded[6]
        if header.service_type == ServiceType.CONTROL:
            transaction_id = padded[7]
            offset = 8
        else:
            (transaction_id,) = struct.unpack_from("<H", padded, 7)
            offset = 9
        message_id, length = struct.unpack_from("<HH", padded, offset)
        offset += 4
        value = TLVs()
        if length > 0:
            value = TLVs.read(io.BytesIO(data[offset:offset + length]))
        return cls(
            header,
            transaction_id,
            _enum(MessageID, message_id),
            _enum(MessageType, message_type),
            length,
            value,
        )


def _recv_exact(conn: _Connection, size: int) -> bytes:
    buf = bytearray()
    while len(buf) < size:
        chunk = conn.recv(size - len(buf))
        if not chunk:
            raise EOFError("connection closed" if not buf else "unexpected EOF")
        buf += chunk
    return bytes(buf)


class QMUXTransport:
    """Sends QMI requests over a stream connection with QMUX framing."""

    def __init__(self, conn: _Connection) -> None:
        self.conn = conn

    def encode(self, request: Request) -> bytes:
        value = request.value.to_bytes()
        if request.service_type == ServiceType.CONTROL:
            sdu_header = struct.pack(
                "<BBHH",
                MessageType.REQUEST,
                request.transaction_id & 0xFF,
                request.message_id,
                len(value),
            )
        else:
            sdu_header = struct.pack(
                "<BHHH",
                MessageType.REQUEST,
                request.transaction_id & 0xFFFF,
                request.message_id,
                len(value),
            )
        sdu = sdu_header + value
        header = QMUXHeader(
            QMUX_HEADER_IF_TYPE,
            len(sdu) + 5,
            QMUX_HEADER_CONTROL_FLAG_REQUEST,
            request.service_type,
            request.client_id,
        )
        return header.to_bytes() + sdu

    def read(self, request: Request) -> int:
        """Wait for the matching response, decode it into the request; return its size."""
        timeout = request.read_timeout or _DEFAULT_TIMEOUT
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            self.conn.settimeout(1.0)
            try:
                head = _recv_exact(self.conn, 3)
            except TimeoutError:
                continue
            length = struct.unpack_from("<H", head, 1)[0] + 1
            frame = head + _recv_exact(self.conn, length - 3)
            response = QMUXResponse.parse(frame)
            if (
                request.client_id != response.header.client_id
                and response.transaction_id != request.transaction_id
            ):
                continue
            request.result = request.response(response.value)
            return length
        raise TimeoutError(
            f"timed out waiting for response for transaction ID {request.transaction_id}"
        )

    def transmit(self, request: Request) -> None:
        self.conn.sendall(self.encode(request))
        self.read(request)