"""QMI messages carried over QRTR datagrams, without QMUX framing."""

from __future__ import annotations

import struct
import time
from dataclasses import dataclass, field
from typing import Protocol, Union

from .constants import MessageID, MessageType
from .tlvs import Request, TLVs

_HEADER = struct.Struct("<BHHH")
_DEFAULT_TIMEOUT = 30.0
_DATAGRAM_SIZE = 512


def _enum(kind, value):
    try:
        return kind(value)
    except ValueError:
        return value


class _DatagramConnection(Protocol):
    def read(self, size: int) -> bytes:
        ...

    def write(self, data: bytes) -> int:
        ...


@dataclass
class QRTRResponse:
    """A parsed QMI message received over QRTR."""

    transaction_id: int
    message_id: Union[MessageID, int]
    message_type: Union[MessageType, int]
    message_length: int
    value: TLVs = field(default_factory=TLVs)

    @classmethod
    def parse(cls, data: bytes) -> "QRTRResponse":
        """Parse a datagram; a non-empty TLV body must report success."""
        data = bytes(data)
        if len(data) < 5:
            raise ValueError(f"data too short: got {len(data)} bytes")
        padded = data + bytes(_HEADER.size)
        message_type, transaction_id, message_id, length = _HEADER.unpack_from(padded)
        value = TLVs()
        if length > 0:
            import io

            body = data[_HEADER.size:_HEADER.size + length]
            value = TLVs.read(io.BytesIO(body))
        return cls(
            transaction_id,
            _enum(MessageID, message_id),
            _enum(MessageType, message_type),
            length,
            value,
        )


class QRTRTransport:
    """Sends QMI requests as QRTR datagrams to a located service."""

    def __init__(self, conn: _DatagramConnection) -> None:
        self.conn = conn

    def encode(self, request: Request) -> bytes:
        value = request.value.to_bytes()
        return (
            _HEADER.pack(
                MessageType.REQUEST,
                request.transaction_id & 0xFFFF,
                request.message_id,
                len(value),
            )
            + value
        )

    def read(self, request: Request) -> int:
        """Wait for the matching response, decode it into the request; return its size."""
        timeout = request.read_timeout or _DEFAULT_TIMEOUT
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            datagram = self.conn.read(_DATAGRAM_SIZE)
            response = QRTRResponse.parse(datagram)
            if response.transaction_id != request.transaction_id:
                continue
            request.result = request.response(response.value)
            return len(datagram)
        raise TimeoutError(
            f"timed out waiting for response for transaction ID {request.transaction_id}"
        )

    def transmit(self, request: Request) -> None:
        self.conn.write(self.encode(request))
        self.read(request)