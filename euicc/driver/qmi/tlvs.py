"""QMI TLV lists, requests and the transport interface."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Callable, Iterable, Optional, Protocol

from .constants import MessageID, QMIResult, ServiceType
from .errors import QMIProtocolError

_RESULT_TYPE = 0x02


@dataclass
class TLV:
    """One QMI type-length-value element."""

    type: int
    value: bytes = b""

    def __post_init__(self) -> None:
        self.value = bytes(self.value)

    @property
    def length(self) -> int:
        return len(self.value)

    def check(self) -> None:
        """Interpret this TLV as a result TLV; raise if it reports failure."""
        if len(self.value) < 4:
            raise ValueError(
                f"result TLV too short, expected 4 bytes, got {len(self.value)}"
            )
        result, code = struct.unpack_from("<HH", self.value)
        if result == QMIResult.SUCCESS:
            return
        raise QMIProtocolError(code)


class TLVs(list):
    """An ordered list of QMI TLVs."""

    def __init__(self, items: Iterable[TLV] = ()) -> None:
        super().__init__(items)

    @classmethod
    def _parse(cls, stream: BinaryIO) -> "TLVs":
        tlvs = cls()
        while True:
            head = stream.read(1)
            if not head:
                return tlvs
            raw_length = stream.read(2)
            if len(raw_length) != 2:
                raise ValueError("read TLV length: unexpected end of data")
            (length,) = struct.unpack("<H", raw_length)
            value = stream.read(length)
            if len(value) != length:
                raise ValueError(
                    f"read TLV value: expected {length} bytes, got {len(value)}"
                )
            tlvs.append(TLV(head[0], value))

    @classmethod
    def read(cls, stream: BinaryIO) -> "TLVs":
        """Read TLVs until the stream ends, then check the result TLV."""
        tlvs = cls._parse(stream)
        tlvs.check()
        return tlvs

    def to_bytes(self) -> bytes:
        return b"".join(
            struct.pack("<BH", tlv.type, tlv.length) + tlv.value for tlv in self
        )

    def find(self, type_: int) -> Optional[TLV]:
        return next((tlv for tlv in self if tlv.type == type_), None)

    def check(self) -> None:
        """Raise unless a result TLV is present and reports success."""
        result = self.find(_RESULT_TYPE)
        if result is None:
            raise ValueError("no result TLV found")
        result.check()


def _ignore(tlvs: TLVs) -> None:
    return None


@dataclass
class Request:
    """A QMI request with a decoder for the TLVs of its response.

    A transport calls ``response`` with the response TLVs and stores what it
    returns in ``result``. A ``read_timeout`` of zero leaves the timeout to
    the transport.
    """

    service_type: ServiceType
    message_id: MessageID
    transaction_id: int = 0
    client_id: int = 0
    value: TLVs = field(default_factory=TLVs)
    read_timeout: float = 0.0
    response: Callable[[TLVs], Any] = _ignore
    result: Any = None


class Transport(Protocol):
    """Carries QMI requests to a device and fills in their results."""

    def transmit(self, request: Request) -> None:
        ...