"""Command and response APDUs and a chunking transmitter over a logical channel."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable


class APDUError(Exception):
    """Raised when the card answers with an unexpected status word."""


@runtime_checkable
class SmartCardChannel(Protocol):
    """A link to a card that can carry raw APDUs over logical channels."""

    def connect(self) -> None:
        ...

    def disconnect(self) -> None:
        ...

    def open_logical_channel(self, aid: bytes) -> int:
        ...

    def transmit(self, command: bytes) -> bytes:
        ...

    def close_logical_channel(self, channel: int) -> None:
        ...


@dataclass
class Request:
    """A short command APDU."""

    cla: int
    ins: int
    p1: int = 0
    p2: int = 0
    data: bytes = b""
    le: Optional[int] = None

    def to_bytes(self) -> bytes:
        out = bytearray((self.cla, self.ins, self.p1, self.p2))
        if self.data:
            out.append(len(self.data) & 0xFF)
            out += self.data
        if self.le is not None:
            out.append(self.le)
        return bytes(out)

    def __str__(self) -> str:
        return self.to_bytes().hex().upper()


class Response(bytes):
    """A response APDU: data followed by the two status bytes."""

    def __new__(cls, raw: bytes = b"") -> "Response":
        obj = super().__new__(cls, raw)
        if len(obj) < 2:
            raise ValueError("response APDU must hold at least the two status bytes")
        return obj

    def data(self) -> bytes:
        return bytes(self[:-2])

    def sw(self) -> int:
        return int.from_bytes(self[-2:], "big")

    def sw1(self) -> int:
        return self[-2]

    def sw2(self) -> int:
        return self[-1]

    def ok(self) -> bool:
        return self.sw() == 0x9000

    def has_more(self) -> bool:
        return self.sw1() == 0x61

    def __str__(self) -> str:
        return self.hex().upper()


def _cla_for_channel(cla: int, channel: int) -> int:
    if channel < 4:
        return (cla & 0x9C) | channel
    if channel < 20:
        return (cla & 0xB0) | 0x40 | (channel - 4)
    return cla


class Transmitter:
    """Sends STORE DATA commands in chunks and collects the card's answers."""

    def __init__(self, channel: SmartCardChannel, aid: bytes, mss: int) -> None:
        if mss <= 0:
            raise ValueError("mss must be positive")
        channel.connect()
        self._channel = channel
        self._logical_channel = channel.open_logical_channel(aid)
        self.mss = mss
        self._lock = threading.Lock()
        self._response = bytearray()

    def write(self, command: bytes) -> int:
        """Send a command, chunked to ``mss`` bytes; return the bytes sent."""
        self._response = bytearray()
        last = (len(command) // self.mss) & 0xFF
        written = 0
        for index, start in enumerate(range(0, len(command), self.mss)):
            p2 = index & 0xFF
            chunk = bytes(command[start:start + self.mss])
            request = Request(0x80, 0xE2, 0x91 if p2 == last else 0x11, p2, chunk)
            response = self._transmit(request)
            written += len(chunk)
            if response.has_more():
                self._read_command_response(response.sw2())
            else:
                self._response += response.data()
        return written

    def read(self) -> bytes:
        """Return the collected response of the last command and clear it."""
        data = bytes(self._response)
        self._response = bytearray()
        return data

    def _transmit(self, request: Request) -> Response:
        with self._lock:
            request.cla = _cla_for_channel(request.cla, self._logical_channel)
            raw = self._channel.transmit(request.to_bytes())
            try:
                response = Response(raw)
            except ValueError as exc:
                raise APDUError(str(exc)) from exc
            if not response.ok() and not response.has_more():
                raise APDUError(
                    f"returned an unexpected response with status {response.sw():04X}"
                )
            return response

    def _read_command_response(self, le: int) -> None:
        while True:
            response = self._transmit(Request(0x80, 0xC0, le=le))
            self._response += response.data()
            if not response.has_more():
                return
            le = response.sw2()

    def close(self) -> None:
        self._channel.close_logical_channel(self._logical_channel)
        self._channel.disconnect()

    def __enter__(self) -> "Transmitter":
        return self

    def __exit__(self, *args) -> None:
        self.close()