"""Card access through a modem's AT+CSIM command."""

from __future__ import annotations

from typing import Protocol

from .serial_port import SerialPort


class ATError(Exception):
    """Raised when the modem reports an error or answers unexpectedly."""


class _Stream(Protocol):
    def read(self, size: int) -> bytes:
        ...

    def write(self, data: bytes) -> int:
        ...

    def close(self) -> None:
        ...


_ENABLE_ES10 = bytes(
    [0x80, 0xAA, 0x00, 0x00, 0x0A, 0xA9, 0x08, 0x81, 0x00, 0x82, 0x01, 0x01, 0x83, 0x01, 0x07]
)


class AT:
    """A smart card channel that tunnels APDUs through AT+CSIM."""

    def __init__(self, stream: _Stream) -> None:
        self._stream = stream
        self._buffer = bytearray()
        self.channel = 0

    @classmethod
    def open(cls, device: str) -> "AT":
        try:
            port = SerialPort(device)
        except OSError as exc:
            raise ATError(f"open serial port {device}: {exc}") from exc
        return cls(port)

    def _read_line(self) -> str:
        while b"\n" not in self._buffer:
            chunk = self._stream.read(256)
            if not chunk:
                raise ATError("serial stream ended before a final result code")
            self._buffer += chunk
        index = self._buffer.index(b"\n")
        line = bytes(self._buffer[:index + 1])
        del self._buffer[:index + 1]
        return line.decode("ascii", errors="replace")

    def run(self, command: str) -> str:
        """Send a command and return the lines before the final OK."""
        self._stream.write((command + "\r\n").encode("ascii"))
        lines = []
        while True:
            line = self._read_line().strip()
            if "OK" in line:
                return "".join(f"{text}\n" for text in lines).strip()
            if "ERR" in line:
                raise ATError(line)
            lines.append(line)

    def transmit(self, command: bytes) -> bytes:
        encoded = bytes(command).hex().upper()
        reply = self.run(f'AT+CSIM={len(encoded)},"{encoded}"')
        response = self._parse_response(reply)
        if len(response) < 2 or response[-2] not in (0x90, 0x61):
            raise ATError(f"unexpected response: {response.hex().upper()}")
        return response

    @staticmethod
    def _parse_response(reply: str) -> bytes:
        index = reply.rfind(",")
        if index == -1:
            raise ATError("invalid response")
        try:
            return bytes.fromhex(reply[index + 2:len(reply) - 1])
        except ValueError as exc:
            raise ATError(f"invalid response: {reply}") from exc

    def connect(self) -> None:
        self.run("AT+CSIM=?")
        self.transmit(_ENABLE_ES10)

    def open_logical_channel(self, aid: bytes) -> int:
        response = self.transmit(bytes([0x00, 0x70, 0x00, 0x00, 0x01]))
        if response[-2] != 0x90:
            raise ATError(f"open logical channel: {response.hex().upper()}")
        self.channel = response[0]
        status = self.transmit(bytes([self.channel, 0xA4, 0x04, 0x00, len(aid)]) + bytes(aid))
        if status[-2] not in (0x90, 0x61):
            raise ATError(f"select AID: {status.hex().upper()}")
        return self.channel

    def close_logical_channel(self, channel: int) -> None:
        self.transmit(bytes([0x00, 0x70, 0x80, channel, 0x00]))

    def disconnect(self) -> None:
        self._stream.close()