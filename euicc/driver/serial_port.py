"""A raw 115200-baud serial port on POSIX terminals."""

from __future__ import annotations

import os
import termios


class SerialPort:
    """A serial device opened in raw mode; the old settings are restored on close."""

    def __init__(self, name: str) -> None:
        self._fd = os.open(name, os.O_RDWR | os.O_NOCTTY)
        try:
            self._old = termios.tcgetattr(self._fd)
            self._configure(termios.B115200)
        except Exception:
            os.close(self._fd)
            raise

    def _configure(self, speed: int) -> None:
        cc = [0] * termios.NCCS
        cc[termios.VMIN] = 1
        cc[termios.VTIME] = 0
        attrs = [0, 0, termios.CS8, 0, speed, speed, cc]
        termios.tcsetattr(self._fd, termios.TCSANOW, attrs)

    def read(self, size: int) -> bytes:
        return os.read(self._fd, size)

    def write(self, data: bytes) -> int:
        return os.write(self._fd, data)

    def close(self) -> None:
        try:
            termios.tcsetattr(self._fd, termios.TCSANOW, self._old)
        finally:
            os.close(self._fd)

    def __enter__(self) -> "SerialPort":
        return self

    def __exit__(self, *args) -> None:
        self.close()