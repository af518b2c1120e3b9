"""A smart card channel over Qualcomm IPC Router sockets."""

from __future__ import annotations

import enum
import socket
import struct
import time
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from .client import QMIClient
from .constants import ServiceType
from .qrtr_transport import QRTRTransport

AF_QIPCRTR = getattr(socket, "AF_QIPCRTR", 42)

NODE_BROADCAST = 0xFFFFFFFF
PORT_CONTROL = 0xFFFFFFFE

_SERVICE = struct.Struct("<IIII")
_LOOKUP_TIMEOUT = 5.0
_RECV_POLL = 1.0


class PacketType(enum.IntEnum):
    """QRTR control packet commands."""

    DATA = 1
    HELLO = 2
    BYE = 3
    NEW_SERVER = 4
    DEL_SERVER = 5
    DEL_CLIENT = 6
    RESUME_TX = 7
    EXIT = 8
    PING = 9
    NEW_LOOKUP = 10
    DEL_LOOKUP = 11


@dataclass(frozen=True)
class SockAddr:
    """A QRTR socket address."""

    node: int
    port: int
    family: int = AF_QIPCRTR

    @property
    def network(self) -> str:
        return "qrtr"

    def __str__(self) -> str:
        return f"qrtr://{AF_QIPCRTR}:{self.node}/{self.port}"


@dataclass(frozen=True)
class Service:
    """A service announced on the QRTR bus."""

    service: int
    instance: int = 0
    node: int = 0
    port: int = 0

    def to_bytes(self) -> bytes:
        return _SERVICE.pack(self.service, self.instance, self.node, self.port)

    @classmethod
    def parse(cls, data: bytes) -> "Service":
        padded = bytes(data) + bytes(_SERVICE.size)
        return cls(*_SERVICE.unpack_from(padded))


@dataclass(frozen=True)
class ControlPacket:
    """A QRTR control packet."""

    command: Union[PacketType, int]
    service: Service

    def to_bytes(self) -> bytes:
        return struct.pack("<I", self.command) + self.service.to_bytes()


class QRTRConn:
    """A QRTR datagram socket, optionally bound to one remote service."""

    def __init__(self, sock: Optional[socket.socket] = None) -> None:
        if sock is None:
            try:
                sock = socket.socket(AF_QIPCRTR, socket.SOCK_DGRAM)
            except OSError as exc:
                raise ConnectionError(f"create QRTR socket: {exc}") from exc
        self.sock = sock
        self.service: Optional[Service] = None
        self.read_timeout = 30.0

    def sendto(self, dest: SockAddr, data: bytes) -> int:
        if not data:
            raise ValueError("data is empty")
        return self.sock.sendto(bytes(data), (dest.node, dest.port))

    def recv(self, size: int) -> Tuple[bytes, SockAddr]:
        """Receive one datagram and its sender, waiting up to ``read_timeout``."""
        self.sock.settimeout(_RECV_POLL)
        deadline = time.monotonic() + self.read_timeout
        while time.monotonic() < deadline:
            try:
                data, address = self.sock.recvfrom(size)
            except (socket.timeout, BlockingIOError):
                time.sleep(0.01)
                continue
            node, port = address[0], address[1]
            return data, SockAddr(node, port)
        raise TimeoutError("QRTR receive deadline exceeded")

    def read(self, size: int) -> bytes:
        """Receive the next datagram from the bound service, skipping all others."""
        while True:
            data, sender = self.recv(size)
            if sender.port == PORT_CONTROL:
                continue
            if self.service is not None and (
                sender.node != self.service.node or sender.port != self.service.port
            ):
                continue
            return data

    def write(self, data: bytes) -> int:
        if self.service is None:
            raise ConnectionError("no QRTR service is bound")
        return self.sendto(SockAddr(self.service.node, self.service.port), data)

    def close(self) -> None:
        self.sock.close()


class QRTR(QMIClient):
    """A QMI client talking to the UIM service over QRTR."""

    def __init__(self, slot: int, conn: Optional[QRTRConn] = None) -> None:
        if conn is None:
            conn = QRTRConn()
        super().__init__(QRTRTransport(conn), slot)
        self.conn = conn
        try:
            self.conn.service = self.find_service(ServiceType.UIM)
        except BaseException:
            conn.close()
            raise

    def _send_lookup(self, service_type: int) -> None:
        packet = ControlPacket(PacketType.NEW_LOOKUP, Service(int(service_type)))
        self.conn.sendto(SockAddr(NODE_BROADCAST, PORT_CONTROL), packet.to_bytes())

    def find_service(self, service_type: int) -> Service:
        """Look up a service on the bus and return its announcement."""
        self._send_lookup(service_type)
        deadline = time.monotonic() + _LOOKUP_TIMEOUT
        while time.monotonic() < deadline:
            data, _ = self.conn.recv(1024)
            if len(data) < 4:
                continue
            if struct.unpack_from("<I", data)[0] != PacketType.NEW_SERVER:
                continue
            service = Service.parse(data[4:])
            if service.service == int(service_type):
                return service
        raise LookupError(f"service {int(service_type)} not found")

    def disconnect(self) -> None:
        self.conn.close()