"""A smart card channel through the QMI proxy's abstract Unix socket."""

from __future__ import annotations

import socket
from typing import Optional

from .client import QMIClient
from .protocol import AllocateClientIDRequest, InternalOpenRequest, ReleaseClientIDRequest
from .qmux import QMUXTransport

_PROXY_ADDRESS = "\0qmi-proxy"


def connect_qmi_proxy() -> socket.socket:
    """Connect to the QMI proxy listening on its abstract Unix socket."""
    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    try:
        sock.connect(_PROXY_ADDRESS)
    except OSError as exc:
        sock.close()
        raise ConnectionError(f"connect to qmi-proxy: {exc}") from exc
    return sock


class QMI(QMIClient):
    """A QMI client bound to a device path through the QMI proxy."""

    def __init__(self, device: str, slot: int, conn: Optional[socket.socket] = None) -> None:
        if conn is None:
            conn = connect_qmi_proxy()
        super().__init__(QMUXTransport(conn), slot)
        self.conn = conn
        self.device = device
        try:
            self._open_proxy_connection()
            self._allocate_client_id()
        except BaseException:
            self.conn.close()
            raise

    def _open_proxy_connection(self) -> None:
        request = InternalOpenRequest(self._next_transaction(), self.device.encode())
        try:
            self._send(request)
        except EOFError as exc:
            raise ConnectionError(f"device {self.device} is not connected") from exc

    def _allocate_client_id(self) -> None:
        try:
            self.client_id = self._send(AllocateClientIDRequest(self._next_transaction()))
        except EOFError as exc:
            raise ConnectionError(
                f"device {self.device} doesn't support QMI protocol"
            ) from exc

    def disconnect(self) -> None:
        """Release the client ID and close the proxy connection."""
        self._send(ReleaseClientIDRequest(self.client_id, self._next_transaction()))
        self.conn.close()