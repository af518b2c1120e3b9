"""A smart card channel through the MBIM proxy's abstract Unix socket."""

from __future__ import annotations

import socket
import struct
import threading
import time
from typing import Any, Optional

from .codes import SubscriberReadyState
from .commands import (
    CloseLogicalChannelRequest,
    DeviceSlotMappingsRequest,
    OpenDeviceRequest,
    OpenLogicalChannelRequest,
    ProxyConfigRequest,
    SlotMapping,
    SubscriberReadyStatusRequest,
    TransmitAPDURequest,
)

_PROXY_ADDRESS = "\0mbim-proxy"
_ACTIVATION_ATTEMPTS = 10
_ACTIVATION_INTERVAL = 0.5
_READY_STATES = (SubscriberReadyState.INITIALIZED, SubscriberReadyState.NO_ESIM_PROFILE)


def connect_mbim_proxy() -> socket.socket:
    """Connect to the MBIM proxy listening on its abstract Unix socket."""
    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    try:
        sock.connect(_PROXY_ADDRESS)
    except OSError as exc:
        sock.close()
        raise ConnectionError(f"connect to mbim-proxy: {exc}") from exc
    return sock


class MBIM:
    """Carries APDUs to a card in a 1-based ``slot`` of an MBIM device."""

    def __init__(self, device: str, slot: int, conn: Optional[Any] = None) -> None:
        if slot == 0:
            raise ValueError("slot must be >= 1")
        self.device = device
        self.slot = slot - 1
        self.conn = conn if conn is not None else connect_mbim_proxy()
        self.txn_id = 0
        self.channel = 0
        self._lock = threading.Lock()

    def _next_transaction(self) -> int:
        with self._lock:
            self.txn_id = (self.txn_id + 1) & 0xFFFFFFFF
            return self.txn_id

    def _send(self, builder: Any) -> Any:
        request = builder.request()
        request.transmit(self.conn)
        return request.result

    def connect(self) -> None:
        """Configure the proxy, open the device and activate the slot."""
        for label, step in (
            ("configure proxy", self._configure_proxy),
            ("open device", self._open_device),
            ("ensure slot is activated", self._ensure_slot_activated),
        ):
            try:
                step()
            except Exception as exc:
                raise ConnectionError(f"{label}: {exc}") from exc

    def _configure_proxy(self) -> None:
        try:
            self._send(ProxyConfigRequest(self._next_transaction(), self.device, 30))
        except EOFError as exc:
            raise ConnectionError(f"device {self.device} is not connected") from exc

    def _open_device(self) -> None:
        self._send(OpenDeviceRequest(self._next_transaction()))

    def _ensure_slot_activated(self) -> None:
        if self._current_activated_slot() == self.slot:
            return
        self._activate_slot(self.slot)
        self._wait_for_slot_activation()

    def _current_activated_slot(self) -> int:
        mappings = self._send(DeviceSlotMappingsRequest(self._next_transaction(), 0))
        if not mappings.slot_mappings:
            raise LookupError("no slot mappings found")
        return mappings.slot_mappings[0].slot & 0xFF

    def _activate_slot(self, slot: int) -> None:
        self._send(
            DeviceSlotMappingsRequest(self._next_transaction(), 1, [SlotMapping(slot)])
        )

    def _wait_for_slot_activation(self) -> None:
        error: Optional[Exception] = None
        for _ in range(_ACTIVATION_ATTEMPTS):
            try:
                status = self._send(SubscriberReadyStatusRequest(self._next_transaction()))
            except Exception as exc:  # retry on any failure
                error = exc
                continue
            if status.ready_state in _READY_STATES:
                return
            time.sleep(_ACTIVATION_INTERVAL)
        raise TimeoutError(
            f"sim did not become available after slot {self.slot} activation err: {error}"
        ) from error

    def open_logical_channel(self, aid: bytes) -> int:
        response = self._send(
            OpenLogicalChannelRequest(self._next_transaction(), bytes(aid), 0, 1)
        )
        self.channel = response.channel
        return self.channel & 0xFF

    def transmit(self, command: bytes) -> bytes:
        response = self._send(
            TransmitAPDURequest(self._next_transaction(), self.channel, bytes(command))
        )
        return response.response + struct.pack("<H", response.status & 0xFFFF)

    def close_logical_channel(self, channel: int) -> None:
        self._send(CloseLogicalChannelRequest(self._next_transaction(), channel, 1))

    def disconnect(self) -> None:
        self.conn.close()

    def __enter__(self) -> "MBIM":
        return self

    def __exit__(self, *args) -> None:
        self.disconnect()