"""A smart card channel over the QMI UIM service."""

from __future__ import annotations

import threading
import time
from typing import Any

from .errors import QMIError, QMIProtocolError
from .protocol import (
    CloseLogicalChannelRequest,
    GetCardStatusRequest,
    GetSlotStatusRequest,
    OpenLogicalChannelRequest,
    SwitchSlotRequest,
    TransmitAPDURequest,
)
from .tlvs import Transport

_ACTIVATION_ATTEMPTS = 10
_ACTIVATION_INTERVAL = 0.5


class QMIClient:
    """Carries APDUs to a card through a QMI transport."""

    def __init__(self, transport: Transport, slot: int) -> None:
        self.transport = transport
        self.slot = slot
        self.client_id = 0
        self.txn_id = 0
        self._channel = 0
        self._lock = threading.Lock()

    def _next_transaction(self) -> int:
        with self._lock:
            self.txn_id += 1
            return self.txn_id & 0xFFFF

    def _send(self, builder: Any) -> Any:
        request = builder.request()
        self.transport.transmit(request)
        return request.result

    def connect(self) -> None:
        """Make the configured slot active; afterwards it is addressed as slot 1."""
        self._ensure_slot_activated()
        # Once the configured slot is active it is mapped to logical slot 1.
        self.slot = 1

    def _ensure_slot_activated(self) -> None:
        try:
            slot = self._current_activated_slot()
        except QMIProtocolError as exc:
            # Older devices do not know the slot status command.
            if exc.code == QMIError.NOT_SUPPORTED:
                return
            raise
        if slot == self.slot:
            return
        self._switch_slot()
        self._wait_for_slot_activation()

    def _current_activated_slot(self) -> int:
        status = self._send(
            GetSlotStatusRequest(self.client_id, self._next_transaction())
        )
        return status.activated_slot

    def _switch_slot(self) -> None:
        self._send(
            SwitchSlotRequest(self.client_id, self._next_transaction(), 1, self.slot)
        )

    def _wait_for_slot_activation(self) -> None:
        error: Exception | None = None
        for _ in range(_ACTIVATION_ATTEMPTS):
            try:
                status = self._send(
                    GetCardStatusRequest(self.client_id, self._next_transaction())
                )
            except Exception as exc:  # retry on any transport failure
                error = exc
                continue
            if status.ready():
                return
            time.sleep(_ACTIVATION_INTERVAL)
        raise TimeoutError(
            f"sim did not become available after slot {self.slot} activation err: {error}"
        ) from error

    def open_logical_channel(self, aid: bytes) -> int:
        self._channel = self._send(
            OpenLogicalChannelRequest(
                self.client_id, self._next_transaction(), self.slot, bytes(aid)
            )
        )
        return self._channel

    def close_logical_channel(self, channel: int) -> None:
        self._send(
            CloseLogicalChannelRequest(
                self.client_id, self._next_transaction(), self.slot, channel
            )
        )

    def transmit(self, command: bytes) -> bytes:
        return self._send(
            TransmitAPDURequest(
                self.client_id,
                self._next_transaction(),
                self.slot,
                self._channel,
                bytes(command),
            )
        )