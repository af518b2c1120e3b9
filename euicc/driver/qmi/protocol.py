"""QMI control and UIM requests with decoders for their responses."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import List, Type, TypeVar, Union

from .constants import (
    MessageID,
    ServiceType,
    UIMCardApplicationState,
    UIMCardApplicationType,
    UIMCardState,
    UIMPhysicalCardState,
    UIMSlotState,
)
from .tlvs import TLV, TLVs, Request

E = TypeVar("E")


def _enum(kind: Type[E], value: int) -> Union[E, int]:
    try:
        return kind(value)  # type: ignore[call-arg]
    except ValueError:
        return value


class _Reader:
    """Little-endian field reader; a field cut short by the end reads as zero."""

    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._pos = 0

    def take(self, size: int) -> bytes:
        chunk = self._data[self._pos:self._pos + size]
        self._pos = min(self._pos + size, len(self._data))
        return chunk if len(chunk) == size else bytes(size)

    def skip(self, size: int) -> None:
        self._pos = min(self._pos + size, len(self._data))

    def u8(self) -> int:
        return self.take(1)[0]

    def u16(self) -> int:
        return struct.unpack("<H", self.take(2))[0]

    def u32(self) -> int:
        return struct.unpack("<I", self.take(4))[0]


def _ignore(tlvs: TLVs) -> None:
    return None


# Internal open


@dataclass
class InternalOpenRequest:
    """Asks the QMI proxy to open a device path."""

    transaction_id: int
    device_path: bytes

    def request(self) -> Request:
        return Request(
            service_type=ServiceType.CONTROL,
            message_id=MessageID.CTL_INTERNAL_PROXY_OPEN,
            transaction_id=self.transaction_id,
            value=TLVs([TLV(0x01, bytes(self.device_path))]),
            response=_ignore,
        )


# Client identifiers


def _decode_client_id(action: str):
    def decode(tlvs: TLVs) -> int:
        found = tlvs.find(0x01)
        if found is not None and len(found.value) >= 2:
            return found.value[1]
        raise ValueError(f"could not find {action} client ID in response")

    return decode


@dataclass
class AllocateClientIDRequest:
    """Allocates a UIM client identifier; the result is the client ID."""

    transaction_id: int

    def request(self) -> Request:
        return Request(
            service_type=ServiceType.CONTROL,
            message_id=MessageID.CTL_ALLOCATE_CLIENT_ID,
            transaction_id=self.transaction_id,
            value=TLVs([TLV(0x01, bytes([ServiceType.UIM]))]),
            response=_decode_client_id("allocated"),
        )


@dataclass
class ReleaseClientIDRequest:
    """Releases a UIM client identifier; the result is the released ID."""

    client_id: int
    transaction_id: int

    def request(self) -> Request:
        return Request(
            service_type=ServiceType.CONTROL,
            message_id=MessageID.CTL_RELEASE_CLIENT_ID,
            transaction_id=self.transaction_id,
            value=TLVs([TLV(0x01, bytes([ServiceType.UIM, self.client_id]))]),
            response=_decode_client_id("released"),
        )


# Slots


@dataclass
class SwitchSlotRequest:
    """Maps a physical slot onto a logical slot."""

    client_id: int
    transaction_id: int
    logical_slot: int
    physical_slot: int

    def request(self) -> Request:
        return Request(
            service_type=ServiceType.UIM,
            message_id=MessageID.UIM_SWITCH_SLOT,
            transaction_id=self.transaction_id,
            client_id=self.client_id,
            value=TLVs(
                [
                    TLV(0x01, bytes([self.logical_slot])),
                    TLV(0x02, struct.pack("<I", self.physical_slot)),
                ]
            ),
            response=_ignore,
        )


@dataclass
class Slot:
    """The state of one physical slot."""

    card_state: Union[UIMPhysicalCardState, int]
    slot_state: Union[UIMSlotState, int]
    logical_slot: int
    iccid: bytes = bytes(10)


@dataclass
class _SlotStatus:
    slots: List[Slot] = field(default_factory=list)
    activated_slot: int = 0


def _decode_slot_status(tlvs: TLVs) -> _SlotStatus:
    found = tlvs.find(0x10)
    if found is None:
        raise ValueError("could not find slot status in response")
    reader = _Reader(found.value)
    status = _SlotStatus()
    for index in range(reader.u8()):
        card_state = _enum(UIMPhysicalCardState, reader.u32())
        slot_state = _enum(UIMSlotState, reader.u32())
        logical_slot = reader.u8()
        iccid = reader.take(10) if reader.u8() > 0 else bytes(10)
        if slot_state == UIMSlotState.ACTIVE:
            status.activated_slot = (index + 1) & 0xFF
        status.slots.append(Slot(card_state, slot_state, logical_slot, iccid))
    return status


@dataclass
class GetSlotStatusRequest:
    """Queries the slots; the result carries ``slots`` and ``activated_slot``."""

    client_id: int
    transaction_id: int

    def request(self) -> Request:
        return Request(
            service_type=ServiceType.UIM,
            message_id=MessageID.UIM_GET_SLOT_STATUS,
            transaction_id=self.transaction_id,
            client_id=self.client_id,
            read_timeout=1.0,
            response=_decode_slot_status,
        )


# Card status


@dataclass
class Application:
    type: Union[UIMCardApplicationType, int]
    state: Union[UIMCardApplicationState, int]


@dataclass
class Card:
    state: Union[UIMCardState, int]
    applications: List[Application] = field(default_factory=list)


@dataclass
class GetCardStatusResponse:
    index_gw_primary: int = 0
    index_1x_primary: int = 0
    index_gw_secondary: int = 0
    index_1x_secondary: int = 0
    cards: List[Card] = field(default_factory=list)

    def ready(self) -> bool:
        """True when a present card holds a USIM application in the ready state."""
        return any(
            app.type == UIMCardApplicationType.USIM
            and app.state == UIMCardApplicationState.READY
            for card in self.cards
            if card.state == UIMCardState.PRESENT
            for app in card.applications
        )


def _decode_card_status(tlvs: TLVs) -> GetCardStatusResponse:
    found = tlvs.find(0x10)
    if found is None:
        raise ValueError("could not find card status in response")
    reader = _Reader(found.value)
    status = GetCardStatusResponse(
        reader.u16(), reader.u16(), reader.u16(), reader.u16()
    )
    for _ in range(reader.u8()):
        card = Card(_enum(UIMCardState, reader.u8()))
        reader.skip(4)
        for _ in range(reader.u8()):
            card.applications.append(
                Application(
                    _enum(UIMCardApplicationType, reader.u8()),
                    _enum(UIMCardApplicationState, reader.u8()),
                )
            )
            reader.skip(28)
        status.cards.append(card)
    return status


@dataclass
class GetCardStatusRequest:
    """Queries card status; the result is a :class:`GetCardStatusResponse`."""

    client_id: int
    transaction_id: int

    def request(self) -> Request:
        return Request(
            service_type=ServiceType.UIM,
            message_id=MessageID.UIM_GET_CARD_STATUS,
            transaction_id=self.transaction_id,
            client_id=self.client_id,
            response=_decode_card_status,
        )


# Logical channels


def _decode_channel(tlvs: TLVs) -> int:
    found = tlvs.find(0x10)
    if found is not None and len(found.value) >= 1:
        return found.value[0]
    raise ValueError("could not find logical channel in response")


@dataclass
class OpenLogicalChannelRequest:
    """Opens a logical channel to an application; the result is the channel."""

    client_id: int
    transaction_id: int
    slot: int
    aid: bytes

    def request(self) -> Request:
        aid = bytes(self.aid)
        return Request(
            service_type=ServiceType.UIM,
            message_id=MessageID.UIM_OPEN_LOGICAL_CHANNEL,
            transaction_id=self.transaction_id,
            client_id=self.client_id,
            value=TLVs(
                [
                    TLV(0x10, bytes([len(aid) & 0xFF]) + aid),
                    TLV(0x01, bytes([self.slot])),
                ]
            ),
            response=_decode_channel,
        )


@dataclass
class CloseLogicalChannelRequest:
    """Closes a logical channel."""

    client_id: int
    transaction_id: int
    slot: int
    channel: int

    def request(self) -> Request:
        return Request(
            service_type=ServiceType.UIM,
            message_id=MessageID.UIM_CLOSE_LOGICAL_CHANNEL,
            transaction_id=self.transaction_id,
            client_id=self.client_id,
            value=TLVs(
                [
                    TLV(0x01, bytes([self.slot])),
                    TLV(0x11, bytes([self.channel])),
                    TLV(0x13, b"\x01"),
                ]
            ),
            response=_ignore,
        )


# APDU


def _decode_apdu(tlvs: TLVs) -> bytes:
    found = tlvs.find(0x10)
    if found is not None and len(found.value) >= 2:
        size = found.value[0] | (found.value[1] << 8)
        if len(found.value) >= 2 + size:
            return bytes(found.value[2:2 + size])
    raise ValueError("could not find APDU response in message")


@dataclass
class TransmitAPDURequest:
    """Sends a raw APDU on a channel; the result is the response APDU."""

    client_id: int
    transaction_id: int
    slot: int
    channel: int
    command: bytes

    def request(self) -> Request:
        command = bytes(self.command)
        return Request(
            service_type=ServiceType.UIM,
            message_id=MessageID.UIM_SEND_APDU,
            transaction_id=self.transaction_id,
            client_id=self.client_id,
            value=TLVs(
                [
                    TLV(0x10, bytes([self.channel])),
                    TLV(0x02, struct.pack("<H", len(command) & 0xFFFF) + command),
                    TLV(0x01, bytes([self.slot])),
                ]
            ),
            response=_decode_apdu,
        )