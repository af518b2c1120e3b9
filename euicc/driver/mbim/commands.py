"""MBIM commands used to reach the UICC, with decoders for their answers."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import List, Union

from .codes import (
    CID_DEVICE_SLOT_MAPPINGS,
    CID_PROXY_CONTROL_CONFIGURATION,
    CID_SUBSCRIBER_READY_STATUS,
    CID_UICC_APDU,
    CID_UICC_CLOSE_CHANNEL,
    CID_UICC_OPEN_CHANNEL,
    SERVICE_BASIC_CONNECT,
    SERVICE_MBIM_PROXY_CONTROL,
    SERVICE_MS_BASIC_CONNECT_EXTENSIONS,
    SERVICE_MS_UICC_LOW_LEVEL_ACCESS,
    CommandType,
    MessageType,
    SubscriberReadyState,
)
from .message import Command, Request

_OPEN_MAX_CONTROL_TRANSFER = 4096


def _ignore(data: bytes) -> None:
    return None


def _enum(kind, value):
    try:
        return kind(value)
    except ValueError:
        return value


def _command(service_id: bytes, command_id: int, command_type: int, data: bytes) -> Command:
    return Command(
        fragment_total=1,
        fragment_current=0,
        service_id=service_id,
        command_id=command_id,
        command_type=int(command_type),
        data=data,
    )


# Proxy configuration


@dataclass
class ProxyConfigRequest:
    """Tells the MBIM proxy which device path to open."""

    transaction_id: int
    device_path: str
    timeout: int = 30

    def request(self) -> Request:
        path = self.device_path.encode("utf-16-le") + b"\x00\x00"
        data = struct.pack("<III", 12, len(path), self.timeout) + path
        return Request(
            message_type=MessageType.COMMAND,
            transaction_id=self.transaction_id,
            command=_command(
                SERVICE_MBIM_PROXY_CONTROL,
                CID_PROXY_CONTROL_CONFIGURATION,
                CommandType.SET,
                data,
            ),
            response=_ignore,
        )


# Open device


@dataclass
class OpenDeviceRequest:
    """The MBIM OPEN message."""

    transaction_id: int

    def request(self) -> Request:
        return Request(
            message_type=MessageType.OPEN,
            transaction_id=self.transaction_id,
            command=struct.pack("<I", _OPEN_MAX_CONTROL_TRANSFER),
            response=_ignore,
        )


# Device slot mappings


@dataclass
class SlotMapping:
    slot: int


@dataclass
class DeviceSlotMappingsResponse:
    map_count: int = 0
    slot_mappings: List[SlotMapping] = field(default_factory=list)

    @classmethod
    def parse(cls, data: bytes) -> "DeviceSlotMappingsResponse":
        data = bytes(data)
        if len(data) < 4:
            raise ValueError("device slot mappings response data too short")
        (count,) = struct.unpack_from("<I", data)
        if count == 0:
            return cls(0, [])
        data_offset = 4 + count * 8
        if len(data) < data_offset:
            raise ValueError("device slot mappings response buffer too short")
        mappings = []
        for index in range(count):
            offset = data_offset + index * 4
            if len(data) < offset + 4:
                raise ValueError("device slot mappings response slot data too short")
            mappings.append(SlotMapping(struct.unpack_from("<I", data, offset)[0]))
        return cls(count, mappings)


@dataclass
class DeviceSlotMappingsRequest:
    """Queries the slot mapping, or sets it when ``map_count`` is positive."""

    transaction_id: int
    map_count: int = 0
    slot_mappings: List[SlotMapping] = field(default_factory=list)

    def request(self) -> Request:
        data = bytearray(struct.pack("<I", self.map_count))
        if self.map_count > 0:
            data_offset = 4 + self.map_count * 8
            for index in range(self.map_count):
                data += struct.pack("<II", data_offset + index * 4, 4)
            for mapping in self.slot_mappings:
                data += struct.pack("<I", mapping.slot)
        command_type = CommandType.SET if self.map_count > 0 else CommandType.QUERY
        return Request(
            message_type=MessageType.COMMAND,
            transaction_id=self.transaction_id,
            command=_command(
                SERVICE_MS_BASIC_CONNECT_EXTENSIONS,
                CID_DEVICE_SLOT_MAPPINGS,
                command_type,
                bytes(data),
            ),
            response=DeviceSlotMappingsResponse.parse,
        )


# Subscriber ready status


@dataclass
class SubscriberReadyStatusResponse:
    ready_state: Union[SubscriberReadyState, int]

    @classmethod
    def parse(cls, data: bytes) -> "SubscriberReadyStatusResponse":
        if len(data) < 4:
            raise ValueError("subscriber ready status response data too short")
        (state,) = struct.unpack_from("<I", bytes(data))
        return cls(_enum(SubscriberReadyState, state))


@dataclass
class SubscriberReadyStatusRequest:
    transaction_id: int

    def request(self) -> Request:
        return Request(
            message_type=MessageType.COMMAND,
            transaction_id=self.transaction_id,
            command=_command(
                SERVICE_BASIC_CONNECT,
                CID_SUBSCRIBER_READY_STATUS,
                CommandType.QUERY,
                b"",
            ),
            response=SubscriberReadyStatusResponse.parse,
            read_timeout=1.0,
        )


# Open logical channel


@dataclass
class OpenLogicalChannelResponse:
    status: int
    channel: int
    response: bytes

    @classmethod
    def parse(cls, data: bytes) -> "OpenLogicalChannelResponse":
        data = bytes(data)
        if len(data) < 12:
            raise ValueError("open logical channel response data too short")
        status, channel, size = struct.unpack_from("<III", data)
        if len(data) < 16 + size:
            raise ValueError("APDU response buffer too short")
        return cls(status, channel, data[16:16 + size])


@dataclass
class OpenLogicalChannelRequest:
    transaction_id: int
    app_id: bytes
    select_p2_arg: int = 0
    group: int = 1

    def request(self) -> Request:
        app_id = bytes(self.app_id)
        data = struct.pack("<IIII", len(app_id), 16, self.select_p2_arg, self.group) + app_id
        return Request(
            message_type=MessageType.COMMAND,
            transaction_id=self.transaction_id,
            command=_command(
                SERVICE_MS_UICC_LOW_LEVEL_ACCESS,
                CID_UICC_OPEN_CHANNEL,
                CommandType.SET,
                data,
            ),
            response=OpenLogicalChannelResponse.parse,
        )


# Close logical channel


@dataclass
class CloseLogicalChannelResponse:
    status: int

    @classmethod
    def parse(cls, data: bytes) -> "CloseLogicalChannelResponse":
        if len(data) < 4:
            raise ValueError("close logical channel response data too short")
        return cls(struct.unpack_from("<I", bytes(data))[0])


@dataclass
class CloseLogicalChannelRequest:
    transaction_id: int
    channel: int
    group: int = 1

    def request(self) -> Request:
        return Request(
            message_type=MessageType.COMMAND,
            transaction_id=self.transaction_id,
            command=_command(
                SERVICE_MS_UICC_LOW_LEVEL_ACCESS,
                CID_UICC_CLOSE_CHANNEL,
                CommandType.SET,
                struct.pack("<II", self.channel, self.group),
            ),
            response=CloseLogicalChannelResponse.parse,
        )


# Transmit APDU


@dataclass
class TransmitAPDUResponse:
    status: int
    response: bytes

    @classmethod
    def parse(cls, data: bytes) -> "TransmitAPDUResponse":
        data = bytes(data)
        if len(data) < 8:
            raise ValueError("APDU response data too short")
        status, size = struct.unpack_from("<II", data)
        if len(data) < 12 + size:
            raise ValueError("APDU response buffer too short")
        return cls(status, data[12:12 + size])


@dataclass
class TransmitAPDURequest:
    transaction_id: int
    channel: int
    apdu: bytes
    secure_messaging: int = 0
    class_byte_type: int = 0

    def request(self) -> Request:
        apdu = bytes(self.apdu)
        data = (
            struct.pack(
                "<IIIII",
                self.channel,
                self.secure_messaging,
                self.class_byte_type,
                len(apdu),
                20,
            )
            + apdu
        )
        return Request(
            message_type=MessageType.COMMAND,
            transaction_id=self.transaction_id,
            command=_command(
                SERVICE_MS_UICC_LOW_LEVEL_ACCESS,
                CID_UICC_APDU,
                CommandType.SET,
                data,
            ),
            response=TransmitAPDUResponse.parse,
        )