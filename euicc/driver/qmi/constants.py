"""QMI service, message and UIM state identifiers."""

from __future__ import annotations

import enum


class ServiceType(enum.IntEnum):
    """QMI services."""

    CONTROL = 0x00
    UIM = 0x0B


class MessageType(enum.IntEnum):
    """QMI message kinds."""

    REQUEST = 0x00
    RESPONSE = 0x02
    INDICATION = 0x04


class MessageID(enum.IntEnum):
    """QMI command message identifiers."""

    # control service
    CTL_ALLOCATE_CLIENT_ID = 0x0022
    CTL_RELEASE_CLIENT_ID = 0x0023
    CTL_INTERNAL_PROXY_OPEN = 0xFF00

    # UIM service
    UIM_SEND_APDU = 0x003B
    UIM_OPEN_LOGICAL_CHANNEL = 0x0042
    UIM_CLOSE_LOGICAL_CHANNEL = 0x003F
    UIM_SWITCH_SLOT = 0x0046
    UIM_GET_SLOT_STATUS = 0x0047
    UIM_GET_CARD_STATUS = 0x002F


QMUX_HEADER_IF_TYPE = 0x01
QMUX_HEADER_CONTROL_FLAG_REQUEST = 0x00


class QMIResult(enum.IntEnum):
    """The result code carried in a QMI result TLV."""

    SUCCESS = 0x0000
    FAILURE = 0x0001


class UIMPhysicalCardState(enum.IntEnum):
    UNKNOWN = 0x00
    ABSENT = 0x01
    PRESENT = 0x02


class UIMSlotState(enum.IntEnum):
    INACTIVE = 0x00
    ACTIVE = 0x01


class UIMCardState(enum.IntEnum):
    ABSENT = 0x00
    PRESENT = 0x01
    UNKNOWN = 0x02


class UIMCardApplicationType(enum.IntEnum):
    UNKNOWN = 0x00
    SIM = 0x01
    USIM = 0x02
    RUIM = 0x03
    CSIM = 0x04
    ISIM = 0x05


class UIMCardApplicationState(enum.IntEnum):
    UNKNOWN = 0x00
    DETECTED = 0x01
    PIN1_OR_UPIN_PIN_REQUIRED = 0x02
    PUK1_OR_UPIN_PUK_REQUIRED = 0x03
    CHECK_PERSONALIZATION_STATE = 0x04
    PIN1_BLOCKED = 0x05
    ILLEGAL = 0x06
    READY = 0x07