"""MBIM message types, services and command identifiers."""

from __future__ import annotations

import enum


class MessageType(enum.IntEnum):
    OPEN = 0x00000001
    CLOSE = 0x00000002
    COMMAND = 0x00000003
    HOST_ERROR = 0x00000004
    FUNCTION_ERROR = 0x00000005
    INDICATE_STATUS = 0x00000007
    OPEN_DONE = 0x80000001
    CLOSE_DONE = 0x80000002
    COMMAND_DONE = 0x80000003
    FUNCTION_ERROR_DONE = 0x80000005
    INDICATE_STATUS_DONE = 0x80000007


class SubscriberReadyState(enum.IntEnum):
    NOT_INITIALIZED = 0x00000000
    INITIALIZED = 0x00000001
    SIM_NOT_INSERTED = 0x00000002
    BAD_SIM = 0x00000003
    FAILURE = 0x00000004
    NOT_ACTIVATED = 0x00000005
    DEVICE_LOCKED = 0x00000006
    NO_ESIM_PROFILE = 0x00000007


class CommandType(enum.IntEnum):
    QUERY = 0x00000000
    SET = 0x00000001


SERVICE_BASIC_CONNECT = bytes(
    [0xA2, 0x89, 0xCC, 0x33, 0xBC, 0xBB, 0x8B, 0x4F, 0xB6, 0xB0, 0x13, 0x3E, 0xC2, 0xAA, 0xE6, 0xDF]
)
SERVICE_MS_UICC_LOW_LEVEL_ACCESS = bytes(
    [0xC2, 0xF6, 0x58, 0x8E, 0xF0, 0x37, 0x4B, 0xC9, 0x86, 0x65, 0xF4, 0xD4, 0x4B, 0xD0, 0x93, 0x67]
)
SERVICE_MS_BASIC_CONNECT_EXTENSIONS = bytes(
    [0x3D, 0x01, 0xDC, 0xC5, 0xFE, 0xF5, 0x4D, 0x05, 0x0D, 0x3A, 0xBE, 0xF7, 0x05, 0x8E, 0x9A, 0xAF]
)
SERVICE_MBIM_PROXY_CONTROL = bytes(
    [0x83, 0x8C, 0xF7, 0xFB, 0x8D, 0x0D, 0x4D, 0x7F, 0x87, 0x1E, 0xD7, 0x1D, 0xBE, 0xFB, 0xB3, 0x9B]
)

# Basic Connect command identifiers
CID_DEVICE_CAPS = 0x00000001
CID_SUBSCRIBER_READY_STATUS = 0x00000002
CID_RADIO_STATE = 0x00000003
CID_PIN_STATE = 0x00000004
CID_PIN_LIST = 0x00000005
CID_HOME_PROVIDER = 0x00000006
CID_PREFERRED_PROVIDERS = 0x00000007
CID_VISIBLE_PROVIDERS = 0x00000008
CID_REGISTER_STATE = 0x00000009

# UICC low level access command identifiers
CID_UICC_ATR = 0x00000001
CID_UICC_OPEN_CHANNEL = 0x00000002
CID_UICC_CLOSE_CHANNEL = 0x00000003
CID_UICC_APDU = 0x00000004
CID_UICC_TERMINAL_CAPABILITY = 0x00000005
CID_UICC_RESET = 0x00000006

# Proxy control and basic connect extension command identifiers
CID_PROXY_CONTROL_CONFIGURATION = 0x00000001
CID_PROXY_CONTROL_VERSION = 0x00000002
CID_DEVICE_SLOT_MAPPINGS = 0x00000007
CID_SLOT_INFO_STATUS = 0x00000008