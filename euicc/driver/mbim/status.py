"""MBIM status codes reported by the device."""

from __future__ import annotations

import enum


class MBIMStatus(enum.IntEnum):
    NONE = 0
    BUSY = 1
    FAILURE = 2
    SIM_NOT_INSERTED = 3
    BAD_SIM = 4
    PIN_REQUIRED = 5
    PIN_DISABLED = 6
    NOT_REGISTERED = 7
    PROVIDERS_NOT_FOUND = 8
    NO_DEVICE_SUPPORT = 9
    PROVIDER_NOT_VISIBLE = 10
    DATA_CLASS_NOT_AVAILABLE = 11
    PACKET_SERVICE_DETACHED = 12
    MAX_ACTIVATED_CONTEXTS = 13
    NOT_INITIALIZED = 14
    VOICE_CALL_IN_PROGRESS = 15
    CONTEXT_NOT_ACTIVATED = 16
    SERVICE_NOT_ACTIVATED = 17
    INVALID_ACCESS_STRING = 18
    INVALID_USER_NAME_PWD = 19
    RADIO_POWER_OFF = 20
    INVALID_PARAMETERS = 21
    READ_FAILURE = 22
    WRITE_FAILURE = 23
    RESERVED = 24
    NO_PHONEBOOK = 25
    PARAMETER_TOO_LONG = 26
    STK_BUSY = 27
    OPERATION_NOT_ALLOWED = 28
    MEMORY_FAILURE = 29
    INVALID_MEMORY_INDEX = 30
    MEMORY_FULL = 31
    FILTER_NOT_SUPPORTED = 32
    DSS_INSTANCE_LIMIT = 33
    INVALID_DEVICE_SERVICE_OPERATION = 34
    AUTH_INCORRECT_AUTN = 35
    AUTH_SYNC_FAILURE = 36
    AUTH_AMF_NOT_SET = 37
    CONTEXT_NOT_SUPPORTED = 38
    SMS_UNKNOWN_SMSC_ADDRESS = 0x00000064
    SMS_NETWORK_TIMEOUT = 0x00000065
    SMS_LANG_NOT_SUPPORTED = 0x00000066
    SMS_ENCODING_NOT_SUPPORTED = 0x00000067
    SMS_FORMAT_NOT_SUPPORTED = 0x00000068
    MS_NO_LOGICAL_CHANNELS = 0x87430001
    MS_SELECT_FAILED = 0x87430002
    MS_INVALID_LOGICAL_CHANNEL = 0x87430003
    INVALID_SIGNATURE = 0x91000001
    INVALID_IMEI = 0x91000002
    INVALID_TIMESTAMP = 0x91000003
    NETWORK_LIST_TOO_LARGE = 0x91000004
    SIGNATURE_ALGORITHM_NOT_SUPPORTED = 0x91000005
    FEATURE_NOT_SUPPORTED = 0x91000006
    DECODE_OR_PARSING_ERROR = 0x91000007

    def description(self) -> str:
        if self is MBIMStatus.NONE:
            return "Success"
        if self is MBIMStatus.RESERVED:
            return _unknown(int(self))
        return self.name.replace("_", " ").title()


def _unknown(code: int) -> str:
    return f"Unknown MBIM Status Error: {code}"


class MBIMStatusError(Exception):
    """Raised when a device answers a command with a non-success status."""

    def __init__(self, status: int) -> None:
        try:
            self.status = MBIMStatus(status)
            message = self.status.description()
        except ValueError:
            self.status = int(status)
            message = _unknown(self.status)
        super().__init__(message)