"""QMI protocol error codes as found in result TLVs."""

from __future__ import annotations

import enum
from typing import Union


class QMIError(enum.IntEnum):
    NONE = 0
    MALFORMED_MESSAGE = 1
    NO_MEMORY = 2
    INTERNAL = 3
    ABORTED = 4
    CLIENT_IDS_EXHAUSTED = 5
    UNABORTABLE_TRANSACTION = 6
    INVALID_CLIENT_ID = 7
    NO_THRESHOLDS_PROVIDED = 8
    INVALID_HANDLE = 9
    INVALID_PROFILE = 10
    INVALID_PIN_ID = 11
    INCORRECT_PIN = 12
    NO_NETWORK_FOUND = 13
    CALL_FAILED = 14
    OUT_OF_CALL = 15
    NOT_PROVISIONED = 16
    MISSING_ARGUMENT = 17
    ARGUMENT_TOO_LONG = 19
    INVALID_TRANSACTION_ID = 22
    DEVICE_IN_USE = 23
    NETWORK_UNSUPPORTED = 24
    DEVICE_UNSUPPORTED = 25
    NO_EFFECT = 26
    NO_FREE_PROFILE = 27
    INVALID_PDP_TYPE = 28
    INVALID_TECHNOLOGY_PREFERENCE = 29
    INVALID_PROFILE_TYPE = 30
    INVALID_SERVICE_TYPE = 31
    INVALID_REGISTER_ACTION = 32
    INVALID_PS_ATTACH_ACTION = 33
    AUTHENTICATION_FAILED = 34
    PIN_BLOCKED = 35
    PIN_ALWAYS_BLOCKED = 36
    UIM_UNINITIALIZED = 37
    MAXIMUM_QOS_REQUESTS_IN_USE = 38
    INCORRECT_FLOW_FILTER = 39
    NETWORK_QOS_UNAWARE = 40
    INVALID_QOS_ID = 41
    REQUESTED_NUMBER_UNSUPPORTED = 42
    INTERFACE_NOT_FOUND = 43
    FLOW_SUSPENDED = 44
    INVALID_DATA_FORMAT = 45
    GENERAL_ERROR = 46
    UNKNOWN_ERROR = 47
    INVALID_ARGUMENT = 48
    INVALID_INDEX = 49
    NO_ENTRY = 50
    DEVICE_STORAGE_FULL = 51
    DEVICE_NOT_READY = 52
    NETWORK_NOT_READY = 53
    WMS_CAUSE_CODE = 54
    WMS_MESSAGE_NOT_SENT = 55
    WMS_MESSAGE_DELIVERY_FAILURE = 56
    WMS_INVALID_MESSAGE_ID = 57
    WMS_ENCODING = 58
    AUTHENTICATION_LOCK = 59
    INVALID_TRANSITION = 60
    NOT_MCAST_INTERFACE = 61
    MAXIMUM_MCAST_REQUESTS_IN_USE = 62
    INVALID_MCAST_HANDLE = 63
    INVALID_IP_FAMILY_PREFERENCE = 64
    SESSION_INACTIVE = 65
    SESSION_INVALID = 66
    SESSION_OWNERSHIP = 67
    INSUFFICIENT_RESOURCES = 68
    DISABLED = 69
    INVALID_OPERATION = 70
    INVALID_QMI_COMMAND = 71
    WMS_T_PDU_TYPE = 72
    WMS_SMSC_ADDRESS = 73
    INFORMATION_UNAVAILABLE = 74
    SEGMENT_TOO_LONG = 75
    SEGMENT_ORDER = 76
    BUNDLING_NOT_SUPPORTED = 77
    OPERATION_PARTIAL_FAILURE = 78
    POLICY_MISMATCH = 79
    SIM_FILE_NOT_FOUND = 80
    EXTENDED_INTERNAL = 81
    ACCESS_DENIED = 82
    HARDWARE_RESTRICTED = 83
    ACK_NOT_SENT = 84
    INJECT_TIMEOUT = 85
    INCOMPATIBLE_STATE = 90
    FDN_RESTRICT = 91
    SUPS_FAILURE_CASE = 92
    NO_RADIO = 93
    NOT_SUPPORTED = 94
    NO_SUBSCRIPTION = 95
    CARD_CALL_CONTROL_FAILED = 96
    NETWORK_ABORTED = 97
    MSG_BLOCKED = 98
    INVALID_SESSION_TYPE = 100
    INVALID_PB_TYPE = 101
    NO_SIM = 102
    PB_NOT_READY = 103
    PIN_RESTRICTION = 104
    PIN2_RESTRICTION = 105
    PUK_RESTRICTION = 106
    PUK2_RESTRICTION = 107
    PB_ACCESS_RESTRICTED = 108
    PB_DELETE_IN_PROGRESS = 109
    PB_TEXT_TOO_LONG = 110
    PB_NUMBER_TOO_LONG = 111
    PB_HIDDEN_KEY_RESTRICTION = 112
    PB_NOT_AVAILABLE = 113
    DEVICE_MEMORY_ERROR = 114
    NO_PERMISSION = 115
    TOO_SOON = 116
    TIME_NOT_ACQUIRED = 117
    OPERATION_IN_PROGRESS = 118
    FW_WRITE_FAILED = 388
    FW_INFO_READ_FAILED = 389
    FW_FILE_NOT_FOUND = 390
    FW_DIR_NOT_FOUND = 391
    FW_ALREADY_ACTIVATED = 392
    FW_CANNOT_GENERIC_IMAGE = 393
    FW_FILE_OPEN_FAILED = 400
    FW_UPDATE_DISCONTINUOUS_FRAME = 401
    FW_UPDATE_FAILED = 402
    CAT_EVENT_REGISTRATION_FAILED = 61441
    CAT_INVALID_TERMINAL_RESPONSE = 61442
    CAT_INVALID_ENVELOPE_COMMAND = 61443
    CAT_ENVELOPE_COMMAND_BUSY = 61444
    CAT_ENVELOPE_COMMAND_FAILED = 61445

    def description(self) -> str:
        """A human-readable description; "Unknown error" where none is known."""
        return _DESCRIPTIONS.get(self, _UNKNOWN)


_UNKNOWN = "Unknown error"

_DESCRIPTIONS = {
    QMIError.NONE: "No error",
    QMIError.MALFORMED_MESSAGE: "Malformed message",
    QMIError.NO_MEMORY: "No memory",
    QMIError.INTERNAL: "Internal error",
    QMIError.ABORTED: "Aborted",
    QMIError.CLIENT_IDS_EXHAUSTED: "Client IDs exhausted",
    QMIError.UNABORTABLE_TRANSACTION: "Unabortable transaction",
    QMIError.INVALID_CLIENT_ID: "Invalid client ID",
    QMIError.NO_THRESHOLDS_PROVIDED: "No thresholds provided",
    QMIError.INVALID_HANDLE: "Invalid handle",
    QMIError.INVALID_PROFILE: "Invalid profile",
    QMIError.INVALID_PIN_ID: "Invalid PIN ID",
    QMIError.INCORRECT_PIN: "Incorrect PIN",
    QMIError.NO_NETWORK_FOUND: "No network found",
    QMIError.CALL_FAILED: "Call failed",
    QMIError.OUT_OF_CALL: "Out of call",
    QMIError.NOT_PROVISIONED: "Not provisioned",
    QMIError.MISSING_ARGUMENT: "Missing argument",
    QMIError.ARGUMENT_TOO_LONG: "Argument too long",
    QMIError.INVALID_TRANSACTION_ID: "Invalid transaction ID",
    QMIError.DEVICE_IN_USE: "Device in use",
    QMIError.NETWORK_UNSUPPORTED: "Network unsupported",
    QMIError.DEVICE_UNSUPPORTED: "Device unsupported",
    QMIError.NO_EFFECT: "No effect",
    QMIError.NO_FREE_PROFILE: "No free profile",
    QMIError.INVALID_PDP_TYPE: "Invalid PDP type",
    QMIError.INVALID_TECHNOLOGY_PREFERENCE: "Invalid technology preference",
    QMIError.INVALID_PROFILE_TYPE: "Invalid profile type",
    QMIError.INVALID_SERVICE_TYPE: "Invalid service type",
    QMIError.INVALID_REGISTER_ACTION: "Invalid register action",
    QMIError.INVALID_PS_ATTACH_ACTION: "Invalid PS attach action",
    QMIError.AUTHENTICATION_FAILED: "Authentication failed",
    QMIError.PIN_BLOCKED: "PIN blocked",
    QMIError.PIN_ALWAYS_BLOCKED: "PIN always blocked",
    QMIError.UIM_UNINITIALIZED: "UIM uninitialized",
    QMIError.NOT_SUPPORTED: "Not supported",
    QMIError.NO_SIM: "No SIM",
}


class QMIProtocolError(Exception):
    """Raised when a QMI response carries a failure result."""

    def __init__(self, code: Union[int, QMIError]) -> None:
        self.code: Union[int, QMIError]
        try:
            self.code = QMIError(code)
            message = self.code.description()
        except ValueError:
            self.code = int(code)
            message = _UNKNOWN
        super().__init__(message)