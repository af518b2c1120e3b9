import struct
from unittest import mock

import pytest

from euicc.driver.qmi.constants import MessageID, ServiceType
from euicc.driver.qmi.proxy import QMI, connect_qmi_proxy

RESULT_OK = struct.pack("<BH", 0x02, 4) + b"\x00\x00\x00\x00"


def control_frame(txn, message_id, tlv_bytes):
    sdu = struct.pack("<BBHH", 0x02, txn, message_id, len(tlv_bytes)) + tlv_bytes
    return struct.pack("<BHBBB", 1, len(sdu) + 5, 0x80, ServiceType.CONTROL, 0) + sdu


def client_id_tlv(client_id):
    return struct.pack("<BH", 0x01, 2) + bytes([ServiceType.UIM, client_id])


class FakeStream:
    def __init__(self, data=b""):
        self.buffer = bytearray(data)
        self.sent = []
        self.closed = False

    def sendall(self, data):
        self.sent.append(bytes(data))

    def recv(self, size):
        chunk = bytes(self.buffer[:size])
        del self.buffer[:size]
        return chunk

    def settimeout(self, value):
        pass

    def close(self):
        self.closed = True


def opened_stream():
    return FakeStream(
        control_frame(1, MessageID.CTL_INTERNAL_PROXY_OPEN, RESULT_OK)
        + control_frame(2, MessageID.CTL_ALLOCATE_CLIENT_ID, RESULT_OK + client_id_tlv(7))
    )


def test_open_allocates_client_id():
    conn = opened_stream()
    qmi = QMI("/dev/cdc-wdm0", 1, conn)
    assert qmi.client_id == 7
    assert b"/dev/cdc-wdm0" in conn.sent[0]
    assert len(conn.sent) == 2
    assert not conn.closed


def test_disconnect_releases_and_closes():
    conn = opened_stream()
    qmi = QMI("/dev/cdc-wdm0", 1, conn)
    conn.buffer += control_frame(
        3, MessageID.CTL_RELEASE_CLIENT_ID, RESULT_OK + client_id_tlv(7)
    )
    qmi.disconnect()
    assert conn.closed
    assert conn.sent[-1].endswith(bytes([ServiceType.UIM, 7]))


def test_device_not_connected():
    conn = FakeStream()
    with pytest.raises(ConnectionError, match="device /dev/cdc-wdm0 is not connected"):
        QMI("/dev/cdc-wdm0", 1, conn)
    assert conn.closed


def test_device_without_qmi_support():
    conn = FakeStream(control_frame(1, MessageID.CTL_INTERNAL_PROXY_OPEN, RESULT_OK))
    with pytest.raises(ConnectionError, match="doesn't support QMI protocol"):
        QMI("/dev/cdc-wdm0", 1, conn)
    assert conn.closed


def test_connect_qmi_proxy_failure_closes_socket():
    with mock.patch("socket.socket") as factory:
        factory.return_value.connect.side_effect = OSError("refused")
        with pytest.raises(ConnectionError, match="connect to qmi-proxy"):
            connect_qmi_proxy()
        factory.return_value.close.assert_called_once()
        factory.return_value.connect.assert_called_once_with("\0qmi-proxy")