import socket
import struct
from collections import deque

import pytest

from euicc.driver.qmi.constants import MessageID, MessageType
from euicc.driver.qmi.qrtr import (
    AF_QIPCRTR,
    NODE_BROADCAST,
    PORT_CONTROL,
    QRTR,
    ControlPacket,
    PacketType,
    QRTRConn,
    Service,
    SockAddr,
)

UIM_NODE, UIM_PORT = 1, 0x4000


class FakeSocket:
    def __init__(self, datagrams=()):
        self.datagrams = deque(datagrams)
        self.sent = []
        self.closed = False

    def sendto(self, data, address):
        self.sent.append((bytes(data), address))
        return len(data)

    def recvfrom(self, size):
        if not self.datagrams:
            raise socket.timeout("timed out")
        data, address = self.datagrams.popleft()
        return data[:size], address

    def settimeout(self, value):
        pass

    def close(self):
        self.closed = True


def new_server(service, node, port):
    return struct.pack("<IIIII", PacketType.NEW_SERVER, service, 0, node, port)


def test_control_packet_wire_bytes():
    packet = ControlPacket(PacketType.NEW_LOOKUP, Service(0x0B))
    assert packet.to_bytes() == bytes.fromhex("0a0000000b000000") + bytes(12)


def test_sockaddr_string():
    assert str(SockAddr(1, 2)) == f"qrtr://{AF_QIPCRTR}:1/2"
    assert SockAddr(1, 2).network == "qrtr"


def test_sendto_rejects_empty_data():
    conn = QRTRConn(FakeSocket())
    with pytest.raises(ValueError, match="data is empty"):
        conn.sendto(SockAddr(1, 2), b"")


def test_read_skips_control_and_foreign_senders():
    sock = FakeSocket(
        [
            (b"control", (UIM_NODE, PORT_CONTROL)),
            (b"foreign", (2, 0x5000)),
            (b"payload", (UIM_NODE, UIM_PORT)),
        ]
    )
    conn = QRTRConn(sock)
    conn.service = Service(0x0B, 1, UIM_NODE, UIM_PORT)
    assert conn.read(512) == b"payload"


def test_write_targets_service():
    sock = FakeSocket()
    conn = QRTRConn(sock)
    conn.service = Service(0x0B, 1, UIM_NODE, UIM_PORT)
    assert conn.write(b"abc") == 3
    assert sock.sent == [(b"abc", (UIM_NODE, UIM_PORT))]


def test_recv_times_out():
    conn = QRTRConn(FakeSocket())
    conn.read_timeout = 0.05
    with pytest.raises(TimeoutError):
        conn.recv(64)


def test_qrtr_finds_uim_service():
    sock = FakeSocket(
        [
            (struct.pack("<I", PacketType.HELLO), (UIM_NODE, PORT_CONTROL)),
            (new_server(0x03, UIM_NODE, 0x10), (UIM_NODE, PORT_CONTROL)),
            (new_server(0x0B, UIM_NODE, UIM_PORT), (UIM_NODE, PORT_CONTROL)),
        ]
    )
    qrtr = QRTR(1, QRTRConn(sock))
    assert qrtr.conn.service == Service(0x0B, 0, UIM_NODE, UIM_PORT)
    lookup, address = sock.sent[0]
    assert address == (NODE_BROADCAST, PORT_CONTROL)
    assert lookup == ControlPacket(PacketType.NEW_LOOKUP, Service(0x0B)).to_bytes()


def test_qrtr_open_logical_channel_end_to_end():
    sock = FakeSocket([(new_server(0x0B, UIM_NODE, UIM_PORT), (UIM_NODE, PORT_CONTROL))])
    qrtr = QRTR(1, QRTRConn(sock))
    tlvs = struct.pack("<BH", 0x02, 4) + bytes(4) + struct.pack("<BHB", 0x10, 1, 2)
    reply = struct.pack(
        "<BHHH", MessageType.RESPONSE, 1, MessageID.UIM_OPEN_LOGICAL_CHANNEL, len(tlvs)
    ) + tlvs
    sock.datagrams.append((reply, (UIM_NODE, UIM_PORT)))
    assert qrtr.open_logical_channel(b"\xa0\x00") == 2
    assert sock.sent[-1][1] == (UIM_NODE, UIM_PORT)


def test_qrtr_lookup_failure_closes_socket():
    sock = FakeSocket()
    conn = QRTRConn(sock)
    conn.read_timeout = 0.05
    with pytest.raises(TimeoutError):
        QRTR(1, conn)
    assert sock.closed


def test_disconnect_closes_socket():
    sock = FakeSocket([(new_server(0x0B, UIM_NODE, UIM_PORT), (UIM_NODE, PORT_CONTROL))])
    qrtr = QRTR(1, QRTRConn(sock))
    qrtr.disconnect()
    assert sock.closed