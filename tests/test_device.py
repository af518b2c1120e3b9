import struct

import pytest

from euicc.driver.mbim.codes import (
    CID_DEVICE_SLOT_MAPPINGS,
    SERVICE_BASIC_CONNECT,
    SERVICE_MBIM_PROXY_CONTROL,
    SERVICE_MS_BASIC_CONNECT_EXTENSIONS,
    CommandType,
    MessageType,
)
from euicc.driver.mbim.device import MBIM
from euicc.driver.mbim.status import MBIMStatusError


def parse_sent(message):
    mtype, _, txn = struct.unpack_from("<III", message)
    if len(message) < 48:
        return mtype, txn, None, None, None, b""
    service = message[20:36]
    cid, ctype, _ = struct.unpack_from("<III", message, 36)
    return mtype, txn, service, cid, ctype, message[48:]


def command_done(txn, service, cid, info, status=0):
    body = struct.pack("<II", 1, 0) + service + struct.pack("<III", cid, status, len(info)) + info
    return struct.pack("<III", 0x80000003, 12 + len(body), txn) + body


def open_done(txn):
    return struct.pack("<IIII", 0x80000001, 16, txn, 0)


class FakeProxy:
    def __init__(self, handler):
        self.handler = handler
        self.sent = []
        self.inbox = bytearray()
        self.closed = False

    def sendall(self, data):
        self.sent.append(bytes(data))
        reply = self.handler(bytes(data))
        if reply:
            self.inbox += reply

    def recv(self, size):
        chunk = bytes(self.inbox[:size])
        del self.inbox[:size]
        return chunk

    def settimeout(self, value):
        pass

    def close(self):
        self.closed = True


def standard(active_slot=0, mappings=True, ready=1):
    def handle(message):
        mtype, txn, service, cid, ctype, payload = parse_sent(message)
        if mtype == MessageType.OPEN:
            return open_done(txn)
        if service == SERVICE_MBIM_PROXY_CONTROL:
            return command_done(txn, service, cid, b"")
        if service == SERVICE_MS_BASIC_CONNECT_EXTENSIONS:
            if ctype == CommandType.SET:
                return command_done(txn, service, cid, payload)
            info = struct.pack("<IIII", 1, 12, 4, active_slot) if mappings else struct.pack("<I", 0)
            return command_done(txn, service, cid, info)
        if service == SERVICE_BASIC_CONNECT:
            return command_done(txn, service, cid, struct.pack("<I", ready))
        return None

    return handle


def test_slot_zero_rejected():
    with pytest.raises(ValueError, match="slot must be >= 1"):
        MBIM("/dev/cdc-wdm0", 0, conn=FakeProxy(standard()))


def test_connect_with_active_slot():
    proxy = FakeProxy(standard(active_slot=0))
    MBIM("/dev/cdc-wdm0", 1, conn=proxy).connect()
    kinds = [parse_sent(m)[0] for m in proxy.sent]
    assert kinds == [MessageType.COMMAND, MessageType.OPEN, MessageType.COMMAND]
    assert [parse_sent(m)[1] for m in proxy.sent] == [1, 2, 3]


def test_connect_switches_slot():
    proxy = FakeProxy(standard(active_slot=0, ready=1))
    MBIM("/dev/cdc-wdm0", 2, conn=proxy).connect()
    assert len(proxy.sent) == 5
    _, _, service, cid, ctype, payload = parse_sent(proxy.sent[3])
    assert cid == CID_DEVICE_SLOT_MAPPINGS
    assert ctype == CommandType.SET
    assert payload == struct.pack("<IIII", 1, 12, 4, 1)
    assert parse_sent(proxy.sent[4])[2] == SERVICE_BASIC_CONNECT


def test_connect_device_not_connected():
    proxy = FakeProxy(lambda message: None)
    with pytest.raises(ConnectionError, match="device /dev/cdc-wdm9 is not connected"):
        MBIM("/dev/cdc-wdm9", 1, conn=proxy).connect()


def test_connect_without_slot_mappings():
    proxy = FakeProxy(standard(mappings=False))
    with pytest.raises(ConnectionError, match="no slot mappings found"):
        MBIM("/dev/cdc-wdm0", 1, conn=proxy).connect()


def test_open_logical_channel():
    aid = bytes.fromhex("A0000005591010FFFFFFFF8900000100")

    def handle(message):
        _, txn, service, cid, _, _ = parse_sent(message)
        return command_done(txn, service, cid, struct.pack("<IIII", 0, 3, 0, 0))

    proxy = FakeProxy(handle)
    device = MBIM("/dev/cdc-wdm0", 1, conn=proxy)
    assert device.open_logical_channel(aid) == 3
    payload = parse_sent(proxy.sent[0])[5]
    assert payload.endswith(aid)
    assert struct.unpack_from("<I", payload, 12)[0] == 1


def test_transmit_appends_status():
    def handle(message):
        _, txn, service, cid, _, payload = parse_sent(message)
        assert struct.unpack_from("<I", payload)[0] == 0
        return command_done(txn, service, cid, struct.pack("<III", 0x0090, 1, 0) + b"\xaa")

    device = MBIM("/dev/cdc-wdm0", 1, conn=FakeProxy(handle))
    assert device.transmit(b"\x80\xe2\x91\x00") == b"\xaa\x90\x00"


def test_transmit_failure_status():
    def handle(message):
        _, txn, service, cid, _, _ = parse_sent(message)
        return command_done(txn, service, cid, b"", status=2)

    device = MBIM("/dev/cdc-wdm0", 1, conn=FakeProxy(handle))
    with pytest.raises(MBIMStatusError):
        device.transmit(b"\x00")


def test_close_logical_channel_and_disconnect():
    def handle(message):
        _, txn, service, cid, _, _ = parse_sent(message)
        return command_done(txn, service, cid, struct.pack("<I", 0))

    proxy = FakeProxy(handle)
    device = MBIM("/dev/cdc-wdm0", 1, conn=proxy)
    device.close_logical_channel(3)
    assert parse_sent(proxy.sent[0])[5] == struct.pack("<II", 3, 1)
    device.disconnect()
    assert proxy.closed is True