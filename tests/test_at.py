import pytest

from euicc.driver.at import AT, ATError


class FakeSerial:
    def __init__(self, replies):
        self.replies = list(replies)
        self.written = []
        self.pending = bytearray()
        self.closed = False

    def write(self, data):
        self.written.append(bytes(data))
        if self.replies:
            self.pending += self.replies.pop(0).encode()
        return len(data)

    def read(self, size):
        chunk = bytes(self.pending[:size])
        del self.pending[:size]
        return chunk

    def close(self):
        self.closed = True


def test_run_collects_lines():
    serial = FakeSerial(["line one\r\nline two\r\nOK\r\n"])
    assert AT(serial).run("AT+TEST") == "line one\nline two"
    assert serial.written == [b"AT+TEST\r\n"]


def test_run_error_line():
    serial = FakeSerial(["+CME ERROR: 3\r\n"])
    with pytest.raises(ATError, match=r"\+CME ERROR: 3"):
        AT(serial).run("AT+CSIM=?")


def test_run_stream_ends():
    with pytest.raises(ATError):
        AT(FakeSerial([])).run("AT")


def test_transmit_parses_status():
    serial = FakeSerial(['+CSIM: 4,"9000"\r\nOK\r\n'])
    assert AT(serial).transmit(b"\x00\x70\x00\x00\x01") == b"\x90\x00"
    assert serial.written[0] == b'AT+CSIM=10,"0070000001"\r\n'


def test_transmit_unexpected_status():
    serial = FakeSerial(['+CSIM: 4,"6A82"\r\nOK\r\n'])
    with pytest.raises(ATError, match="6A82"):
        AT(serial).transmit(b"\x00")


def test_transmit_invalid_response():
    serial = FakeSerial(["garbage\r\nOK\r\n"])
    with pytest.raises(ATError, match="invalid response"):
        AT(serial).transmit(b"\x00")


def test_connect_queries_support_first():
    serial = FakeSerial(["OK\r\n", '+CSIM: 4,"9000"\r\nOK\r\n'])
    AT(serial).connect()
    assert serial.written[0] == b"AT+CSIM=?\r\n"
    assert serial.written[1].startswith(b'AT+CSIM=30,"80AA0000')


def test_open_logical_channel():
    aid = b"\xa0\x00\x00\x05\x59"
    serial = FakeSerial(['+CSIM: 6,"019000"\r\nOK\r\n', '+CSIM: 4,"9000"\r\nOK\r\n'])
    at = AT(serial)
    assert at.open_logical_channel(aid) == 1
    assert aid.hex().upper().encode() in serial.written[1]
    assert serial.written[1].startswith(b'AT+CSIM=')


def test_close_and_disconnect():
    serial = FakeSerial(['+CSIM: 4,"9000"\r\nOK\r\n'])
    at = AT(serial)
    at.close_logical_channel(1)
    at.disconnect()
    assert b"0070800100" in serial.written[0]
    assert serial.closed


def test_open_missing_device(tmp_path):
    with pytest.raises(ATError, match="open serial port"):
        AT.open(str(tmp_path / "missing"))