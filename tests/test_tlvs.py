import io

import pytest

from euicc.driver.qmi.constants import MessageID, ServiceType
from euicc.driver.qmi.errors import QMIError, QMIProtocolError
from euicc.driver.qmi.tlvs import TLV, Request, TLVs

SUCCESS = TLV(0x02, b"\x00\x00\x00\x00")


def test_to_bytes_wire_format():
    tlvs = TLVs([TLV(0x01, bytes([ServiceType.UIM]))])
    assert tlvs.to_bytes() == b"\x01\x01\x00\x0b"


def test_round_trip():
    tlvs = TLVs([SUCCESS, TLV(0x10, b"\x05\x06\x07"), TLV(0x11, b"")])
    parsed = TLVs.read(io.BytesIO(tlvs.to_bytes()))
    assert parsed == tlvs
    assert parsed.find(0x10).length == 3


def test_find():
    tlvs = TLVs([TLV(0x01, b"a"), TLV(0x01, b"b"), TLV(0x10, b"c")])
    assert tlvs.find(0x01).value == b"a"
    assert tlvs.find(0x10).value == b"c"
    assert tlvs.find(0x20) is None


def test_check_success():
    tlvs = TLVs([SUCCESS])
    tlvs.check()
    assert tlvs.find(0x02) == SUCCESS


def test_check_failure_raises_protocol_error():
    tlvs = TLVs([TLV(0x02, b"\x01\x00\x5e\x00")])
    with pytest.raises(QMIProtocolError) as info:
        tlvs.check()
    assert info.value.code is QMIError.NOT_SUPPORTED


def test_check_missing_result():
    with pytest.raises(ValueError, match="no result TLV found"):
        TLVs([TLV(0x01, b"\x00")]).check()


def test_short_result_tlv():
    with pytest.raises(ValueError, match="result TLV too short, expected 4 bytes, got 2"):
        TLV(0x02, b"\x00\x00").check()


def test_read_empty_stream_has_no_result():
    with pytest.raises(ValueError, match="no result TLV found"):
        TLVs.read(io.BytesIO(b""))


def test_read_truncated_value():
    with pytest.raises(ValueError):
        TLVs.read(io.BytesIO(b"\x02\x04\x00\x00\x00"))


def test_read_failure_result_raises():
    data = TLVs([TLV(0x02, b"\x01\x00\x66\x00")]).to_bytes()
    with pytest.raises(QMIProtocolError) as info:
        TLVs.read(io.BytesIO(data))
    assert info.value.code is QMIError.NO_SIM


def test_request_defaults():
    request = Request(ServiceType.UIM, MessageID.UIM_SEND_APDU)
    assert request.value == TLVs()
    assert request.read_timeout == 0.0
    assert request.response(TLVs([SUCCESS])) is None
    assert request.result is None