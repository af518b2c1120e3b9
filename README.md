# euicc

Building blocks for talking to an eUICC (embedded SIM) from Python. The
package has no dependencies outside the standard library.

- `euicc.bertlv` — BER-TLV tags, length octets and trees, plus codecs for
  primitive values.
- `euicc.apdu` — command/response APDUs and a `Transmitter` that sends
  STORE DATA commands in chunks over a logical channel.
- `euicc.driver` — smart-card channels for modems (`AT`, `MBIM`, `QMI`,
  `QRTR`) and a `CardTransmitter` that exchanges BER-TLV messages with the
  card.

## Installation

```
pip install .
```

The tests need the `test` extra:

```
pip install ".[test]"
pytest
```

## BER-TLV

Tags are built from a class and a form (`euicc.bertlv.tag`):

```python
from euicc.bertlv.tag import Form, TagClass

Form.PRIMITIVE.context_specific(1)       # Tag(b'\x81')
TagClass.APPLICATION.constructed(0)      # Tag(b'`')
```

`Tag` is a `bytes` subclass with `number()`, `tag_class()`, `form()`,
`is_primitive()`, `is_constructed()`, `matches(klass, form, number)` and a
readable `str()` such as `[1]` or `[APPLICATION 0]`.

Trees live in `euicc.bertlv.tlv`:

```python
from euicc.bertlv.tag import Form
from euicc.bertlv.tlv import TLV, new_children, new_value

tree = new_children(
    Form.CONSTRUCTED.context_specific(0),
    new_value(Form.PRIMITIVE.context_specific(1), b"\x01"),
)
encoded = tree.to_bytes()          # b"\xa0\x03\x81\x01\x01"
decoded = TLV.from_bytes(encoded)
leaf = decoded.first(Form.PRIMITIVE.context_specific(1))
print(leaf)                        # [1] (1 byte)
```

A `TLV` can also be read from a stream (`TLV.read`), written to one
(`write_to`), encoded as base64 (`to_text` / `TLV.from_text`) and deep-copied
(`clone`). Children are navigated with `at`, `first`, `find` and `select`
(a path of tags). Lengths up to three octets are supported; malformed input
raises `euicc.bertlv.length.TLVDecodeError`.

### Primitive values

`euicc.bertlv.primitive` has plain functions that pair with
`TLV.marshal_value` and `TLV.unmarshal_value`:

```python
from euicc.bertlv.primitive import decode_int, encode_int
from euicc.bertlv.tag import Form
from euicc.bertlv.tlv import marshal_value

tlv = marshal_value(Form.PRIMITIVE.context_specific(0), lambda: encode_int(-1))
tlv.to_bytes()                     # b"\x80\x01\xff"
tlv.unmarshal_value(decode_int)    # -1
```

- `encode_int` / `decode_int(data, size=8)` — minimal two's-complement
  integers; `decode_int` raises `ValueError` when the data is wider than
  `size` bytes.
- `encode_bool` / `decode_bool` — `0xFF` is true.
- `encode_bit_string` / `decode_bit_string` — BIT STRING with a leading
  padding count; `BitString` prints as a string of `0` and `1`.
- `encode_big_int` / `decode_big_int` — unsigned big-endian magnitudes.

## APDUs

`euicc.apdu.Request` builds a short command APDU (`to_bytes()`, hex `str()`),
and `euicc.apdu.Response` splits a response into `data()`, `sw()`, `sw1()`,
`sw2()`, with `ok()` and `has_more()`.

`euicc.apdu.Transmitter(channel, aid, mss)` connects the channel, opens a
logical channel to `aid`, sends each command with `write()` as STORE DATA
chunks of at most `mss` bytes, follows `61xx` answers with GET RESPONSE, and
hands back the collected data from `read()`. An unexpected status word raises
`APDUError`. `close()` (or leaving a `with` block) closes the logical channel
and disconnects.

Any object with `connect`, `disconnect`, `open_logical_channel`, `transmit`
and `close_logical_channel` will do as a channel; `SmartCardChannel` is the
protocol that describes them.

## Talking to a card

```python
from euicc.driver.at import AT
from euicc.driver.transmitter import CardTransmitter

ISD_R_AID = bytes.fromhex("A0000005591010FFFFFFFF8900000100")

channel = AT.open("/dev/ttyUSB2")
with CardTransmitter(channel, ISD_R_AID, 120, None) as card:
    reply = card.transmit_raw(bytes.fromhex("BF3E035C015A"))
```

`CardTransmitter.transmit(request, response=None)` takes a `TLV` (or an
object with `to_tlv()`), sends its encoding and decodes the answer as a
`TLV`; when `response` is given it is called with that `TLV` and its result
is returned. Commands and answers are logged at debug level.

### Channels

- `euicc.driver.at.AT` — tunnels APDUs through `AT+CSIM` on a serial port
  (`AT.open(device)` opens it at 115200 baud in raw mode via
  `euicc.driver.serial_port.SerialPort`). Modem errors raise `ATError`.
- `euicc.driver.mbim.device.MBIM(device, slot)` — talks MBIM through the
  `mbim-proxy` abstract Unix socket; `slot` is 1-based. Non-success device
  statuses raise `euicc.driver.mbim.status.MBIMStatusError`.
- `euicc.driver.qmi.proxy.QMI(device, slot)` — talks QMI with QMUX framing
  through the `qmi-proxy` abstract Unix socket and allocates a UIM client ID
  on construction.
- `euicc.driver.qmi.qrtr.QRTR(slot)` — talks QMI over a Qualcomm IPC Router
  socket after looking up the UIM service.

All four offer `connect`, `open_logical_channel`, `transmit`,
`close_logical_channel` and `disconnect`. For MBIM and QMI, `connect`
switches to the requested slot if another one is active and waits for the SIM
to come up. QMI failures raise `euicc.driver.qmi.errors.QMIProtocolError`.
These channels need a Linux host with the matching proxy daemon or QRTR
support; each constructor also accepts an already open connection.

## What this package does not do

- It does not implement eSIM profile management: there is no profile list,
  enable/disable/delete, notification handling or profile download, and no
  HTTP client for SM-DP+ or discovery servers. It carries the bytes; building
  those requests is left to the caller.
- It has no PC/SC card-reader channel; only the modem channels above.
- It installs no command-line program.