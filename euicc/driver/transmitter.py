"""BER-TLV request/response exchange with a card over an APDU transmitter."""

from __future__ import annotations

import logging
from typing import Callable, Optional, TypeVar

from euicc.apdu import SmartCardChannel, Transmitter
from euicc.bertlv.tlv import TLV

T = TypeVar("T")


class CardTransmitter:
    """Sends BER-TLV encoded commands to the card and decodes the answers."""

    def __init__(
        self,
        channel: SmartCardChannel,
        aid: bytes,
        mss: int,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._card = Transmitter(channel, aid, mss)
        self._logger = logger or logging.getLogger(__name__)

    def transmit(self, request, response: Optional[Callable[[TLV], T]] = None):
        """Send a TLV (or an object with ``to_tlv()``) and decode the reply.

        The decoded TLV is passed to ``response`` when given, and its result
        returned; otherwise the TLV itself is returned.
        """
        tlv = request if isinstance(request, TLV) else request.to_tlv()
        decoded = TLV.from_bytes(self.transmit_raw(tlv.to_bytes()))
        return decoded if response is None else response(decoded)

    def transmit_raw(self, command: bytes) -> bytes:
        self._logger.debug("[APDU] sending %s", bytes(command).hex().upper())
        self._card.write(command)
        data = self._card.read()
        self._logger.debug("[APDU] received %s", data.hex().upper())
        return data

    def close(self) -> None:
        self._card.close()

    def __enter__(self) -> "CardTransmitter":
        return self

    def __exit__(self, *args) -> None:
        self.close()