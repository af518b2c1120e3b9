"""Tools for talking to eUICC chips: BER-TLV, APDU transport and modem channels."""

__version__ = "1.0.0"