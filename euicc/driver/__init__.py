"""Modem smart-card channels (AT, MBIM, QMI, QRTR) and the TLV card transmitter."""