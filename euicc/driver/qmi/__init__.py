"""QMI codes, TLVs, requests, QMUX and QRTR transports, and the QMI and QRTR channels."""