"""CCSDS/PUS packet utilities, a packet router and a simulated PDU device."""

__version__ = "0.1.0"
__all__ = [
    "byteorder",
    "ccsds",
    "comparators",
    "crc",
    "device",
    "packet_queue",
    "pdu",
    "pus",
    "router",
]