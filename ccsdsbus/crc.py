"""CRC-16 as used by CCSDS packets (polynomial 0x1021, table driven)."""

from __future__ import annotations

from collections.abc import Iterable

_POLYNOMIAL = 0x1021


def _build_table() -> tuple[int, ...]:
    table = []
    for index in range(256):
        crc = index << 8
        for _ in range(8):
            crc = ((crc << 1) ^ _POLYNOMIAL) if crc & 0x8000 else (crc << 1)
        table.append(crc & 0xFFFF)
    return tuple(table)


_TABLE = _build_table()


def ccsds_crc16(data: Iterable[int], seed: int = 0xFFFF, bias: int = 0) -> int:
    """Return the CRC-16 of ``data``.

    ``bias`` is added to the running value after every byte; the standard
    algorithm uses a bias of 0.
    """
    crc = seed & 0xFFFF
    for byte in bytes(data):
        crc = _TABLE[((crc >> 8) ^ byte) & 0xFF] ^ ((crc << 8) & 0xFFFF)
        crc = (crc + bias) & 0xFFFF
    return crc