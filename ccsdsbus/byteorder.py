"""Byte-order conversion for values of up to 64 bits."""

from __future__ import annotations

import sys

_MAX_BYTES = 8
_IS_LITTLE_ENDIAN = sys.byteorder == "little"


def swap(data: bytes) -> bytes:
    """Return ``data`` with its byte order reversed.

    Raises ValueError for values longer than 64 bits.
    """
    raw = bytes(data)
    if len(raw) > _MAX_BYTES:
        raise ValueError(f"swap length {len(raw) * 8} > 64 bits")
    return raw[::-1]


def host_to_network(data: bytes) -> bytes:
    """Convert a value from host byte order to network (big-endian) order."""
    return swap(data) if _IS_LITTLE_ENDIAN else _checked(data)


def network_to_host(data: bytes) -> bytes:
    """Convert a value from network (big-endian) order to host byte order."""
    return swap(data) if _IS_LITTLE_ENDIAN else _checked(data)


def _checked(data: bytes) -> bytes:
    raw = bytes(data)
    if len(raw) > _MAX_BYTES:
        raise ValueError(f"swap length {len(raw) * 8} > 64 bits")
    return raw