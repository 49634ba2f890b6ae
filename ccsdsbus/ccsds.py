"""CCSDS space packets: primary header encoding, packet creation and display.

The primary header occupies six bytes.  Its first four bytes form a
little-endian 32-bit word holding, from the least significant bit:
version number (3 bits), packet type (1 bit), secondary header flag (1 bit),
APID (11 bits), sequence flag (2 bits) and sequence count (14 bits).  The
last two bytes hold the data length as a little-endian 16-bit value.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

PRIMARY_HEADER_SIZE = 6
VERSION_NUMBER = 0
STANDALONE_PACKET = 0b11
PACKET_TYPE_TM = 0
PACKET_TYPE_TC = 1
MAX_DATA_LENGTH = 0xFFFF


class PacketError(ValueError):
    """Raised when a packet cannot be built or does not hold what is expected."""


@dataclass(frozen=True)
class PrimaryHeader:
    """The six-byte CCSDS primary header."""

    packet_type: int = PACKET_TYPE_TM
    secondary_header: bool = False
    apid: int = 0
    sequence_count: int = 0
    data_length: int = 0
    version_number: int = VERSION_NUMBER
    sequence_flag: int = STANDALONE_PACKET

    SIZE: ClassVar[int] = PRIMARY_HEADER_SIZE

    @property
    def is_tc(self) -> bool:
        """True for a telecommand, False for telemetry."""
        return self.packet_type == PACKET_TYPE_TC

    def pack(self) -> bytes:
        """Encode the header; fields are truncated to their bit widths."""
        word = (
            (self.version_number & 0x7)
            | ((self.packet_type & 0x1) << 3)
            | ((int(self.secondary_header) & 0x1) << 4)
            | ((self.apid & 0x7FF) << 5)
            | ((self.sequence_flag & 0x3) << 16)
            | ((self.sequence_count & 0x3FFF) << 18)
        )
        return word.to_bytes(4, "little") + (self.data_length & 0xFFFF).to_bytes(2, "little")

    @classmethod
    def unpack(cls, data: bytes) -> PrimaryHeader:
        """Decode the header found at the start of ``data``."""
        raw = bytes(data)
        if len(raw) < PRIMARY_HEADER_SIZE:
            raise PacketError(
                f"primary header needs {PRIMARY_HEADER_SIZE} bytes, got {len(raw)}"
            )
        word = int.from_bytes(raw[:4], "little")
        return cls(
            packet_type=(word >> 3) & 0x1,
            secondary_header=bool((word >> 4) & 0x1),
            apid=(word >> 5) & 0x7FF,
            sequence_count=(word >> 18) & 0x3FFF,
            data_length=int.from_bytes(raw[4:6], "little"),
            version_number=word & 0x7,
            sequence_flag=(word >> 16) & 0x3,
        )


def create_packet(
    is_tc: bool,
    has_secondary_header: bool,
    apid: int,
    sequence_count: int,
    data: bytes,
    max_size: int | None = None,
) -> bytes:
    """Build a stand-alone packet carrying ``data`` as its data field.

    Raises PacketError if the packet would exceed ``max_size`` bytes or the
    data field does not fit the 16-bit length field.
    """
    payload = bytes(data)
    if len(payload) > MAX_DATA_LENGTH:
        raise PacketError(f"data field of {len(payload)} bytes exceeds {MAX_DATA_LENGTH}")
    total = len(payload) + PRIMARY_HEADER_SIZE
    if max_size is not None and max_size < total:
        raise PacketError(f"packet needs {total} bytes, only {max_size} available")
    header = PrimaryHeader(
        packet_type=PACKET_TYPE_TC if is_tc else PACKET_TYPE_TM,
        secondary_header=bool(has_secondary_header),
        apid=apid,
        sequence_count=sequence_count,
        data_length=len(payload),
    )
    return header.pack() + payload


def packet_total_length(packet: bytes) -> int:
    """Length the packet claims for itself: header plus data field."""
    return PrimaryHeader.unpack(packet).data_length + PRIMARY_HEADER_SIZE


def is_packet_size_valid(packet: bytes) -> bool:
    """Tell whether ``packet`` holds at least as many bytes as it claims."""
    raw = bytes(packet)
    if len(raw) < PRIMARY_HEADER_SIZE:
        return False
    return len(raw) >= packet_total_length(raw)


def format_primary_header(packet: bytes) -> str:
    """Describe the primary header of ``packet``, one field per line."""
    header = PrimaryHeader.unpack(packet)
    return "\n".join(
        [
            "CCSDS packet:",
            f"\t versionNumber: {header.version_number}",
            f"\t packetType: {header.packet_type}",
            f"\t secondaryHeader: {int(header.secondary_header)}",
            f"\t apid: {header.apid}",
            f"\t sequenceFlag: {header.sequence_flag}",
            f"\t sequenceCount: {header.sequence_count}",
            f"\t dataLength: {header.data_length}",
        ]
    )


def format_packet(packet: bytes) -> str:
    """Describe the primary header and the data bytes of ``packet``."""
    raw = bytes(packet)
    header = PrimaryHeader.unpack(raw)
    body = raw[PRIMARY_HEADER_SIZE:PRIMARY_HEADER_SIZE + header.data_length]
    data_line = "\t data:" + "".join(f" {byte}" for byte in body)
    return format_primary_header(raw) + "\n" + data_line