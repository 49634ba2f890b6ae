"""PUS secondary headers for telecommands and telemetry, and packet helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from .ccsds import (
    PACKET_TYPE_TC,
    PACKET_TYPE_TM,
    PRIMARY_HEADER_SIZE,
    PacketError,
    PrimaryHeader,
    format_primary_header,
)
from .ccsds import is_packet_size_valid as _ccsds_size_valid

PUS_VERSION_NO = 1

_tm_timestamp = 0


def set_tm_timestamp(timestamp: int) -> None:
    """Set the time stamp written into telemetry headers created from now on."""
    global _tm_timestamp
    _tm_timestamp = timestamp & 0xFFFFFFFF


@dataclass(frozen=True)
class TcSecondaryHeader:
    """Six-byte telecommand secondary header."""

    service_type: int
    service_subtype: int
    source_id: int = 0
    acknowledgement_flags: int = 0
    version: int = PUS_VERSION_NO

    SIZE: ClassVar[int] = 6

    @classmethod
    def create(
        cls,
        want_acknowledgment: bool,
        want_execution_result: bool,
        service_type: int,
        service_subtype: int,
        source_id: int,
    ) -> TcSecondaryHeader:
        """Build a header; acknowledgment sets flag bit 3, execution result bit 0."""
        flags = (int(bool(want_acknowledgment)) << 3) | int(bool(want_execution_result))
        return cls(
            service_type=service_type,
            service_subtype=service_subtype,
            source_id=source_id,
            acknowledgement_flags=flags,
        )

    def pack(self) -> bytes:
        first = (self.version & 0xF) | ((self.acknowledgement_flags & 0xF) << 4)
        return (
            bytes([first, self.service_type & 0xFF, self.service_subtype & 0xFF])
            + (self.source_id & 0xFFFF).to_bytes(2, "little")
            + b"\x00"
        )

    @classmethod
    def unpack(cls, data: bytes) -> TcSecondaryHeader:
        raw = bytes(data)
        if len(raw) < cls.SIZE:
            raise PacketError(f"TC secondary header needs {cls.SIZE} bytes, got {len(raw)}")
        return cls(
            service_type=raw[1],
            service_subtype=raw[2],
            source_id=int.from_bytes(raw[3:5], "little"),
            acknowledgement_flags=raw[0] >> 4,
            version=raw[0] & 0xF,
        )


@dataclass(frozen=True)
class TmSecondaryHeader:
    """Twelve-byte telemetry secondary header."""

    service_type: int
    service_subtype: int
    message_type_counter: int = 0
    destination_id: int = 0
    time: int = 0
    sc_time_reference_status: int = 0
    version: int = PUS_VERSION_NO

    SIZE: ClassVar[int] = 12

    @classmethod
    def create(
        cls,
        service_type: int,
        service_subtype: int,
        message_type_counter: int,
        destination_id: int,
    ) -> TmSecondaryHeader:
        """Build a header stamped with the current telemetry time stamp."""
        return cls(
            service_type=service_type,
            service_subtype=service_subtype,
            message_type_counter=message_type_counter,
            destination_id=destination_id,
            time=_tm_timestamp,
        )

    def pack(self) -> bytes:
        first = (self.version & 0xF) | ((self.sc_time_reference_status & 0xF) << 4)
        return (
            bytes([first, self.service_type & 0xFF, self.service_subtype & 0xFF])
            + (self.message_type_counter & 0xFFFF).to_bytes(2, "little")
            + (self.destination_id & 0xFFFF).to_bytes(2, "little")
            + (self.time & 0xFFFFFFFF).to_bytes(4, "little")
            + b"\x00"
        )

    @classmethod
    def unpack(cls, data: bytes) -> TmSecondaryHeader:
        raw = bytes(data)
        if len(raw) < cls.SIZE:
            raise PacketError(f"TM secondary header needs {cls.SIZE} bytes, got {len(raw)}")
        return cls(
            service_type=raw[1],
            service_subtype=raw[2],
            message_type_counter=int.from_bytes(raw[3:5], "little"),
            destination_id=int.from_bytes(raw[5:7], "little"),
            time=int.from_bytes(raw[7:11], "little"),
            sc_time_reference_status=raw[0] >> 4,
            version=raw[0] & 0xF,
        )


def _join(header_bytes: bytes, data: bytes, max_size: int | None) -> bytes:
    payload = bytes(data)
    needed = len(header_bytes) + len(payload)
    if max_size is not None and max_size < needed:
        raise PacketError(f"expected buffer space: {needed} found: {max_size}")
    return header_bytes + payload


def create_tc_data_field(
    data: bytes,
    want_acknowledgment: bool,
    want_execution_result: bool,
    service_type: int,
    service_subtype: int,
    source_id: int,
    max_size: int | None = None,
) -> bytes:
    """Return a TC secondary header followed by ``data``."""
    header = TcSecondaryHeader.create(
        want_acknowledgment, want_execution_result, service_type, service_subtype, source_id
    )
    return _join(header.pack(), data, max_size)


def create_tm_data_field(
    data: bytes,
    service_type: int,
    service_subtype: int,
    message_type_counter: int,
    destination_id: int,
    max_size: int | None = None,
) -> bytes:
    """Return a TM secondary header followed by ``data``."""
    header = TmSecondaryHeader.create(
        service_type, service_subtype, message_type_counter, destination_id
    )
    return _join(header.pack(), data, max_size)


def _secondary_header(packet: bytes, header_cls):
    raw = bytes(packet)
    primary = PrimaryHeader.unpack(raw)
    if not primary.secondary_header:
        raise PacketError("received non PUS packet: no secondary header")
    if primary.data_length < header_cls.SIZE:
        raise PacketError(
            f"data field of {primary.data_length} bytes cannot hold a "
            f"{header_cls.SIZE}-byte secondary header"
        )
    return header_cls.unpack(raw[PRIMARY_HEADER_SIZE:PRIMARY_HEADER_SIZE + header_cls.SIZE])


def _user_data(packet: bytes, header_cls) -> bytes:
    raw = bytes(packet)
    primary = PrimaryHeader.unpack(raw)
    if primary.data_length < header_cls.SIZE:
        raise PacketError(
            f"data field of {primary.data_length} bytes is shorter than the secondary header"
        )
    start = PRIMARY_HEADER_SIZE + header_cls.SIZE
    return raw[start:PRIMARY_HEADER_SIZE + primary.data_length]


def get_tc_header(packet: bytes) -> TcSecondaryHeader:
    """Decode the TC secondary header of ``packet``."""
    return _secondary_header(packet, TcSecondaryHeader)


def get_tm_header(packet: bytes) -> TmSecondaryHeader:
    """Decode the TM secondary header of ``packet``."""
    return _secondary_header(packet, TmSecondaryHeader)


def get_tc_data(packet: bytes) -> bytes:
    """Return the user data that follows the TC secondary header."""
    return _user_data(packet, TcSecondaryHeader)


def get_tm_data(packet: bytes) -> bytes:
    """Return the user data that follows the TM secondary header."""
    return _user_data(packet, TmSecondaryHeader)


def _format_tc_header(header: TcSecondaryHeader) -> list[str]:
    return [
        "TC Secondary Header packet:",
        f"\t versionTcPus: {header.version}",
        f"\t acknowledgementFlags: {header.acknowledgement_flags}",
        f"\t serviceType: {header.service_type}",
        f"\t serviceSubType: {header.service_subtype}",
        f"\t sourceId: {header.source_id}",
    ]


def _format_tm_header(header: TmSecondaryHeader) -> list[str]:
    return [
        "TM Secondary Header packet:",
        f"\t versionTmPus: {header.version}",
        f"\t scTimeReferenceStatus: {header.sc_time_reference_status}",
        f"\t serviceType: {header.service_type}",
        f"\t serviceSubType: {header.service_subtype}",
        f"\t messageTypeCounter: {header.message_type_counter}",
        f"\t destinationId: {header.destination_id}",
        f"\t time: {header.time}",
    ]


def _format(packet: bytes, header_cls, describe) -> str:
    raw = bytes(packet)
    if not is_packet_size_valid(raw):
        return ""
    primary = PrimaryHeader.unpack(raw)
    lines = [format_primary_header(raw)]
    start = PRIMARY_HEADER_SIZE
    remaining = primary.data_length
    if primary.secondary_header:
        header = header_cls.unpack(raw[start:start + header_cls.SIZE])
        lines.extend(describe(header))
        start += header_cls.SIZE
        remaining = max(0, remaining - header_cls.SIZE)
    body = raw[start:start + remaining]
    lines.append(f"data({remaining}): ")
    lines.append("\t" + "".join(f" {byte}" for byte in body))
    return "\n".join(lines)


def format_tc(packet: bytes) -> str:
    """Describe a telecommand; empty if the packet size is not valid."""
    return _format(packet, TcSecondaryHeader, _format_tc_header)


def format_tm(packet: bytes) -> str:
    """Describe a telemetry packet; empty if the packet size is not valid."""
    return _format(packet, TmSecondaryHeader, _format_tm_header)


def format_packet(packet: bytes) -> str:
    """Describe a TC or TM packet according to its type."""
    raw = bytes(packet)
    if not is_packet_size_valid(raw):
        return ""
    if PrimaryHeader.unpack(raw).packet_type == PACKET_TYPE_TC:
        return format_tc(raw)
    return format_tm(raw)


def is_packet_size_valid(packet: bytes) -> bool:
    """Tell whether ``packet`` is long enough for its headers and data."""
    raw = bytes(packet)
    if not _ccsds_size_valid(raw):
        return False
    primary = PrimaryHeader.unpack(raw)
    if primary.secondary_header:
        secondary = (
            TmSecondaryHeader.SIZE
            if primary.packet_type == PACKET_TYPE_TM
            else TcSecondaryHeader.SIZE
        )
        if len(raw) < PRIMARY_HEADER_SIZE + secondary:
            return False
    return True


def is_pus_tc(packet: bytes) -> bool:
    """Tell whether ``packet`` is a telecommand with a secondary header."""
    primary = PrimaryHeader.unpack(packet)
    return primary.packet_type == PACKET_TYPE_TC and primary.secondary_header