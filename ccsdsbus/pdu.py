"""Simulated power distribution unit driven by PUS service 140."""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass, field

from .ccsds import PacketError, create_packet
from .pus import create_tm_data_field, get_tc_data, get_tc_header
from .router import Router, RouterError

logger = logging.getLogger(__name__)

PUS_SERVICE_ID = 140
CHANNEL_ON_OFF_TC_SUBSERVICE_ID = 1
CHANNEL_STATUS_TC_SUBSERVICE_ID = 2
CHANNEL_STATUS_TM_SUBSERVICE_ID = 3
CHANNELS_NO = 4

BATTERY_DEFAULT = 14.1
CHANNEL_VOLTAGES_DEFAULT = (12.0, 5.0, 5.3, 3.3)
CHANNEL_CURRENTS_DEFAULT = (200.0, 300.0, 400.0, 500.0)


@dataclass
class PacketCounter:
    """16-bit packet counter shared between the parts of one application."""

    value: int = 0

    def increment(self) -> None:
        self.value = (self.value + 1) & 0xFFFF


@dataclass
class Channel:
    """State of one power channel."""

    is_on: bool = False
    voltage_v: float = 0.0
    current_mA: float = 0.0


@dataclass(frozen=True)
class ChannelOnOff:
    """Data of the channel on/off telecommand."""

    channel_no: int
    is_on: int

    _STRUCT = struct.Struct("<BB")
    SIZE = _STRUCT.size

    @classmethod
    def unpack(cls, data: bytes) -> ChannelOnOff:
        raw = bytes(data)
        if len(raw) != cls.SIZE:
            raise PacketError(f"data size mismatch {len(raw)} {cls.SIZE}")
        channel_no, is_on = cls._STRUCT.unpack(raw)
        return cls(channel_no, is_on)


_STATUS_STRUCT = struct.Struct("<f" + "B3xff" * CHANNELS_NO)


@dataclass(frozen=True)
class PduStatus:
    """Data of the PDU status telemetry: battery level and every channel."""

    battery_level: float
    channels: tuple[Channel, ...] = field(default_factory=tuple)

    SIZE = _STATUS_STRUCT.size

    def pack(self) -> bytes:
        if len(self.channels) != CHANNELS_NO:
            raise ValueError(f"status needs {CHANNELS_NO} channels, got {len(self.channels)}")
        values: list[float | int] = [self.battery_level]
        for channel in self.channels:
            values.extend((int(channel.is_on), channel.voltage_v, channel.current_mA))
        return _STATUS_STRUCT.pack(*values)

    @classmethod
    def unpack(cls, data: bytes) -> PduStatus:
        raw = bytes(data)
        if len(raw) != cls.SIZE:
            raise PacketError(f"status needs {cls.SIZE} bytes, got {len(raw)}")
        battery, *rest = _STATUS_STRUCT.unpack(raw)
        channels = tuple(
            Channel(bool(rest[i]), rest[i + 1], rest[i + 2]) for i in range(0, len(rest), 3)
        )
        return cls(battery, channels)


class Pdu:
    """Power distribution unit simulation answering service 140 telecommands."""

    def __init__(self, router: Router, apid: int, packet_counter: PacketCounter | None = None) -> None:
        self.router = router
        self.apid = apid
        self.packet_counter = packet_counter if packet_counter is not None else PacketCounter()
        self.battery_level = 0.0
        self.channels = [Channel() for _ in range(CHANNELS_NO)]
        self.status_tm_counter = 0

    def execute(self) -> None:
        """Simulate one cycle: switched-on channels take their nominal values."""
        self.battery_level = BATTERY_DEFAULT
        for channel, voltage, current in zip(
            self.channels, CHANNEL_VOLTAGES_DEFAULT, CHANNEL_CURRENTS_DEFAULT
        ):
            if channel.is_on:
                channel.voltage_v, channel.current_mA = voltage, current
            else:
                channel.voltage_v, channel.current_mA = 0.0, 0.0

    def status(self) -> PduStatus:
        """Snapshot of the battery level and every channel."""
        return PduStatus(
            self.battery_level,
            tuple(Channel(c.is_on, c.voltage_v, c.current_mA) for c in self.channels),
        )

    def handle_tc(self, packet: bytes) -> bytes | None:
        """Apply a service 140 telecommand; return the telemetry sent, if any."""
        header = get_tc_header(packet)
        if header.service_subtype == CHANNEL_ON_OFF_TC_SUBSERVICE_ID:
            self._switch_channel(get_tc_data(packet))
            return None
        if header.service_subtype == CHANNEL_STATUS_TC_SUBSERVICE_ID:
            return self._send_tm(self.status().pack(), header.source_id)
        logger.warning("handle_tc: unknown subservice %d", header.service_subtype)
        return None

    def _switch_channel(self, data: bytes) -> None:
        try:
            command = ChannelOnOff.unpack(data)
        except PacketError as exc:
            logger.warning("channel on/off: %s", exc)
            return
        if command.channel_no >= CHANNELS_NO:
            logger.warning("channel on/off: no channel %d", command.channel_no)
            return
        logger.info("switch %d to %d", command.channel_no, command.is_on)
        self.channels[command.channel_no].is_on = bool(command.is_on)

    def _send_tm(self, data: bytes, destination_id: int) -> bytes:
        data_field = create_tm_data_field(
            data,
            PUS_SERVICE_ID,
            CHANNEL_STATUS_TM_SUBSERVICE_ID,
            self.status_tm_counter,
            destination_id,
        )
        packet = create_packet(False, True, self.apid, self.packet_counter.value, data_field)
        try:
            self.router.publish(packet)
        except RouterError:
            logger.warning("status telemetry rejected by the router")
        self.status_tm_counter = (self.status_tm_counter + 1) & 0xFFFF
        self.packet_counter.increment()
        return packet