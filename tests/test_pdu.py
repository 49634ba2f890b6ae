import pytest

from ccsdsbus.ccsds import PacketError, PrimaryHeader, create_packet
from ccsdsbus.pdu import (
    CHANNEL_CURRENTS_DEFAULT,
    CHANNEL_VOLTAGES_DEFAULT,
    CHANNELS_NO,
    PUS_SERVICE_ID,
    Channel,
    ChannelOnOff,
    PacketCounter,
    Pdu,
    PduStatus,
)
from ccsdsbus.pus import create_tc_data_field, get_tm_data, get_tm_header
from ccsdsbus.router import Router

APID = 20


class FakeLink:
    def __init__(self):
        self.sent = []

    def receive(self):
        return None

    def send(self, packet):
        self.sent.append(packet)

    def stop(self):
        pass


def tc(subtype, data=b"", source_id=0):
    field = create_tc_data_field(data, False, False, PUS_SERVICE_ID, subtype, source_id)
    return create_packet(True, True, APID, 0, field)


@pytest.fixture
def setup():
    link = FakeLink()
    router = Router(4096, data_link=link)
    return Pdu(router, APID), router, link


def test_initial_status_all_off(setup):
    pdu, _, _ = setup
    status = pdu.status()
    assert status.battery_level == 0.0
    assert all(not c.is_on and c.voltage_v == 0.0 for c in status.channels)


def test_switch_on_and_execute(setup):
    pdu, _, _ = setup
    pdu.handle_tc(tc(1, bytes([2, 1])))
    pdu.execute()
    assert pdu.battery_level == pytest.approx(14.1)
    assert pdu.channels[2].is_on
    assert pdu.channels[2].voltage_v == CHANNEL_VOLTAGES_DEFAULT[2]
    assert pdu.channels[2].current_mA == CHANNEL_CURRENTS_DEFAULT[2]
    assert pdu.channels[0].voltage_v == 0.0


def test_switch_off_zeroes_channel(setup):
    pdu, _, _ = setup
    pdu.handle_tc(tc(1, bytes([0, 1])))
    pdu.execute()
    pdu.handle_tc(tc(1, bytes([0, 0])))
    pdu.execute()
    assert pdu.channels[0].is_on is False
    assert pdu.channels[0].current_mA == 0.0


def test_wrong_size_on_off_ignored(setup):
    pdu, _, _ = setup
    assert pdu.handle_tc(tc(1, bytes([1, 1, 1]))) is None
    assert not any(c.is_on for c in pdu.channels)


def test_unknown_subservice_sends_nothing(setup):
    pdu, _, link = setup
    assert pdu.handle_tc(tc(9)) is None
    assert pdu.status_tm_counter == 0


def test_status_tm_round_trip(setup):
    pdu, router, link = setup
    pdu.handle_tc(tc(1, bytes([1, 1])))
    pdu.execute()
    packet = pdu.handle_tc(tc(2, source_id=33))
    router.execute()
    assert link.sent == [packet]
    primary = PrimaryHeader.unpack(packet)
    assert primary.apid == APID and not primary.is_tc and primary.secondary_header
    header = get_tm_header(packet)
    assert (header.service_type, header.service_subtype) == (PUS_SERVICE_ID, 3)
    assert header.destination_id == 33
    status = PduStatus.unpack(get_tm_data(packet))
    assert status.battery_level == pytest.approx(14.1, rel=1e-6)
    assert status.channels[1].is_on
    assert status.channels[1].voltage_v == pytest.approx(CHANNEL_VOLTAGES_DEFAULT[1])


def test_counters_advance(setup):
    _, router, _ = setup
    counter = PacketCounter(5)
    pdu = Pdu(router, APID, counter)
    first = pdu.handle_tc(tc(2))
    second = pdu.handle_tc(tc(2))
    assert PrimaryHeader.unpack(first).sequence_count == 5
    assert PrimaryHeader.unpack(second).sequence_count == 6
    assert get_tm_header(second).message_type_counter == 1
    assert counter.value == 7


def test_status_pack_round_trip():
    channels = tuple(Channel(i % 2 == 0, float(i), float(i * 10)) for i in range(CHANNELS_NO))
    status = PduStatus(2.5, channels)
    raw = status.pack()
    assert len(raw) == PduStatus.SIZE
    assert PduStatus.unpack(raw) == status


def test_channel_on_off_unpack():
    assert ChannelOnOff.unpack(bytes([3, 1])) == ChannelOnOff(3, 1)
    with pytest.raises(PacketError):
        ChannelOnOff.unpack(b"\x01")