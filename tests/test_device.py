import threading

import pytest

from ccsdsbus.ccsds import PrimaryHeader, create_packet
from ccsdsbus.device import DeviceMain
from ccsdsbus.pdu import PduStatus
from ccsdsbus.pus import create_tc_data_field, get_tm_data, get_tm_header
from ccsdsbus.router import Router

APID = 42


class _Link:
    def __init__(self):
        self.sent = []

    def receive(self):
        return None

    def send(self, packet):
        self.sent.append(packet)

    def stop(self):
        pass


def _tc(service, subservice, data, source_id=7, apid=APID):
    field = create_tc_data_field(data, False, False, service, subservice, source_id)
    return create_packet(True, True, apid, 0, field)


def _switch(channel, on):
    return _tc(140, 1, bytes([channel, 1 if on else 0]))


@pytest.fixture
def link():
    return _Link()


@pytest.fixture
def router(link):
    return Router(4096, data_link=link)


@pytest.fixture
def device(router):
    return DeviceMain(router, APID)


def test_switch_on_through_router(router, device):
    router.publish(_switch(0, True))
    router.execute()
    assert len(device.packet_queue) == 1
    assert device.received_packets == 1
    device.execute()
    assert device.pdu.channels[0].is_on is True
    assert device.pdu.channels[0].voltage_v == 12.0
    assert device.pdu.channels[0].current_mA == 200.0
    assert device.pdu.channels[1].is_on is False


def test_status_request_sends_telemetry(router, device, link):
    device.handle_packet(_switch(0, True))
    device.execute()
    device.handle_packet(_tc(140, 2, b"", source_id=9))
    device.handle_tcs()
    router.execute()
    assert len(link.sent) == 1
    tm = link.sent[0]
    primary = PrimaryHeader.unpack(tm)
    assert primary.is_tc is False
    assert primary.apid == APID
    header = get_tm_header(tm)
    assert (header.service_type, header.service_subtype) == (140, 3)
    assert header.destination_id == 9
    status = PduStatus.unpack(get_tm_data(tm))
    assert status.channels[0].is_on is True
    assert status.channels[0].voltage_v == 12.0
    assert device.sent_packets.value == 1


def test_queue_full_counts_rejection(router):
    small = DeviceMain(router, APID + 1, queue_capacity=10)
    small.handle_packet(_switch(0, True))
    assert small.rejected_packets == 1
    assert len(small.packet_queue) == 0


def test_handle_tcs_limits_per_cycle(router):
    limited = DeviceMain(router, APID + 2, max_tcs_per_cycle=2)
    for channel in range(3):
        limited.handle_packet(_switch(channel, True))
    assert limited.handle_tcs() == 2
    assert len(limited.packet_queue) == 1
    assert [c.is_on for c in limited.pdu.channels[:3]] == [True, True, False]
    assert limited.handle_tcs() == 1
    assert limited.pdu.channels[2].is_on is True


def test_other_service_is_ignored(device):
    device.handle_packet(_tc(17, 1, bytes([0, 1])))
    assert device.handle_tcs() == 1
    assert all(not c.is_on for c in device.pdu.channels)


def test_telemetry_packet_is_ignored(device):
    field = create_tc_data_field(bytes([0, 1]), False, False, 140, 1, 7)
    tm = create_packet(False, True, APID, 0, field)
    device.handle_packet(tm)
    assert device.handle_tcs() == 1
    assert all(not c.is_on for c in device.pdu.channels)


def test_malformed_packet_is_dropped(device):
    device.handle_packet(b"\x01\x02")
    assert device.handle_tcs() == 1
    assert len(device.packet_queue) == 0


def test_thread_runs_cycles(device):
    start = threading.Semaphore(0)
    end = threading.Semaphore(0)
    thread = device.start(start, end)
    device.handle_packet(_switch(3, True))
    start.release()
    assert end.acquire(timeout=5)
    assert device.pdu.channels[3].is_on is True
    device.stop()
    start.release()
    thread.join(timeout=5)
    assert not thread.is_alive()