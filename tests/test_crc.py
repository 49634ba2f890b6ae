import pytest

from ccsdsbus.crc import ccsds_crc16


def test_standard_check_value():
    assert ccsds_crc16(b"123456789", 0xFFFF, 0) == 0x29B1


def test_default_seed_matches_explicit_seed():
    assert ccsds_crc16(b"123456789") == ccsds_crc16(b"123456789", 0xFFFF, 0)


def test_single_byte_with_zero_seed_is_table_entry():
    assert ccsds_crc16(b"\x01", 0, 0) == 0x1021


def test_empty_data_returns_seed():
    assert ccsds_crc16(b"", 0x1234, 0) == 0x1234


def test_appending_crc_gives_zero_remainder():
    payload = b"telemetry frame"
    crc = ccsds_crc16(payload, 0xFFFF, 0)
    assert ccsds_crc16(payload + crc.to_bytes(2, "big"), 0xFFFF, 0) == 0


def test_bias_changes_result_and_stays_16_bit():
    plain = ccsds_crc16(b"abc", 0, 0)
    biased = ccsds_crc16(b"abc", 0, 7)
    assert plain != biased
    assert 0 <= biased <= 0xFFFF


@pytest.mark.parametrize("data", [b"\x00", b"\xff" * 10, bytes(range(256))])
def test_accepts_any_iterable_of_ints(data):
    assert ccsds_crc16(list(data)) == ccsds_crc16(data)