from __future__ import annotations

import pytest

from mihomectl.core.errors import InternalInvariantError, InvalidParameterError
from mihomectl.core.model import Command
from mihomectl.core.ook import (
    OOK_PREAMBLE,
    build_payload,
    encode_address,
    encode_byte,
    parse_device_address,
    resolve_off,
    resolve_on,
)

DEFAULT_CID = bytes.fromhex("06c6c6")


def _decode_pulses(encoded: bytes) -> int:
    value = 0
    for byte in encoded:
        for nibble in (byte >> 4, byte & 0x0F):
            assert nibble in (0x8, 0xE)
            value = (value << 1) | (nibble == 0xE)
    return value


def test_encode_byte_is_four_bytes_and_invertible() -> None:
    for value in range(256):
        encoded = encode_byte(value)
        assert len(encoded) == 4
        assert _decode_pulses(encoded) == value


def test_encode_byte_known_values() -> None:
    assert encode_byte(0x00).hex() == "88888888"
    assert encode_byte(0xFF).hex() == "eeeeeeee"
    assert encode_byte(0x0D).hex() == "8888ee8e"


def test_encode_byte_rejects_non_byte() -> None:
    with pytest.raises(InvalidParameterError):
        encode_byte(0x100)
    with pytest.raises(InvalidParameterError):
        encode_byte(-1)


def test_encode_address_expands_each_byte() -> None:
    encoded = encode_address(DEFAULT_CID)
    assert len(encoded) == 12
    assert encoded.hex() == "88888ee8ee888ee8ee888ee8"


def test_default_cid_on_all_golden_payload() -> None:
    cid = parse_device_address("6C6C6")
    assert cid == bytes((0x06, 0xC6, 0xC6))

    payload = build_payload(cid, Command.ON_ALL)
    assert payload.hex() == "800000008ee8ee888ee8ee888ee8ee8e"


@pytest.mark.parametrize("cid", ["000000", "6c6c6", "abcdef", "ffffff"])
@pytest.mark.parametrize("command", list(Command))
def test_payload_shape(cid: str, command: Command) -> None:
    payload = build_payload(parse_device_address(cid), command)
    assert len(payload) == 16
    assert payload[:4] == OOK_PREAMBLE
    assert payload[14:] == encode_byte(command)[2:]


@pytest.mark.parametrize("address", [b"", b"\x01\x02", b"\x01\x02\x03\x04"])
def test_build_payload_requires_three_byte_address(address: bytes) -> None:
    with pytest.raises(InternalInvariantError):
        build_payload(address, Command.ON_ALL)


def test_parse_device_address_pads_and_normalizes() -> None:
    assert parse_device_address(" abcdef ") == bytes.fromhex("abcdef")
    assert parse_device_address("1") == b"\x01"
    assert parse_device_address("ABC") == bytes.fromhex("0abc")


@pytest.mark.parametrize("value", ["", "   ", "xyz", "12 34", "0x1234"])
def test_parse_device_address_rejects_bad_input(value: str) -> None:
    with pytest.raises(InvalidParameterError):
        parse_device_address(value)


def test_socket_table_is_total_over_one_to_four() -> None:
    on = [resolve_on(s) for s in range(1, 5)]
    off = [resolve_off(s) for s in range(1, 5)]
    assert on == [Command.ON_1, Command.ON_2, Command.ON_3, Command.ON_4]
    assert off == [Command.OFF_1, Command.OFF_2, Command.OFF_3, Command.OFF_4]
    assert len(set(on) | set(off)) == 8
    assert Command.ON_ALL not in on
    assert Command.OFF_ALL not in off


@pytest.mark.parametrize("socket", [0, 5, 6, -1, 255])
def test_socket_table_rejects_out_of_range(socket: int) -> None:
    with pytest.raises(InvalidParameterError):
        resolve_on(socket)
    with pytest.raises(InvalidParameterError):
        resolve_off(socket)


def test_command_str() -> None:
    assert str(Command.ON_ALL) == "OOK_ON_ALL"
    assert str(Command.OFF_3) == "OOK_OFF_3"
