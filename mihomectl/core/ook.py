"""Legacy OOK codec for Energenie sockets.

Each bit of a command or address is sent as a 4-bit pulse pattern, 0x8 for a
zero and 0xE for a one, so every byte expands to four bytes on air. A payload
is the fixed preamble, the last 10 bytes of the encoded 3-byte address and the
last 2 bytes of the encoded command.
"""

from __future__ import annotations

import re

from mihomectl.core.errors import InternalInvariantError, InvalidParameterError
from mihomectl.core.model import Command

OOK_PREAMBLE = bytes((0x80, 0x00, 0x00, 0x00))
OOK_ZERO = 0x08
OOK_ONE = 0x0E
PAYLOAD_SIZE = 16

_HEX_RE = re.compile(r"^[0-9a-f]+$")

_ON_COMMANDS = {1: Command.ON_1, 2: Command.ON_2, 3: Command.ON_3, 4: Command.ON_4}
_OFF_COMMANDS = {1: Command.OFF_1, 2: Command.OFF_2, 3: Command.OFF_3, 4: Command.OFF_4}


def encode_byte(value: int) -> bytes:
    if not 0 <= value <= 0xFF:
        raise InvalidParameterError(f"Cannot encode {value}: not a byte")
    encoded = bytearray()
    for shift in (6, 4, 2, 0):
        pair = (value >> shift) & 0x03
        high = OOK_ONE if pair & 0x02 else OOK_ZERO
        low = OOK_ONE if pair & 0x01 else OOK_ZERO
        encoded.append((high << 4) | low)
    return bytes(encoded)


def encode_address(address: bytes) -> bytes:
    return b"".join(encode_byte(b) for b in address)


def build_payload(address: bytes, command: Command) -> bytes:
    encoded_cmd = encode_byte(int(command))
    if len(encoded_cmd) != 4:
        raise InternalInvariantError(f"Encoded command is {len(encoded_cmd)} bytes, expected 4")
    encoded_cid = encode_address(address)
    if len(encoded_cid) != 12:
        raise InternalInvariantError(
            f"Encoded address is {len(encoded_cid)} bytes, expected 12 (address must be 3 bytes)"
        )
    # Leading two bytes of each field encode bits covered by the preamble.
    return OOK_PREAMBLE + encoded_cid[2:] + encoded_cmd[2:]


def parse_device_address(value: str) -> bytes:
    normalized = value.strip().lower()
    if len(normalized) == 0:
        raise InvalidParameterError("Device address must not be empty")
    if not _HEX_RE.match(normalized):
        raise InvalidParameterError(f"Device address '{value}' must contain only [0-9a-f]")
    if len(normalized) % 2 != 0:
        normalized = "0" + normalized
    return bytes.fromhex(normalized)


def resolve_on(socket: int) -> Command:
    try:
        return _ON_COMMANDS[socket]
    except KeyError:
        raise InvalidParameterError(f"Invalid socket {socket}, expected 1-4") from None


def resolve_off(socket: int) -> Command:
    try:
        return _OFF_COMMANDS[socket]
    except KeyError:
        raise InvalidParameterError(f"Invalid socket {socket}, expected 1-4") from None
