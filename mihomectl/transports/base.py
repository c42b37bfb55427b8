"""Collaborator interfaces: GPIO lines, the RFM69 transceiver and the payload decoder."""

from __future__ import annotations

import threading
from enum import Enum, IntEnum
from typing import Any, Protocol


class PinDirection(IntEnum):
    INPUT = 0
    OUTPUT = 1


class PinState(IntEnum):
    LOW = 0
    HIGH = 1


class TransceiverMode(IntEnum):
    SLEEP = 0
    STANDBY = 1
    FREQ_SYNTH = 2
    TX = 3
    RX = 4


class Modulation(IntEnum):
    FSK = 0
    OOK = 1


class AFCMode(IntEnum):
    OFF = 0
    ON = 1
    AUTOCLEAR = 2


class AFCRoutine(IntEnum):
    STANDARD = 0
    IMPROVED = 1


class LNAImpedance(IntEnum):
    OHMS_50 = 0
    OHMS_200 = 1


class LNAGain(IntEnum):
    AUTO = 0
    G1 = 1
    G2 = 2
    G3 = 3
    G4 = 4
    G5 = 5
    G6 = 6


class RXBWFrequency(Enum):
    FSK_62P5 = "fsk_62.5khz"
    OOK_62P5 = "ook_62.5khz"


class RXBWCutoff(IntEnum):
    CUTOFF_0 = 0
    CUTOFF_1 = 1
    CUTOFF_2 = 2
    CUTOFF_3 = 3
    CUTOFF_4 = 4
    CUTOFF_5 = 5
    CUTOFF_6 = 6
    CUTOFF_7 = 7


class DataMode(IntEnum):
    PACKET = 0
    CONTINUOUS_SYNC = 2
    CONTINUOUS_NOSYNC = 3


class PacketFormat(IntEnum):
    FIXED = 0
    VARIABLE = 1


class PacketCoding(IntEnum):
    NONE = 0
    MANCHESTER = 1
    WHITENING = 2


class PacketFilter(IntEnum):
    NONE = 0
    NODE = 1
    BROADCAST = 2


class PacketCRC(IntEnum):
    OFF = 0
    AUTOCLEAR_OFF = 1
    AUTOCLEAR_ON = 2


class GPIO(Protocol):
    def set_direction(self, pin: int, direction: PinDirection) -> None:
        """Switch a logical pin between input and output."""

    def write(self, pin: int, state: PinState) -> None:
        """Drive an output pin low or high."""


class Transceiver(Protocol):
    """Register-level driver for an RFM69 radio.

    Every method may raise `TransportError` on SPI failure.
    """

    def mode(self) -> TransceiverMode: ...

    def modulation(self) -> Modulation: ...

    def set_mode(self, mode: TransceiverMode) -> None: ...

    def set_modulation(self, modulation: Modulation) -> None: ...

    def set_sequencer(self, enabled: bool) -> None: ...

    def set_bitrate(self, bps: int) -> None: ...

    def set_freq_carrier(self, hz: int) -> None: ...

    def set_freq_deviation(self, hz: int) -> None: ...

    def set_afc_mode(self, mode: AFCMode) -> None: ...

    def set_afc_routine(self, routine: AFCRoutine) -> None: ...

    def set_lna(self, impedance: LNAImpedance, gain: LNAGain) -> None: ...

    def set_rx_filter(self, frequency: RXBWFrequency, cutoff: RXBWCutoff) -> None: ...

    def set_data_mode(self, mode: DataMode) -> None: ...

    def set_packet_format(self, fmt: PacketFormat) -> None: ...

    def set_packet_coding(self, coding: PacketCoding) -> None: ...

    def set_packet_filter(self, packet_filter: PacketFilter) -> None: ...

    def set_packet_crc(self, crc: PacketCRC) -> None: ...

    def set_preamble_size(self, size: int) -> None: ...

    def set_payload_size(self, size: int) -> None: ...

    def set_sync_word(self, word: bytes | None) -> None: ...

    def set_sync_tolerance(self, bits: int) -> None: ...

    def set_node_address(self, address: int) -> None: ...

    def set_broadcast_address(self, address: int) -> None: ...

    def set_aes_key(self, key: bytes | None) -> None: ...

    def set_fifo_threshold(self, threshold: int) -> None: ...

    def clear_fifo(self) -> None: ...

    def read_payload(self, cancel: threading.Event) -> bytes | None:
        """Block until a payload arrives or `cancel` is set.

        Must return promptly (with None) once `cancel` is set rather than
        waiting for an internal timeout.
        """

    def write_payload(self, payload: bytes, repeat: int) -> None:
        """Transmit `payload` `repeat` times."""

    def measure_temperature(self, offset: float) -> float:
        """Return the die temperature in Celsius, adjusted by `offset`."""


class ProtocolDecoder(Protocol):
    def decode(self, data: bytes) -> tuple[Any | None, Exception | None]:
        """Decode a received frame.

        May return a message together with a failure for partially valid
        frames, or raise `DecodeError`.
        """
