"""Radio mode state machine.

The transceiver is shared between two incompatible configurations: OOK for
legacy socket control and FSK for monitoring OpenThings sensors. The
controller remembers which one was last applied and only rewrites registers
when the requested mode differs.
"""

from __future__ import annotations

import logging

from mihomectl.core.errors import InvalidParameterError
from mihomectl.core.model import RadioMode
from mihomectl.transports.base import (
    AFCMode,
    AFCRoutine,
    DataMode,
    LNAGain,
    LNAImpedance,
    Modulation,
    PacketCoding,
    PacketCRC,
    PacketFilter,
    PacketFormat,
    RXBWCutoff,
    RXBWFrequency,
    Transceiver,
    TransceiverMode,
)

LOGGER = logging.getLogger(__name__)

BITRATE = 4800
CONTROL_CARRIER_HZ = 433_920_000
MONITOR_CARRIER_HZ = 434_300_000
MONITOR_DEVIATION_HZ = 30_000
MONITOR_PREAMBLE_SIZE = 3
MONITOR_PAYLOAD_SIZE = 0x40
MONITOR_SYNC_WORD = bytes((0x2D, 0xD4))
MONITOR_NODE_ADDRESS = 0x04
MONITOR_BROADCAST_ADDRESS = 0xFF

_MODULATION = {
    RadioMode.CONTROL: Modulation.OOK,
    RadioMode.MONITOR: Modulation.FSK,
}


class RadioModeController:
    def __init__(self, radio: Transceiver) -> None:
        self._radio = radio
        self.mode = RadioMode.NONE

    def ensure_mode(self, target: RadioMode) -> None:
        """Bring the transceiver into `target`, configuring it only on change.

        CONTROL always ends with the transmitter armed. MONITOR clears the
        FIFO when it was already active. A failing register write propagates
        and leaves `mode` untouched.
        """
        if target not in _MODULATION:
            raise InvalidParameterError(f"Cannot switch radio into mode {target!r}")

        if self.mode is target and self._radio.modulation() == _MODULATION[target]:
            if target is RadioMode.MONITOR:
                self._radio.clear_fifo()
        else:
            LOGGER.debug("Configuring radio for %s mode (was %s)", target.value, self.mode.value)
            if target is RadioMode.CONTROL:
                self._configure_control()
            else:
                self._configure_monitor()
            self.mode = target

        if target is RadioMode.CONTROL:
            self._radio.set_mode(TransceiverMode.TX)
            self._radio.set_sequencer(True)

    def invalidate(self) -> None:
        self.mode = RadioMode.NONE

    def _configure_control(self) -> None:
        radio = self._radio
        radio.set_mode(TransceiverMode.STANDBY)
        radio.set_modulation(Modulation.OOK)
        radio.set_sequencer(True)
        radio.set_bitrate(BITRATE)
        radio.set_freq_carrier(CONTROL_CARRIER_HZ)
        radio.set_freq_deviation(0)
        radio.set_afc_mode(AFCMode.OFF)
        radio.set_data_mode(DataMode.PACKET)
        radio.set_packet_format(PacketFormat.VARIABLE)
        radio.set_packet_coding(PacketCoding.NONE)
        radio.set_packet_filter(PacketFilter.NONE)
        radio.set_packet_crc(PacketCRC.OFF)
        radio.set_preamble_size(0)
        radio.set_payload_size(0)
        radio.set_sync_word(None)
        radio.set_aes_key(None)
        radio.set_fifo_threshold(1)

    def _configure_monitor(self) -> None:
        radio = self._radio
        radio.set_mode(TransceiverMode.STANDBY)
        radio.set_modulation(Modulation.FSK)
        radio.set_sequencer(True)
        radio.set_bitrate(BITRATE)
        radio.set_freq_carrier(MONITOR_CARRIER_HZ)
        radio.set_freq_deviation(MONITOR_DEVIATION_HZ)
        radio.set_afc_mode(AFCMode.OFF)
        radio.set_afc_routine(AFCRoutine.STANDARD)
        radio.set_lna(LNAImpedance.OHMS_50, LNAGain.AUTO)
        radio.set_rx_filter(RXBWFrequency.FSK_62P5, RXBWCutoff.CUTOFF_4)
        radio.set_data_mode(DataMode.PACKET)
        radio.set_packet_format(PacketFormat.VARIABLE)
        radio.set_packet_coding(PacketCoding.MANCHESTER)
        radio.set_packet_filter(PacketFilter.NONE)
        radio.set_packet_crc(PacketCRC.OFF)
        radio.set_preamble_size(MONITOR_PREAMBLE_SIZE)
        radio.set_payload_size(MONITOR_PAYLOAD_SIZE)
        radio.set_sync_word(MONITOR_SYNC_WORD)
        radio.set_sync_tolerance(0)
        radio.set_node_address(MONITOR_NODE_ADDRESS)
        radio.set_broadcast_address(MONITOR_BROADCAST_ADDRESS)
        radio.set_aes_key(None)
        radio.set_fifo_threshold(1)
