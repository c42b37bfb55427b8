"""Receive loop: keep the radio listening and publish decoded frames."""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Any

from mihomectl.core.errors import DecodeError, InvalidParameterError
from mihomectl.core.events import EventBus
from mihomectl.core.indicators import IndicatorController
from mihomectl.core.model import IndicatorRole, RadioMode, ReceivedEvent
from mihomectl.core.modes import RadioModeController
from mihomectl.transports.base import PinState, ProtocolDecoder, Transceiver, TransceiverMode

LOGGER = logging.getLogger(__name__)


class ReceiveLoop:
    def __init__(
        self,
        *,
        radio: Transceiver,
        decoder: ProtocolDecoder,
        modes: RadioModeController,
        indicators: IndicatorController,
        bus: EventBus,
        source: str,
    ) -> None:
        self._radio = radio
        self._decoder = decoder
        self._modes = modes
        self._indicators = indicators
        self._bus = bus
        self._source = source

    def run(self, cancel: threading.Event, mode: RadioMode = RadioMode.MONITOR) -> None:
        """Read and publish frames until `cancel` is set.

        Transceiver errors end the loop and propagate. Decode failures are
        published alongside their message (if any) and the loop carries on.
        """
        if mode is not RadioMode.MONITOR:
            raise InvalidParameterError(f"Receive is only supported in monitor mode, not {mode.value}")
        if cancel.is_set():
            return

        self._modes.ensure_mode(RadioMode.MONITOR)
        # On a restart ensure_mode has already cleared the FIFO. Clear again to drop frames received in between.
        if self._radio.mode() != TransceiverMode.RX:
            self._radio.set_mode(TransceiverMode.RX)
        else:
            self._radio.clear_fifo()

        LOGGER.debug("Receive loop started")
        while not cancel.is_set():
            data = self._radio.read_payload(cancel)
            if not data:
                continue
            self._indicators.set(IndicatorRole.RX, PinState.HIGH)
            try:
                self._handle_frame(bytes(data))
            finally:
                self._indicators.set(IndicatorRole.RX, PinState.LOW)
        LOGGER.debug("Receive loop cancelled")

    def _handle_frame(self, data: bytes) -> None:
        message: Any | None
        failure: Exception | None
        try:
            message, failure = self._decoder.decode(data)
        except DecodeError as exc:
            message, failure = None, exc

        if message is not None:
            self._bus.publish(
                ReceivedEvent(
                    timestamp=datetime.now(),
                    message=message,
                    failure=failure,
                    source=self._source,
                )
            )

        if failure is not None:
            LOGGER.info("Decode failed for %d byte frame %s: %s", len(data), data.hex(), failure)
            try:
                self._radio.clear_fifo()
            except Exception as exc:
                LOGGER.error("clear_fifo after decode failure: %s", exc)
