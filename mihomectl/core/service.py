"""MiHome driver used by the CLI and public API.

A `MiHome` instance is a single-owner handle: callers must not run its
operations concurrently. Only the event bus is shared between threads, so
`receive` can run on a worker thread while other threads consume events.
"""

from __future__ import annotations

import logging
import threading
import time

from mihomectl.core.errors import InvalidParameterError, UnsupportedError
from mihomectl.core.events import EventBus, Subscription
from mihomectl.core.indicators import IndicatorController
from mihomectl.core.model import Command, DriverConfig, IndicatorRole, RadioMode
from mihomectl.core.modes import RadioModeController
from mihomectl.core.ook import build_payload, parse_device_address, resolve_off, resolve_on
from mihomectl.core.receiver import ReceiveLoop
from mihomectl.transports.base import GPIO, PinDirection, PinState, ProtocolDecoder, Transceiver, TransceiverMode

LOGGER = logging.getLogger(__name__)

RESET_HIGH_S = 0.100
RESET_LOW_S = 0.005


class MiHome:
    def __init__(
        self,
        gpio: GPIO,
        radio: Transceiver,
        decoder: ProtocolDecoder,
        config: DriverConfig | None = None,
    ) -> None:
        if gpio is None or radio is None or decoder is None:
            raise InvalidParameterError("MiHome requires GPIO, transceiver and decoder collaborators")
        config = config or DriverConfig()
        if config.repeat < 1:
            raise InvalidParameterError(f"Repeat count must be at least 1, got {config.repeat}")

        self._gpio = gpio
        self._radio = radio
        self._cid = parse_device_address(config.cid)
        self.repeat = config.repeat
        self.temp_offset = config.temp_offset
        self.reset_pin = config.reset_pin
        self.indicators = IndicatorController(gpio, config.led1_pin, config.led2_pin)
        self._modes = RadioModeController(radio)
        self._bus = EventBus(config.queue_size)
        self._receiver = ReceiveLoop(
            radio=radio,
            decoder=decoder,
            modes=self._modes,
            indicators=self.indicators,
            bus=self._bus,
            source=f"mihome:0x{self.cid_hex}",
        )
        LOGGER.debug(
            "Opened MiHome cid=0x%s repeat=%d temp_offset=%s reset=%s led1=%s led2=%s",
            self.cid_hex,
            self.repeat,
            self.temp_offset,
            config.reset_pin,
            config.led1_pin,
            config.led2_pin,
        )

    @property
    def cid(self) -> bytes:
        return self._cid

    @property
    def cid_hex(self) -> str:
        return self._cid.hex().upper()

    @property
    def mode(self) -> RadioMode:
        return self._modes.mode

    def __str__(self) -> str:
        ind = self.indicators
        return (
            f"<MiHome reset={self.reset_pin} led1={ind.primary} led2={ind.secondary} "
            f"ledrx={ind.rx} ledtx={ind.tx} cid=0x{self.cid_hex} mode={self.mode.value}>"
        )

    def __enter__(self) -> MiHome:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False

    def close(self) -> None:
        LOGGER.debug("Closing MiHome cid=0x%s", self.cid_hex)
        self._bus.shutdown()

    def reset_radio(self) -> None:
        if self.reset_pin is None:
            raise UnsupportedError("Radio reset pin is not wired")

        self._gpio.set_direction(self.reset_pin, PinDirection.OUTPUT)
        self.indicators.set(IndicatorRole.ALL, PinState.HIGH)

        self._gpio.write(self.reset_pin, PinState.HIGH)
        time.sleep(RESET_HIGH_S)
        self._gpio.write(self.reset_pin, PinState.LOW)
        time.sleep(RESET_LOW_S)

        self.indicators.set(IndicatorRole.ALL, PinState.LOW)
        self._modes.invalidate()

    def set_indicator(self, role: IndicatorRole, state: PinState) -> None:
        self.indicators.set(role, state)

    def send_control(self, cid: bytes, command: Command, repeat: int) -> None:
        """Transmit a legacy OOK command `repeat` times."""
        LOGGER.debug("send_control cid=0x%s cmd=%s repeat=%s", cid.hex().upper() if cid else None, command, repeat)
        if repeat < 1:
            raise InvalidParameterError(f"Repeat count must be at least 1, got {repeat}")
        if not cid:
            raise InvalidParameterError("Device address must not be empty")
        try:
            command = Command(command)
        except ValueError:
            raise InvalidParameterError(f"Unknown command {command!r}") from None

        payload = build_payload(cid, command)
        self._modes.ensure_mode(RadioMode.CONTROL)

        self.indicators.set(IndicatorRole.TX, PinState.HIGH)
        try:
            self._radio.write_payload(payload, repeat)
        finally:
            self.indicators.set(IndicatorRole.TX, PinState.LOW)

    def on(self, *sockets: int) -> None:
        """Switch sockets on; with no sockets every paired socket is switched."""
        if not sockets:
            self.send_control(self._cid, Command.ON_ALL, self.repeat)
            return
        for command in [resolve_on(socket) for socket in sockets]:
            self.send_control(self._cid, command, self.repeat)

    def off(self, *sockets: int) -> None:
        """Switch sockets off; with no sockets every paired socket is switched."""
        if not sockets:
            self.send_control(self._cid, Command.OFF_ALL, self.repeat)
            return
        for command in [resolve_off(socket) for socket in sockets]:
            self.send_control(self._cid, command, self.repeat)

    def receive(self, cancel: threading.Event, mode: RadioMode = RadioMode.MONITOR) -> None:
        self._receiver.run(cancel, mode)

    def measure_temperature(self) -> float:
        LOGGER.debug("measure_temperature offset=%s", self.temp_offset)
        previous = self._radio.mode()
        if previous != TransceiverMode.STANDBY:
            self._radio.set_mode(TransceiverMode.STANDBY)
        try:
            return self._radio.measure_temperature(self.temp_offset)
        finally:
            if previous != TransceiverMode.STANDBY:
                try:
                    self._radio.set_mode(previous)
                except Exception:
                    # Hardware mode is now unknown; force a full reconfigure next time.
                    self._modes.invalidate()
                    raise

    def subscribe(self, maxsize: int | None = None) -> Subscription:
        return self._bus.subscribe(maxsize)

    def unsubscribe(self, subscription: Subscription) -> None:
        self._bus.unsubscribe(subscription)
