"""Status LED handling for the radio board."""

from __future__ import annotations

from mihomectl.core.errors import InvalidParameterError, UnsupportedError
from mihomectl.core.model import IndicatorRole
from mihomectl.transports.base import GPIO, PinDirection, PinState


class IndicatorController:
    """Maps indicator roles onto the LED pins that are actually wired.

    RX defaults to the primary LED and TX to the secondary one. On boards with
    a single LED both roles share it.
    """

    def __init__(self, gpio: GPIO, primary: int | None = None, secondary: int | None = None) -> None:
        self._gpio = gpio
        self.primary = primary
        self.secondary = secondary
        self.rx = primary
        self.tx = secondary
        if self.tx is None:
            self.tx = primary
        elif self.rx is None:
            self.rx = secondary

    def set(self, role: IndicatorRole, state: PinState) -> None:
        if role is IndicatorRole.ALL:
            if self.primary is not None:
                self.set(IndicatorRole.PRIMARY, state)
            if self.secondary is not None:
                self.set(IndicatorRole.SECONDARY, state)
        elif role is IndicatorRole.PRIMARY:
            if self.primary is None:
                raise UnsupportedError("Primary indicator is not wired")
            self._drive(self.primary, state)
        elif role is IndicatorRole.SECONDARY:
            if self.secondary is None:
                raise UnsupportedError("Secondary indicator is not wired")
            self._drive(self.secondary, state)
        elif role is IndicatorRole.RX:
            if self.rx is not None:
                self._drive(self.rx, state)
        elif role is IndicatorRole.TX:
            if self.tx is not None:
                self._drive(self.tx, state)
        else:
            raise InvalidParameterError(f"Unknown indicator role {role!r}")

    def _drive(self, pin: int, state: PinState) -> None:
        self._gpio.set_direction(pin, PinDirection.OUTPUT)
        self._gpio.write(pin, state)
