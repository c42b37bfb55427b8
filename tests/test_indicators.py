from __future__ import annotations

import pytest
from fakes import FakeGPIO

from mihomectl.core.errors import UnsupportedError
from mihomectl.core.indicators import IndicatorController
from mihomectl.core.model import IndicatorRole
from mihomectl.transports.base import PinDirection, PinState


def test_rx_tx_follow_primary_and_secondary(gpio: FakeGPIO) -> None:
    indicators = IndicatorController(gpio, primary=27, secondary=22)

    indicators.set(IndicatorRole.RX, PinState.HIGH)
    indicators.set(IndicatorRole.TX, PinState.HIGH)

    assert gpio.writes() == [(27, PinState.HIGH), (22, PinState.HIGH)]


def test_rx_with_only_primary_toggles_primary(gpio: FakeGPIO) -> None:
    indicators = IndicatorController(gpio, primary=27)

    indicators.set(IndicatorRole.RX, PinState.HIGH)
    indicators.set(IndicatorRole.RX, PinState.LOW)
    indicators.set(IndicatorRole.TX, PinState.HIGH)

    assert gpio.calls[0] == ("direction", 27, PinDirection.OUTPUT)
    assert gpio.writes() == [(27, PinState.HIGH), (27, PinState.LOW), (27, PinState.HIGH)]


def test_only_secondary_serves_both_roles(gpio: FakeGPIO) -> None:
    indicators = IndicatorController(gpio, secondary=22)

    assert indicators.rx == 22
    assert indicators.tx == 22


def test_rx_tx_silently_ignored_without_leds(gpio: FakeGPIO) -> None:
    indicators = IndicatorController(gpio)

    indicators.set(IndicatorRole.RX, PinState.HIGH)
    indicators.set(IndicatorRole.TX, PinState.HIGH)
    indicators.set(IndicatorRole.ALL, PinState.HIGH)

    assert gpio.calls == []


@pytest.mark.parametrize("role", [IndicatorRole.PRIMARY, IndicatorRole.SECONDARY])
def test_explicit_role_requires_wired_pin(gpio: FakeGPIO, role: IndicatorRole) -> None:
    indicators = IndicatorController(gpio)

    with pytest.raises(UnsupportedError):
        indicators.set(role, PinState.HIGH)


def test_all_skips_unwired_pin(gpio: FakeGPIO) -> None:
    indicators = IndicatorController(gpio, secondary=22)

    indicators.set(IndicatorRole.ALL, PinState.HIGH)

    assert gpio.writes() == [(22, PinState.HIGH)]


def test_all_sets_primary_then_secondary(gpio: FakeGPIO) -> None:
    indicators = IndicatorController(gpio, primary=27, secondary=22)

    indicators.set(IndicatorRole.ALL, PinState.LOW)

    assert gpio.writes() == [(27, PinState.LOW), (22, PinState.LOW)]
