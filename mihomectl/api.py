"""Stable public API for building tooling on top of mihomectl.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

from pathlib import Path

from mihomectl.core.config_loader import LoadedConfig, load_config, resolve_factory
from mihomectl.core.errors import (
    BusClosedError,
    ConfigLoadError,
    ConfigValidationError,
    DecodeError,
    InternalInvariantError,
    InvalidParameterError,
    MihomeError,
    TransportError,
    UnsupportedError,
)
from mihomectl.core.events import EventBus, Subscription
from mihomectl.core.model import (
    Command,
    DriverConfig,
    DriverFactories,
    IndicatorRole,
    RadioMode,
    ReceivedEvent,
)
from mihomectl.core.ook import build_payload, parse_device_address
from mihomectl.core.service import MiHome
from mihomectl.transports.base import GPIO, PinState, ProtocolDecoder, Transceiver

__all__ = [
    "MihomeError",
    "InvalidParameterError",
    "UnsupportedError",
    "InternalInvariantError",
    "TransportError",
    "DecodeError",
    "BusClosedError",
    "ConfigLoadError",
    "ConfigValidationError",
    "Command",
    "DriverConfig",
    "DriverFactories",
    "IndicatorRole",
    "RadioMode",
    "ReceivedEvent",
    "EventBus",
    "Subscription",
    "GPIO",
    "PinState",
    "ProtocolDecoder",
    "Transceiver",
    "LoadedConfig",
    "MiHome",
    "build_payload",
    "load_config",
    "open_driver",
    "parse_device_address",
]


def _collaborator(name: str, given: object | None, factory: str | None) -> object:
    if given is not None:
        return given
    if factory is None:
        raise ConfigLoadError(
            f"No {name} driver configured. Set drivers.{name} to a 'package.module:factory' string."
        )
    return resolve_factory(factory)()


def open_driver(
    config_path: Path | str | None = None,
    *,
    gpio: GPIO | None = None,
    radio: Transceiver | None = None,
    decoder: ProtocolDecoder | None = None,
) -> MiHome:
    """Build a `MiHome` driver from configuration.

    Collaborators passed explicitly win over the factories named in the
    `drivers` section of the config.
    """
    loaded = load_config(config_path)
    return MiHome(
        gpio=_collaborator("gpio", gpio, loaded.drivers.gpio),  # type: ignore[arg-type]
        radio=_collaborator("radio", radio, loaded.drivers.radio),  # type: ignore[arg-type]
        decoder=_collaborator("decoder", decoder, loaded.drivers.decoder),  # type: ignore[arg-type]
        config=loaded.config,
    )
