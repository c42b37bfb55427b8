"""Core data models used across the driver, config loader, and CLI."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum, IntEnum
from typing import Any

CID_DEFAULT = "6C6C6"
REPEAT_DEFAULT = 8
QUEUE_SIZE_DEFAULT = 64


class RadioMode(Enum):
    NONE = "none"
    CONTROL = "control"
    MONITOR = "monitor"


class Command(IntEnum):
    """Legacy OOK command bytes understood by Energenie sockets."""

    NONE = 0x00
    ON_ALL = 0x0D
    OFF_ALL = 0x0C
    ON_1 = 0x0F
    OFF_1 = 0x0E
    ON_2 = 0x07
    OFF_2 = 0x06
    ON_3 = 0x0B
    OFF_3 = 0x0A
    ON_4 = 0x03
    OFF_4 = 0x02

    def __str__(self) -> str:
        return f"OOK_{self.name}"


class IndicatorRole(Enum):
    ALL = "all"
    PRIMARY = "primary"
    SECONDARY = "secondary"
    RX = "rx"
    TX = "tx"


@dataclass(frozen=True)
class DriverConfig:
    cid: str = CID_DEFAULT
    repeat: int = REPEAT_DEFAULT
    temp_offset: float = 0.0
    reset_pin: int | None = None
    led1_pin: int | None = None
    led2_pin: int | None = None
    queue_size: int = QUEUE_SIZE_DEFAULT


@dataclass(frozen=True)
class DriverFactories:
    gpio: str | None = None
    radio: str | None = None
    decoder: str | None = None


@dataclass(frozen=True)
class ReceivedEvent:
    timestamp: datetime
    message: Any | None
    failure: Exception | None
    source: str

    def __str__(self) -> str:
        ts = self.timestamp.strftime("%b %d %H:%M:%S")
        return f"<ReceivedEvent ts={ts} message={self.message} failure={self.failure} source={self.source}>"
