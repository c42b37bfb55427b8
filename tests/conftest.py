from __future__ import annotations

from pathlib import Path

import pytest
from fakes import FakeDecoder, FakeGPIO, FakeRadio


@pytest.fixture(autouse=True)
def isolated_config_home(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    config_home = tmp_path / "xdg-config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    return config_home


@pytest.fixture
def gpio() -> FakeGPIO:
    return FakeGPIO()


@pytest.fixture
def radio() -> FakeRadio:
    return FakeRadio()


@pytest.fixture
def decoder() -> FakeDecoder:
    return FakeDecoder()
