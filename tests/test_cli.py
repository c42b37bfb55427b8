from __future__ import annotations

import threading
import time
from pathlib import Path

import pytest
from fakes import FakeDecoder, FakeGPIO, FakeRadio
from typer.testing import CliRunner

from mihomectl import cli
from mihomectl.core.errors import DecodeError, TransportError
from mihomectl.core.model import DriverConfig
from mihomectl.core.service import MiHome

runner = CliRunner()


@pytest.fixture
def radio_rig(monkeypatch: pytest.MonkeyPatch) -> FakeRadio:
    radio = FakeRadio()
    monkeypatch.setattr(
        cli,
        "open_driver",
        lambda config_path=None: MiHome(FakeGPIO(), radio, FakeDecoder(), DriverConfig(led1_pin=27)),
    )
    return radio


def _payloads(radio: FakeRadio) -> list[str]:
    return [call[1].hex() for call in radio.calls if call[0] == "write_payload"]


def test_on_without_sockets_switches_all(radio_rig: FakeRadio) -> None:
    result = runner.invoke(cli.app, ["on"])
    assert result.exit_code == 0
    assert "Sent on to all sockets" in result.stdout
    assert _payloads(radio_rig) == ["800000008ee8ee888ee8ee888ee8ee8e"]


def test_off_specific_sockets(radio_rig: FakeRadio) -> None:
    result = runner.invoke(cli.app, ["off", "2", "3"])
    assert result.exit_code == 0
    assert "Sent off to socket(s) 2, 3" in result.stdout
    assert len(_payloads(radio_rig)) == 2


def test_invalid_socket_error_is_clean(radio_rig: FakeRadio) -> None:
    result = runner.invoke(cli.app, ["on", "7"])
    assert result.exit_code == 1
    assert "Error: Invalid socket 7" in result.stderr
    assert "Traceback" not in result.stderr
    assert _payloads(radio_rig) == []


def test_temp_command(radio_rig: FakeRadio) -> None:
    result = runner.invoke(cli.app, ["temp"])
    assert result.exit_code == 0
    assert "Temperature=21.5C" in result.stdout


def test_reset_without_reset_pin(radio_rig: FakeRadio) -> None:
    result = runner.invoke(cli.app, ["reset"])
    assert result.exit_code == 1
    assert "Error: Radio reset pin is not wired" in result.stderr


def test_rx_prints_events_until_cancelled(radio_rig: FakeRadio) -> None:
    radio_rig.payloads = [b"\x01", b"\x02"]

    result = runner.invoke(cli.app, ["rx", "--timeout", "5"])

    assert result.exit_code == 0
    assert "message:01" in result.stdout
    assert "message:02" in result.stdout


def test_rx_prints_decode_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    radio = FakeRadio([b"\xaa"])
    decoder = FakeDecoder()
    decoder.results[b"\xaa"] = ("partial", DecodeError("bad crc"))
    monkeypatch.setattr(cli, "open_driver", lambda config_path=None: MiHome(FakeGPIO(), radio, decoder))

    result = runner.invoke(cli.app, ["rx"])

    assert result.exit_code == 0
    assert "bad crc" in result.stdout


def test_rx_transport_error_is_reported(radio_rig: FakeRadio) -> None:
    radio_rig.payloads = [TransportError("spi read failed")]

    result = runner.invoke(cli.app, ["rx"])

    assert result.exit_code == 1
    assert "Error: spi read failed" in result.stderr


def test_rx_timeout_stops_blocking_radio(monkeypatch: pytest.MonkeyPatch) -> None:
    class BlockingRadio(FakeRadio):
        def read_payload(self, cancel: threading.Event) -> bytes | None:
            self.reads += 1
            if self.payloads:
                return self.payloads.pop(0)
            cancel.wait(timeout=10)
            return None

    radio = BlockingRadio([b"\x01"])
    monkeypatch.setattr(cli, "open_driver", lambda config_path=None: MiHome(FakeGPIO(), radio, FakeDecoder()))

    started = time.monotonic()
    result = runner.invoke(cli.app, ["rx", "--timeout", "0.3"])
    elapsed = time.monotonic() - started

    assert result.exit_code == 0
    assert "message:01" in result.stdout
    assert elapsed < 5


def test_rx_unexpected_radio_error_is_reported(radio_rig: FakeRadio) -> None:
    radio_rig.payloads = [OSError("spidev gone")]

    result = runner.invoke(cli.app, ["rx"])

    assert result.exit_code == 1
    assert "Error: Receive failed: spidev gone" in result.stderr


def test_help_says_one_command_per_invocation() -> None:
    result = runner.invoke(cli.app, ["--help"])
    assert result.exit_code == 0
    assert "one command per invocation" in " ".join(result.stdout.split())


def test_config_command_shows_sources(tmp_path: Path) -> None:
    config = tmp_path / "board.yaml"
    config.write_text("repeat: 4\npins:\n  reset: null\n", encoding="utf-8")

    result = runner.invoke(cli.app, ["--config", str(config), "config"])

    assert result.exit_code == 0
    assert "repeat: 4" in result.stdout
    assert "pins: reset=None led1=27 led2=22" in result.stdout
    assert str(config) in result.stdout


def test_config_command_reports_invalid_file(tmp_path: Path) -> None:
    config = tmp_path / "board.yaml"
    config.write_text("repeat: 0\n", encoding="utf-8")

    result = runner.invoke(cli.app, ["--config", str(config), "config"])

    assert result.exit_code == 1
    assert "Error: Schema validation failed" in result.stderr


def test_missing_driver_factories_reported() -> None:
    result = runner.invoke(cli.app, ["temp"])
    assert result.exit_code == 1
    assert "No gpio driver configured" in result.stderr
