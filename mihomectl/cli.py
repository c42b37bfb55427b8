"""Typer CLI entrypoint."""

from __future__ import annotations

import logging
import threading
from pathlib import Path

import typer

from mihomectl.api import open_driver
from mihomectl.core.config_loader import load_config
from mihomectl.core.errors import MihomeError, TransportError
from mihomectl.core.model import ReceivedEvent
from mihomectl.core.service import MiHome

app = typer.Typer(
    help="Energenie MiHome control and monitoring over an RFM69 radio. Run one command per invocation."
)


@app.callback()
def main(
    ctx: typer.Context,
    config: Path | None = typer.Option(None, "--config", help="Path to a YAML config file"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = {"config": config}


def _build_driver(ctx: typer.Context) -> MiHome:
    return open_driver(ctx.obj["config"] if ctx.obj else None)


def _format_event(event: ReceivedEvent) -> str:
    ts = event.timestamp.strftime("%b %d %H:%M:%S")
    if event.failure is not None:
        return f"{ts:<20} {event.failure}"
    return f"{ts:<20} {event.message}"


@app.command("reset")
def reset(ctx: typer.Context) -> None:
    """Reset the radio module."""
    try:
        with _build_driver(ctx) as driver:
            driver.reset_radio()
        typer.echo("Radio reset")
    except MihomeError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("temp")
def temperature(ctx: typer.Context) -> None:
    """Measure the transceiver temperature."""
    try:
        with _build_driver(ctx) as driver:
            value = driver.measure_temperature()
        typer.echo(f"Temperature={value}C")
    except MihomeError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("on")
def switch_on(
    ctx: typer.Context,
    sockets: list[int] | None = typer.Argument(None, help="Socket numbers 1-4, all when omitted"),
) -> None:
    """Switch legacy sockets on."""
    try:
        with _build_driver(ctx) as driver:
            driver.on(*(sockets or ()))
        typer.echo(f"Sent on to {_describe_sockets(sockets)}")
    except MihomeError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("off")
def switch_off(
    ctx: typer.Context,
    sockets: list[int] | None = typer.Argument(None, help="Socket numbers 1-4, all when omitted"),
) -> None:
    """Switch legacy sockets off."""
    try:
        with _build_driver(ctx) as driver:
            driver.off(*(sockets or ()))
        typer.echo(f"Sent off to {_describe_sockets(sockets)}")
    except MihomeError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def _describe_sockets(sockets: list[int] | None) -> str:
    if not sockets:
        return "all sockets"
    return "socket(s) " + ", ".join(str(s) for s in sockets)


@app.command("rx")
def receive(
    ctx: typer.Context,
    timeout: float = typer.Option(0.0, "--timeout", help="Seconds to listen, 0 listens until interrupted"),
) -> None:
    """Receive and print sensor telemetry."""
    try:
        with _build_driver(ctx) as driver:
            _receive_and_print(driver, timeout)
    except MihomeError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def _receive_and_print(driver: MiHome, timeout: float) -> None:
    cancel = threading.Event()
    subscription = driver.subscribe()
    errors: list[Exception] = []

    def _run() -> None:
        try:
            driver.receive(cancel)
        except Exception as exc:
            errors.append(exc)
        finally:
            driver.unsubscribe(subscription)

    worker = threading.Thread(target=_run, name="mihomectl-rx", daemon=True)
    timer = threading.Timer(timeout, cancel.set) if timeout > 0 else None
    worker.start()
    if timer is not None:
        timer.start()

    typer.echo(f"{'Timestamp':<20} Message")
    typer.echo(f"{'-' * 20} {'-' * 20}")
    try:
        for event in subscription:
            typer.echo(_format_event(event))
    except KeyboardInterrupt:
        pass
    finally:
        cancel.set()
        if timer is not None:
            timer.cancel()
        worker.join()

    if errors:
        error = errors[0]
        if isinstance(error, MihomeError):
            raise error
        raise TransportError(f"Receive failed: {error}") from error


@app.command("config")
def show_config(ctx: typer.Context) -> None:
    """Print the effective configuration and where it came from."""
    try:
        loaded = load_config(ctx.obj["config"] if ctx.obj else None)
    except MihomeError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None

    for warning in loaded.warnings:
        typer.echo(f"Warning: {warning}", err=True)
    config = loaded.config
    typer.echo(f"cid: {config.cid}")
    typer.echo(f"repeat: {config.repeat}")
    typer.echo(f"temp_offset: {config.temp_offset}")
    typer.echo(f"pins: reset={config.reset_pin} led1={config.led1_pin} led2={config.led2_pin}")
    typer.echo(f"events: queue_size={config.queue_size}")
    drivers = loaded.drivers
    typer.echo(f"drivers: gpio={drivers.gpio} radio={drivers.radio} decoder={drivers.decoder}")
    typer.echo("sources:")
    for source in loaded.sources:
        typer.echo(f"  {source}")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
