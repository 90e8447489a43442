"""Typer CLI entrypoint."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import typer

from powermon.core.config import (
    DEFAULT_ATTEMPT_BUDGET,
    DEFAULT_BROADCAST,
    DEFAULT_INTERVAL_S,
    DEFAULT_PORT,
    DEFAULT_PROBE_TIMEOUT_S,
    DEFAULT_RETRY_INTERVAL_S,
    DEFAULT_TICK_INTERVAL_S,
    DEFAULT_TIMEOUT_S,
    DEFAULT_WOL_PORT,
    build_client_settings,
    build_server_settings,
    canonical_mac,
    resolve_endpoint,
)
from powermon.core.errors import PowermonError
from powermon.core.logs import configure_logging
from powermon.core.service import ClientService, ServerService
from powermon.transports.base import Notifier
from powermon.transports.http_probe import report_verification
from powermon.transports.interfaces import enumerate_local_hardware_addresses, list_interfaces
from powermon.transports.pushover import build_notifier

app = typer.Typer(help="Shut down hosts when the server goes silent, and wake them when it returns")


@dataclass
class GlobalOptions:
    verbose: bool = False
    logfile: Path | None = None
    pushover_token: str | None = None
    user_tokens: list[str] = field(default_factory=list)
    nickname: str = ""


def _options(ctx: typer.Context) -> GlobalOptions:
    return ctx.obj if isinstance(ctx.obj, GlobalOptions) else GlobalOptions()


def _init(ctx: typer.Context) -> Notifier:
    options = _options(ctx)
    configure_logging(options.verbose, options.logfile)
    return build_notifier(options.pushover_token, options.user_tokens, nickname=options.nickname)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    logfile: Path | None = typer.Option(None, "--logfile", "-l", envvar="POWERMON_LOGFILE", help="Log file"),
    pushover_token: str | None = typer.Option(
        None,
        "--pushover-token",
        "-k",
        envvar="POWERMON_PUSHOVER_TOKEN",
        help="API token to use for pushover notifications.",
    ),
    user_tokens: list[str] = typer.Option(
        [],
        "--user-token",
        "-u",
        envvar="POWERMON_USER_TOKENS",
        help="User token to send notifications to. Repeatable.",
    ),
    nickname: str = typer.Option(
        "", "--nickname", "-n", envvar="POWERMON_NICKNAME", help="Nickname in notifications and reports."
    ),
) -> None:
    ctx.obj = GlobalOptions(
        verbose=verbose,
        logfile=logfile,
        pushover_token=pushover_token,
        user_tokens=list(user_tokens),
        nickname=nickname,
    )


@app.command("client")
def client(
    ctx: typer.Context,
    host: str = typer.Option(..., "--host", "-a", help="Address of server. Can be an IP or a hostname"),
    port: int = typer.Option(DEFAULT_PORT, "--port", "-p", help="Port to connect to"),
    timeout: float = typer.Option(
        DEFAULT_TIMEOUT_S,
        "--timeout",
        "-t",
        help="Shut down (or run --on-timeout) X seconds after failing to reach the server",
    ),
    interval: float = typer.Option(DEFAULT_INTERVAL_S, "--interval", "-i", help="Check if server is up every X seconds"),
    retry_interval: float = typer.Option(
        DEFAULT_RETRY_INTERVAL_S, "--retry-interval", help="Seconds between probes while the server is failing"
    ),
    probe_timeout: float = typer.Option(
        DEFAULT_PROBE_TIMEOUT_S, "--probe-timeout", help="Network timeout for a single probe"
    ),
    https: bool = typer.Option(False, "--https", help="Probe the server over TLS"),
    report_identity: bool = typer.Option(
        True,
        "--report-identity/--no-report-identity",
        help="Send nickname and MAC addresses with every probe",
    ),
    on_timeout: str | None = typer.Option(
        None, "--on-timeout", help="Command to run instead of shutting down"
    ),
    sudo: bool = typer.Option(False, "--sudo", help="Run the shutdown command through sudo"),
) -> None:
    """Probe the server and shut down after it stays silent for the timeout."""
    try:
        notifier = _init(ctx)
        settings = build_client_settings(
            host,
            port=port,
            secure=https,
            timeout_s=timeout,
            interval_s=interval,
            retry_interval_s=retry_interval,
            probe_timeout_s=probe_timeout,
            report_identity=report_identity,
            on_timeout=on_timeout,
            sudo=sudo,
        )
        service = ClientService(settings, notifier=notifier, nickname=_options(ctx).nickname)
        service.run_until_timeout()
    except PowermonError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None
    except KeyboardInterrupt:
        typer.echo("Interrupted, timeout cancelled", err=True)
        raise typer.Exit(code=130) from None


@app.command("server")
def server(
    ctx: typer.Context,
    port: int = typer.Option(DEFAULT_PORT, "--port", "-p", help="Port to listen on"),
    host: str = typer.Option("0.0.0.0", "--host", help="Address to bind"),
    wake: list[str] = typer.Option(
        [], "--wake", "-w", help="MAC address to send WOL packets to when the server starts. Repeatable."
    ),
    wakelist: Path | None = typer.Option(
        None, "--wakelist", help="File with newline-separated MAC addresses to wake on start"
    ),
    verify: bool = typer.Option(
        False, "--verify", help="Send WOL packets until the hosts verify that they are back online"
    ),
    tick_interval: float = typer.Option(
        DEFAULT_TICK_INTERVAL_S, "--tick-interval", help="Seconds between WOL broadcasts"
    ),
    attempts: int = typer.Option(
        DEFAULT_ATTEMPT_BUDGET, "--attempts", help="WOL broadcasts to send when not verifying"
    ),
    broadcast: str = typer.Option(DEFAULT_BROADCAST, "--broadcast", help="Broadcast address for WOL packets"),
    wol_port: int = typer.Option(DEFAULT_WOL_PORT, "--wol-port", help="UDP port for WOL packets"),
    certfile: Path | None = typer.Option(None, "--certfile", help="TLS certificate for serving https"),
    keyfile: Path | None = typer.Option(None, "--keyfile", help="TLS private key for serving https"),
) -> None:
    """Answer client probes and wake the configured hosts."""
    try:
        notifier = _init(ctx)
        settings = build_server_settings(
            port=port,
            host=host,
            wake=wake,
            wakelist=wakelist,
            verify=verify,
            tick_interval_s=tick_interval,
            attempt_budget=attempts,
            broadcast=broadcast,
            wol_port=wol_port,
            certfile=certfile,
            keyfile=keyfile,
        )
        service = ServerService(settings, notifier=notifier)
        service.serve_forever()
    except PowermonError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("verify")
def verify(
    ctx: typer.Context,
    host: str = typer.Option(..., "--host", "-a", help="Address of server. Can be an IP or a hostname"),
    port: int = typer.Option(DEFAULT_PORT, "--port", "-p", help="Port to connect to"),
    https: bool = typer.Option(False, "--https", help="Report over TLS"),
    mac: list[str] = typer.Option(
        [], "--mac", "-m", help="MAC address to report. Defaults to every local interface."
    ),
) -> None:
    """Tell the server this host is back online."""
    try:
        _init(ctx)
        endpoint = resolve_endpoint(host, port, secure=https)
        try:
            macs = [canonical_mac(m) for m in mac] if mac else sorted(enumerate_local_hardware_addresses())
        except ValueError as exc:
            typer.echo(f"Error: {exc}", err=True)
            raise typer.Exit(code=1) from None
        if not macs:
            typer.echo("No MAC addresses to report", err=True)
            raise typer.Exit(code=1)
        accepted = report_verification(endpoint, macs, nickname=_options(ctx).nickname)
        typer.echo(f"Reported {', '.join(macs)} to {endpoint.host}:{endpoint.port} ({accepted} accepted)")
    except PowermonError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("mac")
def mac() -> None:
    """List network interfaces and their MAC addresses."""
    interfaces = list_interfaces()
    if not interfaces:
        typer.echo("No network interfaces with a MAC address found")
        return
    for interface in interfaces:
        typer.echo(f"Interface: {interface.name}\nMAC: {interface.mac}\n")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
