"""Option normalization and validation for client and server runs."""

from __future__ import annotations

import logging
import re
import shlex
import socket
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

from powermon.core.errors import ConfigurationError
from powermon.core.model import ProbeEndpoint

DEFAULT_PORT = 10101
DEFAULT_TIMEOUT_S = 60.0
DEFAULT_INTERVAL_S = 60.0
DEFAULT_RETRY_INTERVAL_S = 3.0
DEFAULT_PROBE_TIMEOUT_S = 2.0
DEFAULT_TICK_INTERVAL_S = 15.0
DEFAULT_ATTEMPT_BUDGET = 10
DEFAULT_BROADCAST = "255.255.255.255"
DEFAULT_WOL_PORT = 9

_HEX_RE = re.compile(r"^[0-9A-F]{12}$")
_SEPARATED_RE = re.compile(r"^[0-9A-F]{2}([:-])[0-9A-F]{2}(\1[0-9A-F]{2}){4}$")
_DOTTED_RE = re.compile(r"^[0-9A-F]{4}\.[0-9A-F]{4}\.[0-9A-F]{4}$")
LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClientSettings:
    endpoint: ProbeEndpoint
    timeout_s: float = DEFAULT_TIMEOUT_S
    interval_s: float = DEFAULT_INTERVAL_S
    retry_interval_s: float = DEFAULT_RETRY_INTERVAL_S
    probe_timeout_s: float = DEFAULT_PROBE_TIMEOUT_S
    report_identity: bool = True
    on_timeout: tuple[str, ...] | None = None
    sudo: bool = False


@dataclass(frozen=True)
class ServerSettings:
    port: int = DEFAULT_PORT
    host: str = "0.0.0.0"
    targets: tuple[str, ...] = ()
    verify: bool = False
    tick_interval_s: float = DEFAULT_TICK_INTERVAL_S
    attempt_budget: int = DEFAULT_ATTEMPT_BUDGET
    broadcast: str = DEFAULT_BROADCAST
    wol_port: int = DEFAULT_WOL_PORT
    certfile: Path | None = None
    keyfile: Path | None = None

    @property
    def scheme(self) -> str:
        return "https" if self.certfile else "http"


def canonical_mac(value: str) -> str:
    """Return ``value`` as six upper-case octets joined by colons.

    Accepts colon- or dash-separated octets, Cisco-style dotted groups, or a
    bare run of twelve hex digits. Raises ``ValueError`` for anything else.
    """
    candidate = value.strip().upper()
    if _SEPARATED_RE.match(candidate) or _DOTTED_RE.match(candidate):
        digits = re.sub(r"[:.\-]", "", candidate)
    elif _HEX_RE.match(candidate):
        digits = candidate
    else:
        raise ValueError(f"invalid MAC address '{value}'")
    return ":".join(digits[i : i + 2] for i in range(0, 12, 2))


def validate_port(port: int, *, option: str = "port") -> int:
    if port < 1 or port > 65535:
        raise ConfigurationError(f"Invalid {option} {port}: must be between 1 and 65535")
    return port


def validate_positive(value: float, *, option: str) -> float:
    if value <= 0:
        raise ConfigurationError(f"Invalid {option} {value}: must be greater than zero")
    return value


def resolve_endpoint(host: str, port: int, *, secure: bool = False) -> ProbeEndpoint:
    host = host.strip()
    if not host:
        raise ConfigurationError("Server address must not be empty")
    validate_port(port)
    try:
        resolved = socket.getaddrinfo(host, port, type=socket.SOCK_STREAM)
    except (socket.gaierror, UnicodeError) as exc:
        raise ConfigurationError(f"Specified host '{host}' does not resolve: {exc}") from exc
    if not resolved:
        raise ConfigurationError(f"Specified host '{host}' does not resolve to any address")
    return ProbeEndpoint(host=host, port=port, scheme="https" if secure else "http")


def _read_wakelist(path: Path) -> list[str]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Could not read wakelist file {path}: {exc}") from exc

    macs: list[str] = []
    for line_no, raw in enumerate(content.splitlines(), start=1):
        line = raw.strip(" \t")
        if not line or line.startswith("#"):
            continue
        try:
            macs.append(canonical_mac(line))
        except ValueError:
            raise ConfigurationError(
                f"Invalid MAC address '{line}' on line {line_no} of wakelist file {path}"
            ) from None
    return macs


def load_wake_targets(inline: Iterable[str] = (), wakelist: Path | None = None) -> tuple[str, ...]:
    """Merge inline and file-sourced targets, deduplicated by canonical MAC."""
    ordered: dict[str, None] = {}
    for value in inline:
        try:
            ordered[canonical_mac(value)] = None
        except ValueError:
            raise ConfigurationError(f"Invalid MAC address '{value}' passed to --wake") from None

    if wakelist is not None:
        for mac in _read_wakelist(wakelist):
            ordered[mac] = None

    return tuple(ordered)


def parse_command(command: str | None) -> tuple[str, ...] | None:
    if command is None:
        return None
    try:
        parts = tuple(shlex.split(command))
    except ValueError as exc:
        raise ConfigurationError(f"Could not parse timeout command '{command}': {exc}") from exc
    if not parts:
        raise ConfigurationError("Timeout command must not be empty")
    return parts


def build_client_settings(
    host: str,
    *,
    port: int = DEFAULT_PORT,
    secure: bool = False,
    timeout_s: float = DEFAULT_TIMEOUT_S,
    interval_s: float = DEFAULT_INTERVAL_S,
    retry_interval_s: float = DEFAULT_RETRY_INTERVAL_S,
    probe_timeout_s: float = DEFAULT_PROBE_TIMEOUT_S,
    report_identity: bool = True,
    on_timeout: str | None = None,
    sudo: bool = False,
) -> ClientSettings:
    endpoint = resolve_endpoint(host, port, secure=secure)
    return ClientSettings(
        endpoint=endpoint,
        timeout_s=validate_positive(timeout_s, option="timeout"),
        interval_s=validate_positive(interval_s, option="interval"),
        retry_interval_s=validate_positive(retry_interval_s, option="retry interval"),
        probe_timeout_s=validate_positive(probe_timeout_s, option="probe timeout"),
        report_identity=report_identity,
        on_timeout=parse_command(on_timeout),
        sudo=sudo,
    )


def build_server_settings(
    *,
    port: int = DEFAULT_PORT,
    host: str = "0.0.0.0",
    wake: Sequence[str] = (),
    wakelist: Path | None = None,
    verify: bool = False,
    tick_interval_s: float = DEFAULT_TICK_INTERVAL_S,
    attempt_budget: int = DEFAULT_ATTEMPT_BUDGET,
    broadcast: str = DEFAULT_BROADCAST,
    wol_port: int = DEFAULT_WOL_PORT,
    certfile: Path | None = None,
    keyfile: Path | None = None,
) -> ServerSettings:
    validate_port(port)
    validate_port(wol_port, option="wake-on-LAN port")
    if attempt_budget < 1:
        raise ConfigurationError(f"Invalid attempt budget {attempt_budget}: must be at least 1")
    if (certfile is None) != (keyfile is None):
        raise ConfigurationError("TLS requires both --certfile and --keyfile")

    targets = load_wake_targets(wake, wakelist)
    if verify and not targets:
        LOGGER.warning("Verify mode enabled without any wake targets")

    return ServerSettings(
        port=port,
        host=host,
        targets=targets,
        verify=verify,
        tick_interval_s=validate_positive(tick_interval_s, option="tick interval"),
        attempt_budget=attempt_budget,
        broadcast=broadcast,
        wol_port=wol_port,
        certfile=certfile,
        keyfile=keyfile,
    )
