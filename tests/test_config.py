from __future__ import annotations

import socket
from pathlib import Path

import pytest

from powermon.core.config import (
    build_client_settings,
    build_server_settings,
    canonical_mac,
    load_wake_targets,
    resolve_endpoint,
)
from powermon.core.errors import ConfigurationError


@pytest.mark.parametrize(
    "value",
    [
        "aa:bb:cc:dd:ee:ff",
        "AA-BB-CC-DD-EE-FF",
        "aabb.ccdd.eeff",
        "aabbccddeeff",
        "  AA:BB:CC:DD:EE:FF\t",
    ],
)
def test_canonical_mac_accepts_common_forms(value: str) -> None:
    assert canonical_mac(value) == "AA:BB:CC:DD:EE:FF"


@pytest.mark.parametrize("value", ["not-a-mac", "aa:bb:cc:dd:ee", "aa:bb-cc:dd:ee:ff", "gg:bb:cc:dd:ee:ff", ""])
def test_canonical_mac_rejects_garbage(value: str) -> None:
    with pytest.raises(ValueError):
        canonical_mac(value)


def test_wakelist_skips_comments_and_dedupes(tmp_path: Path) -> None:
    wakelist = tmp_path / "wake.txt"
    wakelist.write_text(
        "# office machines\n"
        "\n"
        "  aa:aa:aa:aa:aa:aa  \n"
        "BB-BB-BB-BB-BB-BB\n"
        "\t# trailing comment\n"
        "AA:AA:AA:AA:AA:AA\n",
        encoding="utf-8",
    )

    targets = load_wake_targets(["bb:bb:bb:bb:bb:bb", "CC:CC:CC:CC:CC:CC"], wakelist)
    assert targets == ("BB:BB:BB:BB:BB:BB", "CC:CC:CC:CC:CC:CC", "AA:AA:AA:AA:AA:AA")


def test_malformed_wakelist_entry_names_the_line(tmp_path: Path) -> None:
    wakelist = tmp_path / "wake.txt"
    wakelist.write_text("AA:AA:AA:AA:AA:AA\n# ok\nnot-a-mac\n", encoding="utf-8")

    with pytest.raises(ConfigurationError) as exc:
        load_wake_targets((), wakelist)

    assert "not-a-mac" in str(exc.value)
    assert "line 3" in str(exc.value)


def test_missing_wakelist_is_configuration_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        load_wake_targets((), tmp_path / "missing.txt")


def test_malformed_inline_target_is_rejected() -> None:
    with pytest.raises(ConfigurationError):
        build_server_settings(wake=["AA:AA:AA:AA:AA:AA", "zz"])


@pytest.mark.parametrize("port", [0, 65536, -1])
def test_invalid_port_rejected(port: int) -> None:
    with pytest.raises(ConfigurationError):
        resolve_endpoint("127.0.0.1", port)
    with pytest.raises(ConfigurationError):
        build_server_settings(port=port)


def test_unresolvable_host_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_getaddrinfo(*args, **kwargs):
        raise socket.gaierror(-2, "Name or service not known")

    monkeypatch.setattr(socket, "getaddrinfo", fake_getaddrinfo)
    with pytest.raises(ConfigurationError) as exc:
        resolve_endpoint("no-such-host.invalid", 10101)
    assert "no-such-host.invalid" in str(exc.value)


def test_client_settings_defaults_and_scheme() -> None:
    settings = build_client_settings("127.0.0.1", secure=True, on_timeout="/usr/local/bin/park --now")
    assert settings.endpoint.url("/status") == "https://127.0.0.1:10101/status"
    assert settings.timeout_s == 60.0
    assert settings.interval_s == 60.0
    assert settings.retry_interval_s == 3.0
    assert settings.probe_timeout_s == 2.0
    assert settings.on_timeout == ("/usr/local/bin/park", "--now")


def test_client_settings_rejects_non_positive_timeout() -> None:
    with pytest.raises(ConfigurationError):
        build_client_settings("127.0.0.1", timeout_s=0)


def test_server_settings_defaults() -> None:
    settings = build_server_settings(wake=["aa:aa:aa:aa:aa:aa"], verify=True)
    assert settings.targets == ("AA:AA:AA:AA:AA:AA",)
    assert settings.tick_interval_s == 15.0
    assert settings.attempt_budget == 10
    assert settings.scheme == "http"


def test_server_tls_needs_both_files(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        build_server_settings(certfile=tmp_path / "cert.pem")


def test_ipv6_endpoint_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(socket, "getaddrinfo", lambda *args, **kwargs: [(socket.AF_INET6, socket.SOCK_STREAM, 6, "", ("::1", 8080, 0, 0))])
    settings = build_client_settings("::1", port=8080)
    assert settings.endpoint.url("/status") == "http://[::1]:8080/status"
