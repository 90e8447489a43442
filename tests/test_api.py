from __future__ import annotations

from powermon import api
from powermon.core.errors import ConfigurationError, PowermonError


def test_public_api_exports_resolve() -> None:
    for name in api.__all__:
        assert getattr(api, name) is not None


def test_public_errors_share_base() -> None:
    assert issubclass(api.ConfigurationError, PowermonError)
    assert api.ConfigurationError is ConfigurationError
    for name in ("ProbeError", "ShutdownError", "NotificationError", "WakeError", "PayloadError", "ServerError"):
        assert issubclass(getattr(api, name), api.PowermonError)


def test_public_settings_builders() -> None:
    settings = api.build_server_settings(wake=["aa:aa:aa:aa:aa:aa"])
    assert isinstance(settings, api.ServerSettings)
    assert api.load_wake_targets(["aa-aa-aa-aa-aa-aa"]) == ("AA:AA:AA:AA:AA:AA",)
