"""Stable public API for embedding powermon.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

from powermon.core.config import (
    ClientSettings,
    ServerSettings,
    build_client_settings,
    build_server_settings,
    canonical_mac,
    load_wake_targets,
)
from powermon.core.controller import TimeoutController
from powermon.core.dispatcher import WakeDispatcher
from powermon.core.errors import (
    ConfigurationError,
    NotificationError,
    PayloadError,
    PowermonError,
    ProbeError,
    ServerError,
    ShutdownError,
    WakeError,
)
from powermon.core.model import (
    Armed,
    ClientIdentity,
    Disarmed,
    DispatchState,
    Expired,
    ProbeEndpoint,
    VerificationEvent,
    WakeTarget,
)
from powermon.core.prober import ProbeSender
from powermon.core.service import ClientService, ServerService
from powermon.core.tracker import VerificationTracker
from powermon.transports.base import Notifier, Probe, ShutdownAction, WakePacketSender
from powermon.web import create_app

__all__ = [
    "PowermonError",
    "ConfigurationError",
    "NotificationError",
    "PayloadError",
    "ProbeError",
    "ServerError",
    "ShutdownError",
    "WakeError",
    "Armed",
    "ClientIdentity",
    "Disarmed",
    "DispatchState",
    "Expired",
    "ProbeEndpoint",
    "VerificationEvent",
    "WakeTarget",
    "ClientSettings",
    "ServerSettings",
    "build_client_settings",
    "build_server_settings",
    "canonical_mac",
    "load_wake_targets",
    "Notifier",
    "Probe",
    "ShutdownAction",
    "WakePacketSender",
    "TimeoutController",
    "ProbeSender",
    "WakeDispatcher",
    "VerificationTracker",
    "ClientService",
    "ServerService",
    "create_app",
]
