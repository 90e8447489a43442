"""Service layer used by the CLI to run the client and server roles."""

from __future__ import annotations

import asyncio
import contextlib
import logging

import uvicorn

from powermon.core.config import ClientSettings, ServerSettings
from powermon.core.controller import TimeoutController
from powermon.core.dispatcher import WakeDispatcher
from powermon.core.errors import ServerError
from powermon.core.model import ClientIdentity
from powermon.core.prober import ProbeSender
from powermon.core.tracker import VerificationTracker
from powermon.transports.base import Notifier, Probe, ShutdownAction, WakePacketSender, notify_quietly
from powermon.transports.http_probe import HTTPProbe
from powermon.transports.interfaces import enumerate_local_hardware_addresses
from powermon.transports.power import SystemShutdown
from powermon.transports.wol import MagicPacketSender
from powermon.web import create_app

LOGGER = logging.getLogger(__name__)
NOTIFY_FLUSH_TIMEOUT_S = 15.0


def load_client_identity(nickname: str) -> ClientIdentity:
    try:
        macs = enumerate_local_hardware_addresses()
    except OSError as exc:
        LOGGER.error("Failed to get mac addresses for interfaces: %s", exc)
        macs = frozenset()
    return ClientIdentity(nickname=nickname, macs=macs)


class ClientService:
    """Runs the probe sender and timeout controller until the timeout fires."""

    def __init__(
        self,
        settings: ClientSettings,
        *,
        notifier: Notifier,
        nickname: str = "",
        probe: Probe | None = None,
        shutdown: ShutdownAction | None = None,
        identity: ClientIdentity | None = None,
    ) -> None:
        self.settings = settings
        self.notifier = notifier
        if identity is None and settings.report_identity:
            identity = load_client_identity(nickname)
        self.identity = identity
        self._probe = probe
        self.shutdown = shutdown or SystemShutdown(settings.on_timeout, sudo=settings.sudo)

    async def run(self) -> None:
        settings = self.settings
        probe = self._probe or HTTPProbe(
            settings.endpoint,
            identity=self.identity,
            timeout_s=settings.probe_timeout_s,
        )
        outcomes: asyncio.Queue[bool] = asyncio.Queue(maxsize=1)
        controller = TimeoutController(
            settings.timeout_s,
            shutdown=self.shutdown,
            notifier=self.notifier,
        )
        sender = ProbeSender(
            probe,
            outcomes,
            controller.stop,
            interval_s=settings.interval_s,
            retry_interval_s=settings.retry_interval_s,
        )

        LOGGER.info(
            "Monitoring %s every %.0fs, shutdown after %.0fs without a reply",
            settings.endpoint.url("/status"),
            settings.interval_s,
            settings.timeout_s,
        )
        sender_task = asyncio.create_task(sender.run())
        try:
            await controller.run(outcomes)
        finally:
            controller.stop.set()
            await sender_task
            if self._probe is None:
                await probe.aclose()

    def run_until_timeout(self) -> None:
        try:
            asyncio.run(self.run())
        finally:
            self.notifier.flush(NOTIFY_FLUSH_TIMEOUT_S)


class ServerService:
    """Serves the probe protocol and runs the wake dispatcher beside it."""

    def __init__(
        self,
        settings: ServerSettings,
        *,
        notifier: Notifier,
        sender: WakePacketSender | None = None,
    ) -> None:
        self.settings = settings
        self.notifier = notifier
        self.sender = sender or MagicPacketSender(settings.broadcast, settings.wol_port)

    def build_dispatcher(self) -> WakeDispatcher:
        settings = self.settings
        return WakeDispatcher(
            settings.targets,
            sender=self.sender,
            notifier=self.notifier,
            verify_mode=settings.verify,
            tick_interval_s=settings.tick_interval_s,
            attempt_budget=settings.attempt_budget,
        )

    def build_server(self, tracker: VerificationTracker) -> uvicorn.Server:
        settings = self.settings
        config = uvicorn.Config(
            create_app(tracker),
            host=settings.host,
            port=settings.port,
            log_config=None,
            ssl_certfile=str(settings.certfile) if settings.certfile else None,
            ssl_keyfile=str(settings.keyfile) if settings.keyfile else None,
        )
        return uvicorn.Server(config)

    async def run(self) -> None:
        dispatcher = self.build_dispatcher()
        server = self.build_server(VerificationTracker(dispatcher))
        dispatch_task = asyncio.create_task(dispatcher.run())

        LOGGER.info("Listening on port %d", self.settings.port)
        notify_quietly(self.notifier, f"Server started, listening on port {self.settings.port}")
        try:
            try:
                await server.serve()
            except (OSError, SystemExit) as exc:
                # uvicorn exits the process when it cannot bind.
                raise ServerError(f"Could not serve on port {self.settings.port}: {exc}") from exc
            if not server.started:
                raise ServerError(f"Could not serve on port {self.settings.port}")
        except ServerError as exc:
            notify_quietly(self.notifier, f"Error starting powermon server: {exc}")
            raise
        finally:
            dispatch_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await dispatch_task

    def serve_forever(self) -> None:
        try:
            asyncio.run(self.run())
        finally:
            self.notifier.flush(NOTIFY_FLUSH_TIMEOUT_S)
