"""Wake-on-LAN magic packet sender."""

from __future__ import annotations

from wakeonlan import send_magic_packet

from powermon.core.config import DEFAULT_BROADCAST, DEFAULT_WOL_PORT
from powermon.core.errors import WakeError


class MagicPacketSender:
    def __init__(self, broadcast: str = DEFAULT_BROADCAST, port: int = DEFAULT_WOL_PORT) -> None:
        self.broadcast = broadcast
        self.port = port

    def send(self, mac: str) -> None:
        try:
            send_magic_packet(mac, ip_address=self.broadcast, port=self.port)
        except (OSError, ValueError) as exc:
            raise WakeError(f"{mac} via {self.broadcast}:{self.port}: {exc}") from exc
