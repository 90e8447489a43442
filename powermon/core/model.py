"""Core data models shared by the client and server loops."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ProbeEndpoint:
    host: str
    port: int
    scheme: str = "http"

    def url(self, path: str) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"{self.scheme}://{host}:{self.port}{path}"


@dataclass(frozen=True)
class ClientIdentity:
    nickname: str
    macs: frozenset[str]

    def as_payload(self) -> dict[str, object]:
        return {"MACS": sorted(self.macs), "NickName": self.nickname}


@dataclass(frozen=True)
class Disarmed:
    pass


@dataclass(frozen=True)
class Armed:
    deadline: float


@dataclass(frozen=True)
class Expired:
    pass


TimeoutState = Disarmed | Armed | Expired


@dataclass
class WakeTarget:
    mac: str
    verified: bool = False


@dataclass(frozen=True)
class VerificationEvent:
    mac: str
    nickname: str = ""


@dataclass
class DispatchState:
    verify_mode: bool
    sent_count: int = 0
    verified_count: int = 0


@dataclass(frozen=True)
class NetworkInterface:
    name: str
    mac: str
