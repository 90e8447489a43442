"""HTTP implementation of the probe protocol, client side."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

import httpx

from powermon.core.config import DEFAULT_PROBE_TIMEOUT_S
from powermon.core.errors import ProbeError
from powermon.core.model import ClientIdentity, ProbeEndpoint

STATUS_PATH = "/status"
VERIFY_PATH = "/verify"
LOGGER = logging.getLogger(__name__)


class HTTPProbe:
    """POSTs to ``/status``; only a 200 answer counts as alive.

    With an identity the request carries ``{"MACS": [...], "NickName": ...}``
    so the server can treat the probe as a verification report.
    """

    def __init__(
        self,
        endpoint: ProbeEndpoint,
        *,
        identity: ClientIdentity | None = None,
        timeout_s: float = DEFAULT_PROBE_TIMEOUT_S,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.identity = identity
        self.timeout_s = timeout_s
        self._client = httpx.AsyncClient(timeout=timeout_s, transport=transport)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HTTPProbe":
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()

    async def check(self) -> None:
        url = self.endpoint.url(STATUS_PATH)
        payload = self.identity.as_payload() if self.identity else None
        try:
            async with asyncio.timeout(self.timeout_s):
                resp = await self._client.post(url, json=payload)
        except TimeoutError as exc:
            raise ProbeError(f"{url}: no answer within {self.timeout_s:g}s") from exc
        except httpx.HTTPError as exc:
            raise ProbeError(f"{url}: {str(exc) or type(exc).__name__}") from exc
        if resp.status_code != httpx.codes.OK:
            raise ProbeError(f"{url}: non 200 status code received ({resp.status_code})")


def report_verification(
    endpoint: ProbeEndpoint,
    macs: Iterable[str],
    *,
    nickname: str = "",
    timeout_s: float = DEFAULT_PROBE_TIMEOUT_S,
    transport: httpx.BaseTransport | None = None,
) -> int:
    """Send a one-shot ``/verify`` report and return the accepted count."""
    data: dict[str, object] = {"mac": list(macs)}
    if nickname:
        data["nickname"] = nickname
    url = endpoint.url(VERIFY_PATH)
    try:
        with httpx.Client(timeout=timeout_s, transport=transport) as client:
            resp = client.post(url, data=data)
    except httpx.HTTPError as exc:
        raise ProbeError(f"{url}: {str(exc) or type(exc).__name__}") from exc
    if resp.status_code != httpx.codes.OK:
        raise ProbeError(f"{url}: verification rejected ({resp.status_code}): {resp.text.strip()}")
    return int(resp.json().get("accepted", 0))
