"""powermon server HTTP surface.

Exposes:
  POST /status   -- liveness probe; an optional JSON body reports client identity
  GET  /status   -- bare liveness probe
  POST /verify   -- form-encoded ``mac`` fields reporting hosts back online
"""

from __future__ import annotations

import json
import logging

from fastapi import BackgroundTasks, FastAPI, HTTPException, Request
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from powermon.core.config import canonical_mac
from powermon.core.errors import PayloadError
from powermon.core.tracker import VerificationTracker

LOGGER = logging.getLogger(__name__)


class ClientReport(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    macs: list[str] = Field(default_factory=list, alias="MACS")
    nickname: str = Field(default="", alias="NickName")


def parse_client_report(body: bytes) -> ClientReport | None:
    """Decode a ``/status`` body; an empty body is a bare liveness check."""
    if not body.strip():
        return None
    try:
        raw = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise PayloadError(f"Invalid JSON body: {exc}") from exc
    if raw is None:
        return None
    try:
        return ClientReport.model_validate(raw)
    except ValidationError as exc:
        raise PayloadError(f"Invalid client report: {exc.errors()[0]['msg']}") from exc


def parse_verify_form(values: list[str]) -> list[str]:
    macs: list[str] = []
    for value in values:
        for item in value.split(","):
            if not item.strip():
                continue
            try:
                macs.append(canonical_mac(item))
            except ValueError as exc:
                raise PayloadError(str(exc)) from exc
    if not macs:
        raise PayloadError("At least one 'mac' field is required")
    return macs


def _usable_macs(report: ClientReport) -> list[str]:
    macs: list[str] = []
    for value in report.macs:
        try:
            macs.append(canonical_mac(value))
        except ValueError:
            LOGGER.debug("Skipping unusable address %r from [%s]", value, report.nickname)
    return macs


def create_app(tracker: VerificationTracker) -> FastAPI:
    app = FastAPI(title="powermon", docs_url=None, redoc_url=None, openapi_url=None)

    @app.api_route("/status", methods=["GET", "POST"], response_class=PlainTextResponse)
    async def status(request: Request, background: BackgroundTasks) -> str:
        try:
            report = parse_client_report(await request.body())
        except PayloadError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        client = request.client.host if request.client else "unknown"
        if report is None:
            LOGGER.info("Received ping from %s", client)
        else:
            LOGGER.info("Received ping from [%s] at ip %s", report.nickname, client)
            if tracker.accepting:
                # Answer the probe first; the events follow once the response is out.
                background.add_task(tracker.report, _usable_macs(report), report.nickname)
        return "Status okay.\n"

    @app.post("/verify")
    async def verify(request: Request) -> dict[str, int]:
        form = await request.form()
        try:
            macs = parse_verify_form([str(v) for v in form.getlist("mac")])
        except PayloadError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        nickname = str(form.get("nickname") or "")
        accepted = await tracker.report(macs, nickname) if tracker.accepting else 0
        LOGGER.info("Received verification report from [%s] for %s", nickname, ", ".join(macs))
        return {"accepted": accepted}

    return app
