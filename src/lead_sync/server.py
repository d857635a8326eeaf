"""
HTTP entrypoint for Lead Sync.

Endpoints:
    POST /sync   Run a sync and return the run report
    POST /debug  Probe both APIs with a small request

Credentials come from the JSON body (``amplemarketToken``,
``instantlyToken``) and fall back to the configured settings.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable

from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from lead_sync import __version__
from lead_sync.config import Settings
from lead_sync.core.engine import RunReport
from lead_sync.errors import LeadSyncError
from lead_sync.service import run_probe, run_sync
from lead_sync.utils.logger import get_logger

logger = get_logger(__name__)

SyncRunner = Callable[[Settings], Awaitable[RunReport]]
ProbeRunner = Callable[[Settings, str | None], Awaitable[dict[str, Any]]]


class SyncRequest(BaseModel):
    """Request body for /sync and /debug."""

    amplemarketToken: str | None = None
    instantlyToken: str | None = None
    action: str | None = None


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def create_app(
    settings: Settings | None = None,
    sync_runner: SyncRunner | None = None,
    probe_runner: ProbeRunner | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Base settings (defaults to environment)
        sync_runner: Coroutine running a sync (defaults to service.run_sync)
        probe_runner: Coroutine running the probe (defaults to service.run_probe)
    """
    base_settings = settings or Settings()
    do_sync: SyncRunner = sync_runner or run_sync
    do_probe: ProbeRunner = probe_runner or run_probe

    application = FastAPI(title="Lead Sync API", version=__version__)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["POST", "GET", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    def resolve(body: SyncRequest | None) -> Settings:
        body = body or SyncRequest()
        return base_settings.with_credentials(
            amplemarket_token=body.amplemarketToken,
            instantly_token=body.instantlyToken,
        )

    @application.post("/sync")
    async def sync(body: SyncRequest | None = None) -> JSONResponse:
        request_settings = resolve(body)
        if request_settings.validate_credentials():
            return _error(status.HTTP_400_BAD_REQUEST, "Missing required tokens")

        try:
            report = await do_sync(request_settings)
        except LeadSyncError as e:
            # Collection-level failures abort the whole run
            logger.error("Sync aborted: %s", e)
            return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e))

        return JSONResponse(content=report.to_dict())

    @application.post("/debug")
    async def debug(body: SyncRequest | None = None) -> JSONResponse:
        request_settings = resolve(body)
        if request_settings.validate_credentials():
            return _error(status.HTTP_400_BAD_REQUEST, "Missing tokens")

        result = await do_probe(request_settings, body.action if body else None)
        return JSONResponse(content=result)

    return application
