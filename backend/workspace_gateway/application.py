from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .container import Container
from .errors import ConfigurationError, GoogleWorkspaceError, SheetNotFoundError
from .routes import drive_router, sheets_router, status_router

logger = logging.getLogger(__name__)


def _status_for(exc: GoogleWorkspaceError) -> int:
    if isinstance(exc, SheetNotFoundError):
        return 404
    if isinstance(exc, ConfigurationError):
        return 500
    return 502


async def google_error_handler(request: Request, exc: GoogleWorkspaceError) -> JSONResponse:
    status_code = _status_for(exc)
    logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": exc.message,
            "status": exc.status,
            "retryable": exc.retryable,
        },
    )


def create_app(container: Optional[Container] = None) -> FastAPI:
    """Create and configure a FastAPI application instance."""

    container = container or Container()

    app = FastAPI(
        title="SPPD Lembur Workspace Gateway",
        description="Google Drive and Sheets access through a service account.",
    )
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(container.settings.frontend_origins),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.add_exception_handler(GoogleWorkspaceError, google_error_handler)

    app.include_router(status_router)
    app.include_router(drive_router)
    app.include_router(sheets_router)

    @app.get("/")
    def read_root() -> dict[str, str]:
        return {
            "project": "workspace-gateway",
            "status": "running",
        }

    return app
