from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends

from ..dependencies import get_status_service
from ..services.status import IntegrationStatusService

router = APIRouter(prefix="/api")


@router.get("/health")
def health_check() -> Dict[str, str]:
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/google/status", tags=["Google"])
async def integration_status(
    status_service: IntegrationStatusService = Depends(get_status_service),
) -> Dict[str, Any]:
    return await status_service.check()
