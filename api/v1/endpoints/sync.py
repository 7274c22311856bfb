# api/v1/endpoints/sync.py
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Request, status
from loguru import logger

from core.exceptions import SyncException
from models.request import SyncRequest
from services.sync import SyncService

router = APIRouter()


@router.post("/sync", status_code=status.HTTP_202_ACCEPTED)
async def trigger_sync(
    request: Request,
    background_tasks: BackgroundTasks,
    body: Optional[SyncRequest] = None,
):
    service: SyncService = request.app.state.sync_service
    source = body.source if body else None

    if source is not None and source not in SyncService.SOURCES:
        raise SyncException(
            f"Unknown source '{source}'. Available: {', '.join(SyncService.SOURCES)}",
            code="UNKNOWN_SOURCE",
            status_code=status.HTTP_400_BAD_REQUEST,
        )
    if service.is_running:
        raise SyncException(
            "A sync pass is already running",
            code="SYNC_IN_PROGRESS",
            status_code=status.HTTP_409_CONFLICT,
        )

    sources = [source] if source else list(SyncService.SOURCES)
    background_tasks.add_task(service.sync_all, sources)
    logger.info(f"Queued sync pass for: {', '.join(sources)}")
    return {"status": "accepted", "sources": sources}
