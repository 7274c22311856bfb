# api/v1/endpoints/videos.py
import uuid
from typing import List, Optional

from fastapi import APIRouter, Query, Request, Response, status
from loguru import logger

from core.exceptions import SyncException
from models.request import PublishUpdate, VideoCreate, VideoUpdate
from models.video import Video
from services.storage import VideoStore

router = APIRouter()


def _store(request: Request) -> VideoStore:
    return request.app.state.video_store


async def _get_or_404(store: VideoStore, video_id: str) -> Video:
    video = await store.get(video_id)
    if video is None:
        raise SyncException(f"Video '{video_id}' not found", code="NOT_FOUND", status_code=404)
    return video


@router.get("/videos")
async def list_videos(
    request: Request,
    include_all: bool = Query(False, alias="all", description="Include unpublished videos"),
    lang: Optional[str] = None,
):
    videos = await _store(request).all(include_unpublished=include_all)
    return [v.render(lang) if lang else v.to_dict() for v in videos]


@router.get("/videos/categories")
async def list_video_categories(request: Request) -> List[str]:
    return await _store(request).list_categories()


@router.get("/videos/{video_id}")
async def get_video(request: Request, video_id: str, lang: Optional[str] = None):
    video = await _get_or_404(_store(request), video_id)
    return video.render(lang) if lang else video.to_dict()


@router.post("/videos", status_code=status.HTTP_201_CREATED)
async def create_video(request: Request, body: VideoCreate):
    """Register a video whose file and preview are already hosted."""
    store = _store(request)
    data = body.model_dump(exclude_unset=True, exclude_none=True)
    video_id = data.pop("id", None) or uuid.uuid4().hex
    if await store.get(video_id) is not None:
        raise SyncException(
            f"Video '{video_id}' already exists",
            code="CONFLICT",
            status_code=status.HTTP_409_CONFLICT,
        )

    video = await store.create(Video(**data, id=video_id))
    logger.info(f"Created video '{video.id}' in '{video.category}'")
    return video.to_dict()


@router.put("/videos/{video_id}")
async def update_video(request: Request, video_id: str, body: VideoUpdate):
    store = _store(request)
    existing = await _get_or_404(store, video_id)
    changes = body.model_dump(exclude_unset=True, exclude_none=True)

    video = await store.update(Video.model_validate({**existing.model_dump(), **changes}))
    logger.info(f"Updated video '{video_id}': {sorted(changes)}")
    return video.to_dict()


@router.put("/videos/{video_id}/published")
async def set_video_published(request: Request, video_id: str, body: PublishUpdate):
    store = _store(request)
    video = await _get_or_404(store, video_id)
    if video.published != body.published:
        video = await store.update(video.model_copy(update={"published": body.published}))
        logger.info(f"Video '{video_id}' published={body.published}")
    return video.to_dict()


@router.delete("/videos/{video_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_video(request: Request, video_id: str):
    store = _store(request)
    await _get_or_404(store, video_id)
    await store.delete(video_id)
    logger.info(f"Deleted video '{video_id}'")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
