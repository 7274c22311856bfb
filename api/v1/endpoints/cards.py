# api/v1/endpoints/cards.py
import uuid
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Query, Request, Response, status
from loguru import logger

from core.exceptions import CardNotFound, SyncException
from models.content_card import ContentCard, ImageSource
from models.request import CardCreate, CardUpdate, PublishUpdate, ReorderRequest
from services.cache import TTLCache
from services.storage import CardStore

router = APIRouter()


def _store(request: Request) -> CardStore:
    return request.app.state.card_store


def _cache(request: Request) -> TTLCache:
    return request.app.state.cache


def listing_prefix(category: str) -> str:
    return f"cards:{category}:"


async def _get_or_404(store: CardStore, card_id: str, category: str) -> ContentCard:
    card = await store.get(card_id, category)
    if card is None:
        raise CardNotFound(card_id)
    return card


def _present(card: ContentCard, lang: Optional[str]) -> Dict[str, Any]:
    return card.render(lang) if lang else card.to_dict()


def image_source_for(image: Optional[str], uploads_prefix: str) -> Optional[ImageSource]:
    """Images under the upload dir are admin-owned and survive every sync."""
    if image and image.startswith(uploads_prefix):
        return ImageSource.ADMIN_UPLOADED
    return None


@router.get("/cards")
async def list_categories(request: Request) -> List[str]:
    return await _store(request).list_categories()


@router.get("/cards/{category}")
async def list_cards(
    request: Request,
    category: str,
    include_all: bool = Query(False, alias="all", description="Include unpublished cards"),
    order_by_date: bool = False,
    limit: Optional[int] = Query(None, ge=1),
    lang: Optional[str] = Query(None, examples=["ua", "en"]),
):
    cache = _cache(request)
    key = f"{listing_prefix(category)}{include_all}:{order_by_date}:{limit}:{lang}"
    cached = cache.get(key)
    if cached is not None:
        return cached

    cards = await _store(request).all(
        category=category,
        include_unpublished=include_all,
        order_by_date=order_by_date,
        limit=limit,
    )
    payload = [_present(card, lang) for card in cards]
    cache.set(key, payload)
    return payload


@router.post("/cards/{category}", status_code=status.HTTP_201_CREATED)
async def create_card(request: Request, category: str, body: CardCreate):
    store = _store(request)
    data = body.model_dump(exclude_unset=True, exclude_none=True)
    card_id = data.pop("id", None) or uuid.uuid4().hex
    if await store.get(card_id) is not None:
        raise SyncException(
            f"Card '{card_id}' already exists",
            code="CONFLICT",
            status_code=status.HTTP_409_CONFLICT,
        )

    uploads_prefix = request.app.state.settings.UPLOADS_PREFIX
    card = ContentCard(
        **data,
        id=card_id,
        category=category,
        image_source=image_source_for(data.get("image"), uploads_prefix),
    )
    card = await store.create(card)
    _cache(request).invalidate_prefix(listing_prefix(category))
    logger.info(f"Created card '{card.id}' in '{category}'")
    return card.to_dict()


@router.get("/cards/{category}/{card_id}")
async def get_card(request: Request, category: str, card_id: str, lang: Optional[str] = None):
    card = await _get_or_404(_store(request), card_id, category)
    return _present(card, lang)


@router.put("/cards/{category}/reorder", status_code=status.HTTP_204_NO_CONTENT)
async def reorder_cards(request: Request, category: str, body: ReorderRequest):
    store = _store(request)
    cards = [await _get_or_404(store, card_id, category) for card_id in body.order]
    for position, card in enumerate(cards):
        if card.position != position:
            await store.update(card.model_copy(update={"position": position}))

    _cache(request).invalidate_prefix(listing_prefix(category))
    logger.info(f"Reordered {len(cards)} cards in '{category}'")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/cards/{category}/{card_id}")
async def update_card(request: Request, category: str, card_id: str, body: CardUpdate):
    store = _store(request)
    existing = await _get_or_404(store, card_id, category)
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    if "image" in changes:
        uploads_prefix = request.app.state.settings.UPLOADS_PREFIX
        changes["image_source"] = image_source_for(changes["image"], uploads_prefix)

    card = ContentCard.model_validate({**existing.model_dump(), **changes})
    card = await store.update(card)
    _cache(request).invalidate_prefix(listing_prefix(category))
    logger.info(f"Updated card '{card_id}' in '{category}': {sorted(changes)}")
    return card.to_dict()


@router.put("/cards/{category}/{card_id}/published")
async def set_published(request: Request, category: str, card_id: str, body: PublishUpdate):
    store = _store(request)
    card = await _get_or_404(store, card_id, category)
    if card.published != body.published:
        card = await store.update(card.model_copy(update={"published": body.published}))
        _cache(request).invalidate_prefix(listing_prefix(category))
        logger.info(f"Card '{card_id}' published={body.published}")
    return card.to_dict()


@router.delete("/cards/{category}/{card_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_card(request: Request, category: str, card_id: str):
    store = _store(request)
    await _get_or_404(store, card_id, category)
    await store.delete(card_id)
    _cache(request).invalidate_prefix(listing_prefix(category))
    logger.info(f"Deleted card '{card_id}' from '{category}'")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/cards/{category}/{card_id}/sync")
async def resync_card(request: Request, category: str, card_id: str):
    """Pull one card again from its upstream page; errors map to 404/400/502."""
    card = await request.app.state.sync_service.resync_card(card_id, category)
    return card.to_dict()
