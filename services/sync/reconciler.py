# services/sync/reconciler.py
"""
Create / update / skip decision for one freshly scraped card.

Only the fields a source owns are ever compared or written.  Everything an
admin controls survives a sync: English translations, the ``published``
flag, the submenu marker and any image uploaded by hand.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple

from models.content_card import ContentCard, ImageSource
from models.sync import SyncAction

LOCALIZED_FIELDS = frozenset({"title", "subtitle", "content"})

# Fields each source writes (and therefore compares) on update
OWNED_FIELDS: Dict[str, Tuple[str, ...]] = {
    "news": ("title", "content", "image", "position"),
    "faculties": ("title", "content"),
    "rectorat": ("title", "subtitle", "image", "position"),
    "centers": ("title", "content", "image", "position"),
}


@dataclass(frozen=True)
class Decision:
    action: SyncAction
    card: ContentCard


def is_admin_uploaded(card: ContentCard, uploads_prefix: str) -> bool:
    """
    Explicit ``image_source`` wins; rows written before it existed fall back
    to checking whether the image or resource path is under the upload dir.
    """
    if card.image_source is not None:
        return card.image_source is ImageSource.ADMIN_UPLOADED
    return any(
        value is not None and value.startswith(uploads_prefix)
        for value in (card.image, card.resource)
    )


def merge(
    fresh: ContentCard,
    existing: ContentCard,
    owned: Iterable[str],
    uploads_prefix: str,
) -> ContentCard:
    """``existing`` with the owned fields taken from ``fresh``."""
    owned = tuple(owned)
    update = {}
    for field in owned:
        value = getattr(fresh, field)
        if field in LOCALIZED_FIELDS:
            # upstream only ever provides the primary language
            value = getattr(existing, field).with_primary(value.ua)
        update[field] = value

    if "image" in owned:
        if is_admin_uploaded(existing, uploads_prefix):
            update["image"] = existing.image
        else:
            update["image_source"] = fresh.image_source

    return existing.model_copy(update=update)


def differs(candidate: ContentCard, existing: ContentCard, owned: Iterable[str]) -> bool:
    return any(getattr(candidate, f) != getattr(existing, f) for f in owned)


def reconcile(
    fresh: ContentCard,
    existing: Optional[ContentCard],
    owned: Iterable[str],
    uploads_prefix: str = "/uploads",
) -> Decision:
    owned = tuple(owned)

    if existing is None:
        return Decision(SyncAction.CREATE, fresh)

    if existing.is_manual:
        return Decision(SyncAction.SKIP, existing)

    merged = merge(fresh, existing, owned, uploads_prefix)
    if not differs(merged, existing, owned):
        return Decision(SyncAction.SKIP, existing)
    return Decision(SyncAction.UPDATE, merged)
