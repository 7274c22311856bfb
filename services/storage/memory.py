# services/storage/memory.py
"""Dict-backed stores for tests and local runs without a database."""

from typing import Dict, List, Optional

from core.exceptions import PersistenceFailure
from models.content_card import ContentCard
from models.video import Video
from .base import CardStore, VideoStore


class InMemoryCardStore(CardStore):
    def __init__(self, cards: Optional[List[ContentCard]] = None):
        self._cards: Dict[str, ContentCard] = {}
        for card in cards or []:
            self._cards[card.id] = card.model_copy(deep=True)

    async def get(self, card_id: str, category: Optional[str] = None) -> Optional[ContentCard]:
        card = self._cards.get(card_id)
        if card is None or (category and card.category != category):
            return None
        return card.model_copy(deep=True)

    async def create(self, card: ContentCard) -> ContentCard:
        if card.id in self._cards:
            raise PersistenceFailure(f"Card '{card.id}' already exists")
        self._cards[card.id] = card.model_copy(deep=True)
        return card

    async def update(self, card: ContentCard) -> ContentCard:
        if card.id not in self._cards:
            raise PersistenceFailure(f"Card '{card.id}' does not exist")
        self._cards[card.id] = card.model_copy(deep=True)
        return card

    async def all(
        self,
        category: Optional[str] = None,
        include_unpublished: bool = False,
        order_by_date: bool = False,
        limit: Optional[int] = None,
    ) -> List[ContentCard]:
        cards = [
            c for c in self._cards.values()
            if (category is None or c.category == category)
            and (include_unpublished or c.published)
        ]
        if order_by_date:
            cards.sort(key=lambda c: c.date, reverse=True)
        else:
            cards.sort(key=lambda c: c.position)
        if limit:
            cards = cards[:limit]
        return [c.model_copy(deep=True) for c in cards]

    async def delete(self, card_id: str) -> None:
        if self._cards.pop(card_id, None) is None:
            raise PersistenceFailure(f"Card '{card_id}' does not exist")

    async def list_categories(self) -> List[str]:
        return sorted({c.category for c in self._cards.values()})


class InMemoryVideoStore(VideoStore):
    def __init__(self, videos: Optional[List[Video]] = None):
        self._videos: Dict[str, Video] = {v.id: v.model_copy(deep=True) for v in videos or []}

    async def get(self, video_id: str) -> Optional[Video]:
        video = self._videos.get(video_id)
        return video.model_copy(deep=True) if video else None

    async def create(self, video: Video) -> Video:
        if video.id in self._videos:
            raise PersistenceFailure(f"Video '{video.id}' already exists")
        self._videos[video.id] = video.model_copy(deep=True)
        return video

    async def update(self, video: Video) -> Video:
        if video.id not in self._videos:
            raise PersistenceFailure(f"Video '{video.id}' does not exist")
        self._videos[video.id] = video.model_copy(deep=True)
        return video

    async def all(self, include_unpublished: bool = False) -> List[Video]:
        videos = [v for v in self._videos.values() if include_unpublished or v.published]
        videos.sort(key=lambda v: v.position, reverse=True)
        return [v.model_copy(deep=True) for v in videos]

    async def delete(self, video_id: str) -> None:
        self._videos.pop(video_id, None)

    async def list_categories(self) -> List[str]:
        return sorted({v.category for v in self._videos.values()})
