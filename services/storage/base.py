# services/storage/base.py
"""
Persistence Gateway contract.

The sync pipeline only needs ``get``/``create``/``update``/``all``; the rest
is used by the HTTP API.  Implementations raise ``PersistenceFailure`` when a
write is rejected.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from models.content_card import ContentCard
from models.video import Video


class CardStore(ABC):
    @abstractmethod
    async def get(self, card_id: str, category: Optional[str] = None) -> Optional[ContentCard]:
        ...

    @abstractmethod
    async def create(self, card: ContentCard) -> ContentCard:
        ...

    @abstractmethod
    async def update(self, card: ContentCard) -> ContentCard:
        ...

    @abstractmethod
    async def all(
        self,
        category: Optional[str] = None,
        include_unpublished: bool = False,
        order_by_date: bool = False,
        limit: Optional[int] = None,
    ) -> List[ContentCard]:
        ...

    @abstractmethod
    async def delete(self, card_id: str) -> None:
        ...

    @abstractmethod
    async def list_categories(self) -> List[str]:
        ...


class VideoStore(ABC):
    @abstractmethod
    async def get(self, video_id: str) -> Optional[Video]:
        ...

    @abstractmethod
    async def create(self, video: Video) -> Video:
        ...

    @abstractmethod
    async def update(self, video: Video) -> Video:
        ...

    @abstractmethod
    async def all(self, include_unpublished: bool = False) -> List[Video]:
        ...

    @abstractmethod
    async def delete(self, video_id: str) -> None:
        ...

    @abstractmethod
    async def list_categories(self) -> List[str]:
        ...
