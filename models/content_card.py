# models/content_card.py
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .localized import Bilingual, as_bilingual, text_for


class ImageSource(str, Enum):
    """Where a card's image came from."""

    SCRAPED = "scraped"
    ADMIN_UPLOADED = "admin_uploaded"


class ContentCard(BaseModel):
    """
    One row of the ``info_cards`` table.

    Scraped cards carry the upstream URL in ``resource``; cards without it
    were written by an admin and are never touched by a sync pass.
    """

    id: str
    title: Bilingual = Field(default_factory=Bilingual)
    subtitle: Bilingual = Field(default_factory=Bilingual)
    content: Bilingual = Field(default_factory=Bilingual)
    image: Optional[str] = None
    category: str
    subcategory: Optional[str] = None
    resource: Optional[str] = None
    position: int = 0
    published: bool = True
    date: datetime = Field(default_factory=datetime.now)
    # None on rows written before provenance was tracked
    image_source: Optional[ImageSource] = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("title", "subtitle", "content", mode="before")
    @classmethod
    def _coerce_localized(cls, v: Any) -> Bilingual:
        return as_bilingual(v)

    @field_validator("image", "resource", "subcategory", mode="before")
    @classmethod
    def _empty_to_none(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------
    @property
    def is_manual(self) -> bool:
        return not self.resource

    @property
    def is_submenu(self) -> bool:
        return bool(self.subcategory)

    # ------------------------------------------------------------------
    # Export helpers
    # ------------------------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")

    def render(self, lang: Optional[str]) -> Dict[str, Any]:
        """Flatten the localized fields to display strings for ``lang``."""
        data = self.to_dict()
        for field in ("title", "subtitle", "content"):
            data[field] = text_for(getattr(self, field), lang)
        return data
