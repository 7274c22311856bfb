# models/request.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from .localized import LocalizedText


class PublishUpdate(BaseModel):
    published: bool


class ReorderRequest(BaseModel):
    """Card ids in their new display order; position becomes the list index."""

    order: List[str] = Field(..., min_length=1)


class SyncRequest(BaseModel):
    # None runs every source
    source: Optional[str] = Field(default=None, examples=["news"])


class CardUpdate(BaseModel):
    """
    Admin edit of a card.  Only the fields present in the payload are
    written; ``image`` is a URL, file uploads are handled elsewhere.
    """

    title: Optional[LocalizedText] = None
    subtitle: Optional[LocalizedText] = None
    content: Optional[LocalizedText] = None
    image: Optional[str] = Field(default=None, examples=["/uploads/centers/library.jpg"])
    resource: Optional[str] = Field(default=None, examples=["https://vsau.org/fakultety/agronomii"])
    subcategory: Optional[str] = None
    position: Optional[int] = None
    published: Optional[bool] = None
    date: Optional[datetime] = None


class CardCreate(CardUpdate):
    # generated when omitted
    id: Optional[str] = None
    title: LocalizedText


class VideoUpdate(BaseModel):
    title: Optional[LocalizedText] = None
    description: Optional[LocalizedText] = None
    src: Optional[str] = None
    image: Optional[str] = None
    category: Optional[str] = None
    position: Optional[int] = None
    published: Optional[bool] = None


class VideoCreate(VideoUpdate):
    id: Optional[str] = None
    title: LocalizedText
    src: str = Field(..., examples=["/uploads/videos/open-day.mp4"])
    category: str = Field(..., examples=["promo"])
