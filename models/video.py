# models/video.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .localized import Bilingual, as_bilingual, text_for


class Video(BaseModel):
    """A video-library entry. Videos are admin-managed only, never scraped."""

    id: str
    title: Bilingual = Field(default_factory=Bilingual)
    description: Bilingual = Field(default_factory=Bilingual)
    src: str
    image: Optional[str] = None
    category: str
    position: int = 0
    published: bool = True
    date: datetime = Field(default_factory=datetime.now)

    model_config = ConfigDict(extra="ignore")

    @field_validator("title", "description", mode="before")
    @classmethod
    def _coerce_localized(cls, v: Any) -> Bilingual:
        return as_bilingual(v)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")

    def render(self, lang: Optional[str]) -> Dict[str, Any]:
        data = self.to_dict()
        data["title"] = text_for(self.title, lang)
        data["description"] = text_for(self.description, lang)
        return data
