# models/localized.py
"""
Localized text values.

Older rows carry a plain string, newer ones a ``{"ua": ..., "en": ...}``
object.  Both shapes are accepted everywhere; :func:`text_for` is the one
accessor used to turn either into display text.
"""

from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict


class Bilingual(BaseModel):
    """Primary-language (``ua``) text plus an optional English rendering."""

    ua: str = ""
    en: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    def with_primary(self, text: str) -> "Bilingual":
        """Copy with ``ua`` replaced and ``en`` left as is."""
        return Bilingual(ua=text, en=self.en)


# ``str`` is the plain variant.
LocalizedText = Union[str, Bilingual]


def as_bilingual(value: Any) -> Bilingual:
    """Coerce any accepted shape (None, str, dict, Bilingual) to ``Bilingual``."""
    if value is None:
        return Bilingual()
    if isinstance(value, Bilingual):
        return value
    if isinstance(value, str):
        return Bilingual(ua=value)
    if isinstance(value, dict):
        return Bilingual(ua=value.get("ua") or "", en=value.get("en") or None)
    raise TypeError(f"Unsupported localized value: {value!r}")


def text_for(value: Optional[LocalizedText], lang: Optional[str]) -> str:
    if not value:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        value = as_bilingual(value)
    if lang and lang.startswith("en") and value.en:
        return value.en
    return value.ua or ""
