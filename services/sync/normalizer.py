# services/sync/normalizer.py
"""
Turns raw ``ScrapedItem`` records into ``ContentCard`` candidates.

Identifiers are content-addressed: ``{prefix}_{sha1(natural key)}``, so the
same upstream key always maps to the same card across runs and restarts.
"""

import hashlib
import re
from datetime import datetime
from typing import Iterable, Mapping, Optional

from models.content_card import ContentCard, ImageSource
from models.localized import Bilingual
from models.sync import ScrapedItem
from services.extractors.config_loader import SourceConfig

NBSP = "\u00a0"

_DATE_RE = re.compile(r"(\d{2})\.(\d{2})\.(\d{4})")
_PHONE_PREFIX_RE = re.compile(r"^(тел\.|тел|tel\.|tel|факс)\s*:?\s*", re.IGNORECASE)
_WS_RE = re.compile(r"\s+")


def compute_id(prefix: str, natural_key: Optional[str]) -> str:
    digest = hashlib.sha1((natural_key or "unknown").encode("utf-8")).hexdigest()
    return f"{prefix}_{digest}"


def capitalize_first(text: str) -> str:
    return text[:1].upper() + text[1:]


def normalize_title(
    text: Optional[str],
    strip_prefixes: Iterable[str] = (),
    replacements: Optional[Mapping[str, str]] = None,
) -> str:
    title = _WS_RE.sub(" ", (text or "").replace(NBSP, " ")).strip()
    for prefix in strip_prefixes:
        if title.startswith(prefix):
            title = title[len(prefix):]
            break
    for old, new in (replacements or {}).items():
        title = title.replace(old, new)
    return capitalize_first(title.strip())


def format_phone(raw: Optional[str]) -> str:
    """
    Strip the "тел."/"tel."/"факс" label and make the number wrap-proof:
    spaces become NBSP and every hyphen is followed by one.
    """
    phone = _PHONE_PREFIX_RE.sub("", (raw or "").strip()).strip()
    return phone.replace(" ", NBSP).replace("-", f"-{NBSP}")


def clean_role(text: Optional[str]) -> str:
    return (text or "").strip().strip("()").strip()


def parse_date(text: Optional[str], now: Optional[datetime] = None) -> datetime:
    """First ``DD.MM.YYYY`` token in ``text``; ``now`` when there is none."""
    match = _DATE_RE.search(text or "")
    if match:
        day, month, year = (int(g) for g in match.groups())
        try:
            return datetime(year, month, day)
        except ValueError:
            pass
    return now or datetime.now()


def rectorat_subtitle(role: str, phone: str) -> str:
    if phone:
        return f"{role} | 📞{NBSP}{phone}"
    return role


# ----------------------------------------------------------------------
# Per-source builders
# ----------------------------------------------------------------------
def normalize_news(item: ScrapedItem, index: int, cfg: SourceConfig) -> ContentCard:
    return ContentCard(
        id=compute_id(cfg.id_prefix, item.resource),
        title=Bilingual(ua=normalize_title(item.title)),
        content=Bilingual(ua=item.content or ""),
        image=item.image,
        image_source=ImageSource.SCRAPED if item.image else None,
        category=cfg.category,
        resource=item.resource,
        position=index,
        published=True,
        date=parse_date(item.date_text),
    )


def normalize_faculty(item: ScrapedItem, base: ContentCard, cfg: SourceConfig) -> ContentCard:
    """Faculty cards keep the admin-assigned id; only title/content come from upstream."""
    detail = cfg.detail_page
    prefixes = detail.strip_prefixes if detail else []
    replacements = detail.title_replacements if detail else {}
    return base.model_copy(
        update={
            "title": Bilingual(ua=normalize_title(item.title, prefixes, replacements)),
            "content": Bilingual(ua=item.content or ""),
        }
    )


def normalize_rectorat(
    item: ScrapedItem,
    index: int,
    cfg: SourceConfig,
    page_url: str,
    default_image: str,
) -> ContentCard:
    name = normalize_title(item.title)
    return ContentCard(
        id=compute_id(cfg.id_prefix, name),
        title=Bilingual(ua=name),
        subtitle=Bilingual(ua=rectorat_subtitle(clean_role(item.role), format_phone(item.phone))),
        image=item.image or default_image,
        image_source=ImageSource.SCRAPED,
        category=cfg.category,
        resource=page_url,
        position=index,
        published=True,
    )


def normalize_center(
    item: ScrapedItem,
    index: int,
    cfg: SourceConfig,
    page_url: str,
    default_image: str,
) -> ContentCard:
    title = normalize_title(item.title)
    return ContentCard(
        id=compute_id(cfg.id_prefix, title),
        title=Bilingual(ua=title),
        content=Bilingual(ua=item.content or "no info"),
        image=item.image or default_image,
        image_source=ImageSource.SCRAPED,
        category=cfg.category,
        resource=page_url,
        position=index,
        published=True,
    )
