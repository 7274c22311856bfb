# services/extractors/rectorat.py
from typing import List, Optional

from loguru import logger

from models.sync import ScrapedItem
from services.fetcher import Fetcher
from .common import absolute_url, make_soup, text_of
from .config_loader import SourceConfig


def _rewrite(url: Optional[str], rewrites: dict) -> Optional[str]:
    if not url:
        return url
    for old, new in rewrites.items():
        if old in url:
            url = url.replace(old, new)
    return url


def parse_rectorat_page(html: str, base_url: str, cfg: SourceConfig) -> List[ScrapedItem]:
    """One item per roster row that names a person."""
    lp = cfg.list_page
    soup = make_soup(html)
    items: List[ScrapedItem] = []

    for row in soup.select(lp.container):
        name = text_of(row.select_one(lp.name))
        if not name:
            continue

        texts = [t for t in (p.get_text(strip=True) for p in row.select(lp.paragraphs)) if t]
        role = next(
            (t for t in texts if t != name and "тел" not in t.lower()),
            "",
        )
        phone = next((t for t in texts if t.lower().startswith("тел")), "")

        img_el = row.select_one(lp.image) if lp.image else None
        image = absolute_url(img_el.get("src"), base_url) if img_el else None

        items.append(
            ScrapedItem(
                source="rectorat",
                title=name,
                role=role,
                phone=phone,
                image=_rewrite(image, cfg.image_rewrites),
            )
        )

    logger.debug(f"Parsed {len(items)} rectorate members from {base_url}")
    return items


async def fetch_rectorat_page(fetcher: Fetcher, url: str, cfg: SourceConfig) -> List[ScrapedItem]:
    html = await fetcher.get_text(url)
    return parse_rectorat_page(html, url, cfg)
