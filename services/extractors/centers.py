# services/extractors/centers.py
from typing import List

from loguru import logger

from models.sync import ScrapedItem
from services.fetcher import Fetcher
from .common import absolutize_images, inner_html, make_soup, text_of
from .config_loader import SourceConfig


def parse_centers_page(html: str, base_url: str, cfg: SourceConfig) -> List[ScrapedItem]:
    """Each collapsible card is one center; the button label is its name."""
    lp = cfg.list_page
    soup = make_soup(html)
    items: List[ScrapedItem] = []

    for card in soup.select(lp.container):
        title = text_of(card.select_one(lp.title))
        if not title:
            continue

        body = card.select_one(lp.body)
        images = absolutize_images(body, base_url, responsive=True) if body else []

        items.append(
            ScrapedItem(
                source="centers",
                title=title,
                content=inner_html(body),
                image=images[0] if images else None,
            )
        )

    logger.debug(f"Parsed {len(items)} centers from {base_url}")
    return items


async def fetch_centers_page(fetcher: Fetcher, url: str, cfg: SourceConfig) -> List[ScrapedItem]:
    html = await fetcher.get_text(url)
    return parse_centers_page(html, url, cfg)
