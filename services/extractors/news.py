# services/extractors/news.py
"""
News listing + article body extraction.

The listing only yields title, link, preview image and a date blurb; the
article body needs a second request against the linked detail page.
"""

from typing import Any, Dict, List, Optional

from loguru import logger

from models.sync import ScrapedItem
from services.fetcher import Fetcher
from .common import absolute_url, make_soup, text_of
from .config_loader import SourceConfig


def parse_news_list(html: str, base_url: str, cfg: SourceConfig) -> List[ScrapedItem]:
    """Return one item per news container that has a link; others are decoration."""
    lp = cfg.list_page
    soup = make_soup(html)
    items: List[ScrapedItem] = []

    for container in soup.select(lp.container):
        link_el = container.select_one(lp.link)
        link = absolute_url(link_el.get("href"), base_url) if link_el else None
        if not link:
            continue

        img_el = container.select_one(lp.image) if lp.image else None
        image = absolute_url(img_el.get("src"), base_url) if img_el else None

        date_text = " ".join(
            el.get_text(" ", strip=True) for el in container.select(lp.date)
        ) if lp.date else None

        items.append(
            ScrapedItem(
                source="news",
                title=text_of(link_el),
                resource=link,
                image=image,
                date_text=date_text,
            )
        )

    logger.debug(f"Parsed {len(items)} news items from {base_url}")
    return items


def parse_news_body(html: str, cfg: SourceConfig) -> str:
    """Plain-text article body: visible paragraphs of the content block."""
    soup = make_soup(html)
    paragraphs = [
        p.get_text(strip=True)
        for selector in cfg.detail_page.content
        for p in soup.select(selector)
    ]
    return "\n".join(p for p in paragraphs if p)


async def fetch_news_list(
    fetcher: Fetcher,
    url: str,
    cfg: SourceConfig,
    params: Optional[Dict[str, Any]] = None,
) -> List[ScrapedItem]:
    html = await fetcher.get_text(url, params=params)
    return parse_news_list(html, url, cfg)


async def fetch_news_body(fetcher: Fetcher, link: str, cfg: SourceConfig) -> str:
    html = await fetcher.get_text(link)
    return parse_news_body(html, cfg)


async def fetch_news_article(fetcher: Fetcher, item: ScrapedItem, cfg: SourceConfig) -> ScrapedItem:
    """Fill ``content`` of a listing item from its detail page."""
    body = await fetch_news_body(fetcher, item.resource, cfg)
    return item.model_copy(update={"content": body or None})
