# services/extractors/faculties.py
"""
Faculty detail-page extraction.

Faculties are not discovered from a listing: the admin creates the card and
points ``resource`` at the faculty's page, and each pass re-reads that page.
"""

from typing import List

from bs4 import BeautifulSoup
from loguru import logger

from core.exceptions import ExtractionEmpty
from models.sync import ScrapedItem
from services.fetcher import Fetcher
from .common import absolutize_images, make_soup, text_of
from .config_loader import SourceConfig


def _collect_blocks(soup: BeautifulSoup, selectors: List[str], url: str) -> str:
    blocks: List[str] = []
    for selector in selectors:
        for el in soup.select(selector):
            absolutize_images(el, url)
            block = el.decode_contents().strip()
            if block:
                blocks.append(block)

    if not blocks:
        raise ExtractionEmpty(url, selectors)
    return "\n\n".join(blocks)


def parse_faculty_page(html: str, url: str, cfg: SourceConfig) -> ScrapedItem:
    dp = cfg.detail_page
    soup = make_soup(html)
    title = text_of(soup.select_one(dp.title)) if dp.title else ""

    try:
        content = _collect_blocks(soup, dp.content, url)
    except ExtractionEmpty as exc:
        logger.warning(f"{exc.message}; using <{dp.fallback or 'body'}> instead")
        fallback = soup.select_one(dp.fallback or "body") or soup
        absolutize_images(fallback, url)
        content = fallback.decode_contents().strip()

    return ScrapedItem(source="faculties", title=title, content=content, resource=url)


async def fetch_faculty_page(fetcher: Fetcher, url: str, cfg: SourceConfig) -> ScrapedItem:
    html = await fetcher.get_text(url)
    return parse_faculty_page(html, url, cfg)
