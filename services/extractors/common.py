# services/extractors/common.py
"""Helpers shared by the per-source extraction recipes."""

from typing import List, Optional
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup, Tag

RESPONSIVE_IMG_STYLE = "max-width: 100%; height: auto;"


def make_soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def absolute_url(src: Optional[str], base_url: str) -> Optional[str]:
    """
    Resolve ``src`` against ``base_url``.

    Handles absolute, protocol-relative (``//host/x``), root-relative and
    relative references.  Protocol-relative URLs always become https.
    Returns ``None`` for empty input.
    """
    if not src:
        return None
    src = src.strip()
    if not src:
        return None
    if src.startswith("//"):
        return f"https:{src}"
    parsed = urlparse(src)
    if parsed.scheme in ("http", "https"):
        return src
    return urljoin(base_url, src)


def image_src(img: Tag) -> Optional[str]:
    """``src`` of an ``<img>``, falling back to lazy-load ``data-src``."""
    return img.get("src") or img.get("data-src")


def absolutize_images(fragment: Tag, base_url: str, responsive: bool = False) -> List[str]:
    """
    Rewrite every ``<img>`` inside ``fragment`` to an absolute ``src``.

    With ``responsive`` the images also get the ``img-fluid`` class and an
    inline style so they scale inside the portal's cards.  Returns the
    rewritten URLs in document order.
    """
    urls: List[str] = []
    for img in fragment.find_all("img"):
        resolved = absolute_url(image_src(img), base_url)
        if resolved:
            img["src"] = resolved
            urls.append(resolved)
        if responsive:
            classes = img.get("class") or []
            if "img-fluid" not in classes:
                img["class"] = [*classes, "img-fluid"]
            img["style"] = RESPONSIVE_IMG_STYLE
    return urls


def inner_html(tag: Optional[Tag]) -> str:
    if tag is None:
        return ""
    return tag.decode_contents().strip()


def text_of(tag: Optional[Tag]) -> str:
    if tag is None:
        return ""
    return tag.get_text(strip=True)
