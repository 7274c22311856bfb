# tests/conftest.py
"""
Shared fixtures: a fake upstream site served through ``httpx.MockTransport``,
a store that counts writes, and HTML pages shaped like the real portal.
"""

from typing import Callable, Dict, List, Optional, Union

import httpx
import pytest

from core.config import Settings
from models.content_card import ContentCard
from services.fetcher import Fetcher
from services.storage import InMemoryCardStore

NEWS_URL = "https://vsau.org/novini?page=1"
RECTORAT_URL = "https://vsau.org/pro-universitet/rektorat"
CENTERS_URL = "https://vsau.org/pro-universitet/strukturni-pidrozdili"
FACULTY_URL = "https://vsau.org/fakultety/agronomii"

NEWS_LIST_HTML = """
<html><body>
  <div class="node clearfix">
    <img class="logo" src="/sites/default/files/first.jpg">
    <a href="/novini/pershyi-den">Перший день весни</a>
    <p class="my-2">Опубліковано 01.03.2024</p>
  </div>
  <div class="node clearfix">
    <a href="/novini/druhyi-den">  другий   день </a>
    <p class="my-2">02.03.2024</p>
  </div>
  <div class="node clearfix">
    <img class="logo" src="//cdn.vsau.org/third.jpg">
    <a href="https://vsau.org/novini/tretii-den">Третій день</a>
  </div>
  <div class="node clearfix"><span>Реклама без посилання</span></div>
</body></html>
"""

NEWS_LINKS = [
    "https://vsau.org/novini/pershyi-den",
    "https://vsau.org/novini/druhyi-den",
    "https://vsau.org/novini/tretii-den",
]


def news_article_html(*paragraphs: str) -> str:
    body = "".join(f"<p>{p}</p>" for p in paragraphs)
    return (
        "<html><body><div class='content'>"
        f"{body}<p class='d-none'>прихований текст</p>"
        "</div></body></html>"
    )


FACULTY_HTML = """
<html><body>
  <h1>Факультет агрономії та лісівництва</h1>
  <div class="col-lg-8 mb-3"><p>Про факультет</p><img src="/files/dean.jpg"></div>
  <div class="col pt-3 content"><p>Кафедри</p></div>
</body></html>
"""

RECTORAT_HTML = """
<html><body>
  <div class="row mb-2 py-2">
    <div class="col-3"><img class="img-fluid" src="/pro-universitet/assets/rector.jpg"></div>
    <div class="col">
      <p class="h5 font-weight-bold">Іван Петренко</p>
      <p>(ректор)</p>
      <p>тел.: 0432 55-00-00</p>
    </div>
  </div>
  <div class="row mb-2 py-2">
    <div class="col">
      <p class="h5 font-weight-bold">Олена Коваль</p>
      <p>проректор з наукової роботи</p>
    </div>
  </div>
  <div class="row mb-2 py-2"><div class="col"><p>порожній рядок</p></div></div>
</body></html>
"""

CENTERS_HTML = """
<html><body>
  <div class="card card-outline">
    <button>центр інформаційних технологій</button>
    <div class="card-body"><p>Опис центру</p><img src="/files/it.png" class="photo"></div>
  </div>
  <div class="card card-outline">
    <button>Бібліотека</button>
    <div class="card-body"><p>Читальна зала</p></div>
  </div>
  <div class="card card-outline"><button> </button><div class="card-body">x</div></div>
</body></html>
"""

Page = Union[str, int, Callable[[httpx.Request], httpx.Response]]


class FakeSite:
    """URL → page body (or HTTP status) map, served via ``httpx.MockTransport``."""

    def __init__(self, pages: Optional[Dict[str, Page]] = None):
        self.pages: Dict[str, Page] = dict(pages or {})
        self.requests: List[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        page = self.pages.get(str(request.url))
        if page is None:
            return httpx.Response(404, text="not found")
        if callable(page):
            return page(request)
        if isinstance(page, int):
            return httpx.Response(page)
        return httpx.Response(200, text=page)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def hits(self, url: str) -> int:
        return sum(1 for r in self.requests if str(r.url) == url)


class RecordingStore(InMemoryCardStore):
    """In-memory store that remembers every write it was asked to do."""

    def __init__(self, cards=None):
        super().__init__(cards)
        self.created: List[ContentCard] = []
        self.updated: List[ContentCard] = []

    async def create(self, card: ContentCard) -> ContentCard:
        self.created.append(card)
        return await super().create(card)

    async def update(self, card: ContentCard) -> ContentCard:
        self.updated.append(card)
        return await super().update(card)

    def reset_counts(self) -> None:
        self.created.clear()
        self.updated.clear()


def default_site() -> FakeSite:
    return FakeSite(
        {
            NEWS_URL: NEWS_LIST_HTML,
            NEWS_LINKS[0]: news_article_html("Весна прийшла.", "Друге речення."),
            NEWS_LINKS[1]: news_article_html("Другий день."),
            NEWS_LINKS[2]: news_article_html("Третій день."),
            RECTORAT_URL: RECTORAT_HTML,
            CENTERS_URL: CENTERS_HTML,
            FACULTY_URL: FACULTY_HTML,
        }
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        NEWS_BASE_URL=NEWS_URL,
        RECTORAT_BASE_URL=RECTORAT_URL,
        CENTERS_BASE_URL=CENTERS_URL,
        DATABASE_URL="sqlite://",
        SYNC_INTERVAL_MINUTES=0,
        FETCH_RETRIES=2,
    )


@pytest.fixture
def site() -> FakeSite:
    return default_site()


@pytest.fixture
def fetcher(site: FakeSite) -> Fetcher:
    return Fetcher(transport=site.transport(), retries=2, backoff_max=0)


@pytest.fixture
def store() -> RecordingStore:
    return RecordingStore()
