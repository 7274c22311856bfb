# services/sync/service.py
"""
Sync orchestrator: fetch → extract → normalize → reconcile → persist.

Every upstream item is processed in its own task and awaited jointly, so a
pass takes as long as its slowest item.  Failures are caught at the item
boundary: they are logged and counted in the pass's ``SyncReport`` but never
stop sibling items.  Only ``resync_card`` (interactive) lets errors
propagate to the caller.
"""

import asyncio
from typing import Awaitable, Callable, Dict, Iterable, List, Optional, Tuple

from loguru import logger

from core.config import Settings, get_settings
from core.exceptions import CardNotFound, MissingResourceLink, SyncException
from models.content_card import ContentCard
from models.localized import Bilingual
from models.sync import ScrapedItem, SyncAction, SyncReport, SyncStatus
from services.extractors.centers import fetch_centers_page
from services.extractors.config_loader import SourceConfig, SourceNotFoundError, get_source_config
from services.extractors.faculties import fetch_faculty_page
from services.extractors.news import fetch_news_article, fetch_news_body, fetch_news_list
from services.extractors.rectorat import fetch_rectorat_page
from services.fetcher import Fetcher
from services.storage.base import CardStore
from .metrics import SYNC_DURATION, SYNC_ERRORS, SYNC_ITEMS
from .normalizer import normalize_center, normalize_faculty, normalize_news, normalize_rectorat
from .reconciler import OWNED_FIELDS, Decision, reconcile

CardBuilder = Callable[[], Awaitable[ContentCard]]
WriteListener = Callable[[ContentCard], None]


def _ready(card: ContentCard) -> CardBuilder:
    async def build() -> ContentCard:
        return card
    return build


class SyncService:
    SOURCES = ("news", "faculties", "rectorat", "centers")

    def __init__(
        self,
        store: CardStore,
        fetcher: Fetcher,
        settings: Optional[Settings] = None,
        on_write: Optional[WriteListener] = None,
    ):
        self.store = store
        self.fetcher = fetcher
        self.settings = settings or get_settings()
        self.on_write = on_write
        self._pass_lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._pass_lock.locked()

    # ------------------------------------------------------------------
    #  Per-item machinery
    # ------------------------------------------------------------------
    async def _apply(
        self,
        source: str,
        fresh: ContentCard,
        owned: Optional[Iterable[str]] = None,
    ) -> Decision:
        """Reconcile one card against the store and perform the single write."""
        existing = await self.store.get(fresh.id)
        decision = reconcile(
            fresh,
            existing,
            owned or OWNED_FIELDS[source],
            self.settings.UPLOADS_PREFIX,
        )

        if decision.action is SyncAction.CREATE:
            await self.store.create(decision.card)
            logger.info(f"[{source}] created {decision.card.id} ({decision.card.title.ua})")
        elif decision.action is SyncAction.UPDATE:
            await self.store.update(decision.card)
            logger.info(f"[{source}] updated {decision.card.id} ({decision.card.title.ua})")
        elif existing is not None and existing.is_manual:
            logger.debug(f"[{source}] {existing.id} is maintained by hand, leaving it alone")

        SYNC_ITEMS.labels(source=source, action=decision.action.value).inc()
        if decision.action is not SyncAction.SKIP and self.on_write is not None:
            self.on_write(decision.card)
        return decision

    async def _process_item(
        self,
        source: str,
        label: str,
        build: CardBuilder,
        report: SyncReport,
    ) -> None:
        try:
            fresh = await build()
            decision = await self._apply(source, fresh)
            report.record(decision.action)
        except SyncException as exc:
            SYNC_ERRORS.labels(source=source).inc()
            report.record_error(f"{label}: {exc.message}")
            logger.error(f"[{source}] {label} failed: {exc.message}")
        except Exception as exc:
            SYNC_ERRORS.labels(source=source).inc()
            report.record_error(f"{label}: {exc}")
            logger.exception(f"[{source}] unexpected error processing {label}: {exc}")

    async def _fan_out(
        self,
        source: str,
        jobs: List[Tuple[str, CardBuilder]],
        report: SyncReport,
    ) -> None:
        await asyncio.gather(
            *(self._process_item(source, label, build, report) for label, build in jobs)
        )

    @staticmethod
    def _unique(source: str, cards: List[ContentCard]) -> List[ContentCard]:
        """Drop cards whose id was already seen in this batch (same natural key)."""
        seen = set()
        unique: List[ContentCard] = []
        for card in cards:
            if card.id in seen:
                logger.warning(
                    f"[{source}] '{card.title.ua}' maps to an id already in this batch ({card.id}); skipping it"
                )
                continue
            seen.add(card.id)
            unique.append(card)
        return unique

    # ------------------------------------------------------------------
    #  Report helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _start(source: str) -> SyncReport:
        logger.info(f"Starting {source} sync")
        return SyncReport(source=source, status=SyncStatus.RUNNING)

    @staticmethod
    def _finish(report: SyncReport, status: SyncStatus = SyncStatus.COMPLETED) -> SyncReport:
        report.finish(status)
        SYNC_DURATION.labels(source=report.source).observe(report.duration_seconds)
        logger.info(
            f"{report.source} sync {status.value}: {report.created} created, "
            f"{report.updated} updated, {report.skipped} unchanged, {report.failed} failed "
            f"in {report.duration_seconds:.2f}s"
        )
        return report

    def _listing_failed(self, report: SyncReport, exc: Exception) -> SyncReport:
        SYNC_ERRORS.labels(source=report.source).inc()
        if isinstance(exc, SyncException):
            report.errors.append(exc.message)
            logger.error(f"{report.source} sync aborted: {exc.message}")
        else:
            report.errors.append(str(exc))
            logger.exception(f"{report.source} sync aborted: {exc}")
        return self._finish(report, SyncStatus.FAILED)

    # ------------------------------------------------------------------
    #  Sources
    # ------------------------------------------------------------------
    async def _news_listing(self, cfg: SourceConfig, pages: int) -> List[ScrapedItem]:
        url = self.settings.NEWS_BASE_URL
        if pages <= 1:
            items = await fetch_news_list(self.fetcher, url, cfg)
        else:
            items = []
            for page in range(1, pages + 1):
                items.extend(await fetch_news_list(self.fetcher, url, cfg, params={"page": page}))

        seen = set()
        unique: List[ScrapedItem] = []
        for item in items:
            if item.resource not in seen:
                seen.add(item.resource)
                unique.append(item)
        return unique

    async def sync_news(self, pages: Optional[int] = None) -> SyncReport:
        report = self._start("news")
        cfg = get_source_config("news")
        try:
            items = await self._news_listing(cfg, pages or self.settings.NEWS_PAGES)
        except Exception as exc:
            return self._listing_failed(report, exc)

        def job(index: int, item: ScrapedItem) -> Tuple[str, CardBuilder]:
            async def build() -> ContentCard:
                article = await fetch_news_article(self.fetcher, item, cfg)
                return normalize_news(article, index, cfg)
            return item.resource, build

        await self._fan_out("news", [job(i, item) for i, item in enumerate(items)], report)
        return self._finish(report)

    async def sync_faculties(self) -> SyncReport:
        report = self._start("faculties")
        cfg = get_source_config("faculties")
        try:
            cards = await self.store.all(category=cfg.category, include_unpublished=True)
        except Exception as exc:
            return self._listing_failed(report, exc)

        def job(card: ContentCard) -> Tuple[str, CardBuilder]:
            async def build() -> ContentCard:
                item = await fetch_faculty_page(self.fetcher, card.resource, cfg)
                return normalize_faculty(item, card, cfg)
            return card.resource, build

        await self._fan_out("faculties", [job(c) for c in cards if c.resource], report)
        return self._finish(report)

    async def sync_rectorat(self) -> SyncReport:
        report = self._start("rectorat")
        cfg = get_source_config("rectorat")
        url = self.settings.RECTORAT_BASE_URL
        try:
            items = await fetch_rectorat_page(self.fetcher, url, cfg)
            cards = self._unique("rectorat", [
                normalize_rectorat(item, i, cfg, url, self.settings.DEFAULT_IMAGE)
                for i, item in enumerate(items)
            ])
        except Exception as exc:
            return self._listing_failed(report, exc)

        await self._fan_out("rectorat", [(c.title.ua, _ready(c)) for c in cards], report)
        return self._finish(report)

    async def sync_centers(self) -> SyncReport:
        report = self._start("centers")
        cfg = get_source_config("centers")
        url = self.settings.CENTERS_BASE_URL
        try:
            items = await fetch_centers_page(self.fetcher, url, cfg)
            cards = self._unique("centers", [
                normalize_center(item, i, cfg, url, self.settings.DEFAULT_IMAGE)
                for i, item in enumerate(items)
            ])
        except Exception as exc:
            return self._listing_failed(report, exc)

        await self._fan_out("centers", [(c.title.ua, _ready(c)) for c in cards], report)
        return self._finish(report)

    async def run_source(self, name: str) -> SyncReport:
        runners = {
            "news": self.sync_news,
            "faculties": self.sync_faculties,
            "rectorat": self.sync_rectorat,
            "centers": self.sync_centers,
        }
        if name not in runners:
            raise SourceNotFoundError(name)
        return await runners[name]()

    async def sync_all(self, sources: Optional[Iterable[str]] = None) -> Dict[str, SyncReport]:
        """
        Run the given sources (all by default) concurrently.

        Returns an empty dict without doing anything when another pass is
        still running in this process.
        """
        names = tuple(sources or self.SOURCES)
        for name in names:
            if name not in self.SOURCES:
                raise SourceNotFoundError(name)

        if self._pass_lock.locked():
            logger.warning("A sync pass is already running; not starting another one")
            return {}

        async with self._pass_lock:
            logger.info(f"Starting sync pass: {', '.join(names)}")
            reports = await asyncio.gather(*(self.run_source(name) for name in names))
        return dict(zip(names, reports))

    # ------------------------------------------------------------------
    #  Single-item resync (admin triggered)
    # ------------------------------------------------------------------
    def source_for_category(self, category: str) -> Optional[str]:
        for name in self.SOURCES:
            if get_source_config(name).category == category:
                return name
        return None

    async def _fresh_copy(self, source: str, card: ContentCard) -> Tuple[ContentCard, Tuple[str, ...]]:
        cfg = get_source_config(source)

        if source == "news":
            # the listing is not re-read, so only the body is refreshed
            body = await fetch_news_body(self.fetcher, card.resource, cfg)
            return card.model_copy(update={"content": Bilingual(ua=body)}), ("content",)

        if source == "faculties":
            item = await fetch_faculty_page(self.fetcher, card.resource, cfg)
            return normalize_faculty(item, card, cfg), OWNED_FIELDS[source]

        if source == "rectorat":
            items = await fetch_rectorat_page(self.fetcher, card.resource, cfg)
            candidates = [
                normalize_rectorat(item, i, cfg, card.resource, self.settings.DEFAULT_IMAGE)
                for i, item in enumerate(items)
            ]
        else:
            items = await fetch_centers_page(self.fetcher, card.resource, cfg)
            candidates = [
                normalize_center(item, i, cfg, card.resource, self.settings.DEFAULT_IMAGE)
                for i, item in enumerate(items)
            ]

        match = next((c for c in candidates if c.id == card.id), None)
        if match is None:
            logger.warning(f"[{source}] {card.id} is no longer listed at {card.resource}")
            raise CardNotFound(card.id)
        return match, OWNED_FIELDS[source]

    async def resync_card(self, card_id: str, category: Optional[str] = None) -> ContentCard:
        """
        Re-read one card from upstream and write it back if it changed.

        Raises ``CardNotFound``, ``MissingResourceLink`` for hand-made cards,
        and lets ``FetchFailure``/``PersistenceFailure`` through.
        """
        card = await self.store.get(card_id, category)
        if card is None:
            raise CardNotFound(card_id)
        if card.is_manual:
            raise MissingResourceLink(card_id)

        source = self.source_for_category(card.category)
        if source is None:
            logger.info(f"No sync recipe for category '{card.category}'; {card_id} left as is")
            return card

        logger.info(f"Resyncing '{card_id}' in '{card.category}'")
        fresh, owned = await self._fresh_copy(source, card)
        decision = await self._apply(source, fresh, owned)
        return decision.card
