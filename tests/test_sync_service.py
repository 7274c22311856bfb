# tests/test_sync_service.py
"""
End-to-end passes over the fake site: fetch → extract → normalize →
reconcile → store, with every write counted by ``RecordingStore``.
"""

import pytest

from core.exceptions import CardNotFound, FetchFailure, MissingResourceLink
from models.content_card import ContentCard
from models.localized import Bilingual
from models.sync import SyncStatus
from services.sync import SyncService
from services.sync.normalizer import compute_id

from tests.conftest import (
    FACULTY_URL,
    NEWS_LINKS,
    NEWS_LIST_HTML,
    NEWS_URL,
    RECTORAT_HTML,
    RECTORAT_URL,
    RecordingStore,
    news_article_html,
)


def faculty_card(**overrides) -> ContentCard:
    data = dict(
        id="faculty-agro",
        category="faculties",
        title=Bilingual(ua="Агрономія", en="Agronomy"),
        content=Bilingual(ua="чернетка"),
        resource=FACULTY_URL,
        position=2,
    )
    data.update(overrides)
    return ContentCard(**data)


@pytest.fixture
def service(store, fetcher, settings) -> SyncService:
    return SyncService(store, fetcher, settings=settings)


# ----------------------------------------------------------------------
# News
# ----------------------------------------------------------------------
@pytest.mark.asyncio
async def test_news_sync_creates_one_card_per_article(service, store):
    report = await service.sync_news()

    assert report.status is SyncStatus.COMPLETED
    assert (report.created, report.updated, report.failed) == (3, 0, 0)

    cards = await store.all(category="news")
    assert [c.resource for c in cards] == NEWS_LINKS
    assert [c.position for c in cards] == [0, 1, 2]
    assert cards[0].title.ua == "Перший день весни"
    assert cards[0].content.ua == "Весна прийшла.\nДруге речення."
    assert cards[1].title.ua == "Другий день"
    assert all(c.published for c in cards)


@pytest.mark.asyncio
async def test_second_pass_over_unchanged_site_writes_nothing(service, store):
    await store.create(faculty_card())

    first = await service.sync_all()
    assert sum(r.writes for r in first.values()) > 0

    store.reset_counts()
    second = await service.sync_all()

    assert store.created == []
    assert store.updated == []
    assert all(r.writes == 0 for r in second.values())
    assert all(r.status is SyncStatus.COMPLETED for r in second.values())


@pytest.mark.asyncio
async def test_ids_are_stable_across_independent_runs(fetcher, settings):
    first_store, second_store = RecordingStore(), RecordingStore()
    await SyncService(first_store, fetcher, settings=settings).sync_news()
    await SyncService(second_store, fetcher, settings=settings).sync_news()

    first_ids = [c.id for c in await first_store.all()]
    second_ids = [c.id for c in await second_store.all()]
    assert first_ids == second_ids
    assert first_ids[0] == compute_id("news", NEWS_LINKS[0])


@pytest.mark.asyncio
async def test_update_keeps_admin_fields(service, store, site):
    await service.sync_news()
    card_id = compute_id("news", NEWS_LINKS[0])
    card = await store.get(card_id)
    await store.update(
        card.model_copy(
            update={
                "published": False,
                "title": Bilingual(ua=card.title.ua, en="First day of spring"),
            }
        )
    )

    site.pages[NEWS_URL] = NEWS_LIST_HTML.replace("Перший день весни", "Перший день весни!")
    site.pages[NEWS_LINKS[0]] = news_article_html("Оновлений текст.")
    store.reset_counts()

    report = await service.sync_news()

    assert report.updated == 1
    updated = await store.get(card_id)
    assert updated.title == Bilingual(ua="Перший день весни!", en="First day of spring")
    assert updated.content.ua == "Оновлений текст."
    assert updated.published is False


@pytest.mark.asyncio
async def test_update_keeps_uploaded_image(service, store, site):
    await service.sync_news()
    card_id = compute_id("news", NEWS_LINKS[0])
    card = await store.get(card_id)
    await store.update(card.model_copy(update={"image": "/uploads/news/cover.png", "image_source": None}))

    site.pages[NEWS_LINKS[0]] = news_article_html("Інший текст.")
    report = await service.sync_news()

    assert report.updated == 1
    updated = await store.get(card_id)
    assert updated.content.ua == "Інший текст."
    assert updated.image == "/uploads/news/cover.png"


@pytest.mark.asyncio
async def test_one_missing_article_does_not_stop_the_others(service, store, site):
    del site.pages[NEWS_LINKS[1]]

    report = await service.sync_news()

    assert report.status is SyncStatus.COMPLETED
    assert (report.created, report.failed) == (2, 1)
    assert NEWS_LINKS[1] in report.errors[0]
    assert "HTTP 404" in report.errors[0]
    assert await store.get(compute_id("news", NEWS_LINKS[1])) is None
    assert len(store.created) == 2


@pytest.mark.asyncio
async def test_listing_failure_marks_report_failed(service, store, site):
    site.pages[NEWS_URL] = 503

    report = await service.sync_news()

    assert report.status is SyncStatus.FAILED
    assert report.created == 0
    assert len(report.errors) == 1
    assert store.created == []


@pytest.mark.asyncio
async def test_one_new_article_among_three_is_the_only_write(service, store):
    await service.sync_news()
    await store.delete(compute_id("news", NEWS_LINKS[1]))
    store.reset_counts()

    report = await service.sync_news()

    assert len(store.created) == 1
    assert len(store.updated) == 0
    assert (report.created, report.updated, report.skipped) == (1, 0, 2)
    created = store.created[0]
    assert created.resource == NEWS_LINKS[1]
    assert created.position == 1


@pytest.mark.asyncio
async def test_news_pages_are_walked_and_deduplicated(service, store, site):
    page_two = NEWS_URL.replace("page=1", "page=2")
    site.pages[page_two] = """
      <div class="node clearfix"><a href="/novini/tretii-den">Третій день</a></div>
      <div class="node clearfix"><a href="/novini/chetvertyi-den">Четвертий день</a></div>
    """
    site.pages["https://vsau.org/novini/chetvertyi-den"] = news_article_html("Четвертий.")

    report = await service.sync_news(pages=2)

    assert report.created == 4
    assert site.hits(page_two) == 1
    assert site.hits(NEWS_LINKS[2]) == 1
    positions = {c.resource: c.position for c in await store.all(category="news")}
    assert positions["https://vsau.org/novini/chetvertyi-den"] == 3


@pytest.mark.asyncio
async def test_manual_news_card_is_left_alone(service, store):
    manual = ContentCard(
        id=compute_id("news", NEWS_LINKS[0]),
        category="news",
        title=Bilingual(ua="Написано вручну"),
    )
    await store.create(manual)
    store.reset_counts()

    report = await service.sync_news()

    assert report.skipped == 1
    assert (await store.get(manual.id)).title.ua == "Написано вручну"
    assert all(c.id != manual.id for c in store.updated)


# ----------------------------------------------------------------------
# Faculties, rectorate, centers
# ----------------------------------------------------------------------
@pytest.mark.asyncio
async def test_faculty_sync_refreshes_linked_cards_only(service, store):
    await store.create(faculty_card(published=False))
    await store.create(ContentCard(id="faculty-manual", category="faculties", title="Ручна"))
    await store.create(faculty_card(id="faculty-gone", resource="https://vsau.org/fakultety/zakryto"))
    store.reset_counts()

    report = await service.sync_faculties()

    assert (report.updated, report.failed) == (1, 1)
    card = await store.get("faculty-agro")
    assert card.title == Bilingual(ua="Агрономії та лісівництва", en="Agronomy")
    assert "Про факультет" in card.content.ua
    assert card.position == 2
    assert card.published is False
    assert [c.id for c in store.updated] == ["faculty-agro"]


@pytest.mark.asyncio
async def test_rectorat_sync_builds_member_cards(service, store, settings):
    report = await service.sync_rectorat()

    assert report.created == 2
    members = await store.all(category="rectorat_members")
    rector, vice = members
    assert rector.title.ua == "Іван Петренко"
    assert rector.subtitle.ua.startswith("ректор | 📞")
    assert rector.image == "https://vsau.org/assets/rector.jpg"
    assert rector.resource == RECTORAT_URL
    assert vice.subtitle.ua == "проректор з наукової роботи"
    assert vice.image == settings.DEFAULT_IMAGE


@pytest.mark.asyncio
async def test_duplicate_names_in_one_roster_are_written_once(service, store, site):
    row = RECTORAT_HTML.split("<body>")[1].split("</body>")[0]
    site.pages[RECTORAT_URL] = f"<html><body>{row}{row}</body></html>"

    report = await service.sync_rectorat()

    assert report.created == 2
    assert len(store.created) == 2


@pytest.mark.asyncio
async def test_centers_sync_keeps_titles_verbatim(service, store):
    report = await service.sync_centers()

    assert report.created == 2
    titles = [c.title.ua for c in await store.all(category="centers")]
    assert titles == ["Центр інформаційних технологій", "Бібліотека"]


@pytest.mark.asyncio
async def test_sync_all_reports_every_source(service, store):
    reports = await service.sync_all()

    assert set(reports) == set(SyncService.SOURCES)
    assert reports["news"].created == 3
    assert reports["faculties"].created == 0


@pytest.mark.asyncio
async def test_sync_all_does_not_overlap_itself(service, store):
    async with service._pass_lock:
        assert service.is_running
        assert await service.sync_all() == {}
    assert store.created == []


@pytest.mark.asyncio
async def test_write_listener_sees_every_write(store, fetcher, settings):
    seen = []
    service = SyncService(store, fetcher, settings=settings, on_write=seen.append)

    await service.sync_centers()
    await service.sync_centers()

    assert [c.title.ua for c in seen] == ["Центр інформаційних технологій", "Бібліотека"]


# ----------------------------------------------------------------------
# Single-card resync
# ----------------------------------------------------------------------
@pytest.mark.asyncio
async def test_resync_rejects_manual_cards(service, store):
    await store.create(ContentCard(id="manual", category="news", title="Ручна"))
    store.reset_counts()

    with pytest.raises(MissingResourceLink) as exc_info:
        await service.resync_card("manual", "news")

    assert exc_info.value.status_code == 400
    assert "added manually" in exc_info.value.message
    assert store.updated == []


@pytest.mark.asyncio
async def test_resync_unknown_card(service):
    with pytest.raises(CardNotFound):
        await service.resync_card("nope")


@pytest.mark.asyncio
async def test_resync_news_refreshes_body_only(service, store, site):
    await service.sync_news()
    card_id = compute_id("news", NEWS_LINKS[2])
    site.pages[NEWS_LINKS[2]] = news_article_html("Виправлений текст.")
    site.pages[NEWS_URL] = 500
    store.reset_counts()

    card = await service.resync_card(card_id, "news")

    assert card.content.ua == "Виправлений текст."
    assert card.title.ua == "Третій день"
    assert card.position == 2
    assert len(store.updated) == 1


@pytest.mark.asyncio
async def test_resync_unchanged_card_does_not_write(service, store):
    await store.create(faculty_card())
    await service.sync_faculties()
    store.reset_counts()

    card = await service.resync_card("faculty-agro")

    assert card.title.ua == "Агрономії та лісівництва"
    assert store.updated == []


@pytest.mark.asyncio
async def test_resync_member_gone_upstream(service, store, site):
    await service.sync_rectorat()
    card_id = compute_id("rectorat", "Олена Коваль")
    site.pages[RECTORAT_URL] = RECTORAT_HTML.replace("Олена Коваль", "Ольга Коваль")

    with pytest.raises(CardNotFound):
        await service.resync_card(card_id)


@pytest.mark.asyncio
async def test_resync_propagates_fetch_failures(service, store, site):
    await store.create(faculty_card())
    site.pages[FACULTY_URL] = 500

    with pytest.raises(FetchFailure) as exc_info:
        await service.resync_card("faculty-agro")

    assert exc_info.value.status_code == 502
