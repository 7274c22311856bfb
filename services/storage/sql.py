# services/storage/sql.py
"""
SQLAlchemy-backed stores (SQLite by default).

Localized fields are stored flat as ``<field>_ua`` / ``<field>_en`` columns.
SQLAlchemy sessions are synchronous here, so every call is pushed to a worker
thread with ``asyncio.to_thread`` to keep the event loop free.
"""

import asyncio
import threading
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional, Tuple, TypeVar

from loguru import logger
from sqlalchemy import Boolean, DateTime, Integer, String, Text, create_engine, select
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker
from sqlalchemy.pool import StaticPool

from core.exceptions import PersistenceFailure
from models.content_card import ContentCard, ImageSource
from models.localized import Bilingual
from models.video import Video
from .base import CardStore, VideoStore

T = TypeVar("T")


class Base(DeclarativeBase):
    pass


class InfoCardRow(Base):
    __tablename__ = "info_cards"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    title_ua: Mapped[str] = mapped_column(Text, nullable=False, default="")
    title_en: Mapped[Optional[str]] = mapped_column(Text)
    subtitle_ua: Mapped[Optional[str]] = mapped_column(Text)
    subtitle_en: Mapped[Optional[str]] = mapped_column(Text)
    content_ua: Mapped[Optional[str]] = mapped_column(Text)
    content_en: Mapped[Optional[str]] = mapped_column(Text)
    image: Mapped[Optional[str]] = mapped_column(String)
    category: Mapped[str] = mapped_column(String, nullable=False, index=True)
    subcategory: Mapped[Optional[str]] = mapped_column(String)
    resource: Mapped[Optional[str]] = mapped_column(String)
    position: Mapped[int] = mapped_column(Integer, default=0)
    published: Mapped[bool] = mapped_column(Boolean, default=True)
    date: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
    image_source: Mapped[Optional[str]] = mapped_column(String)


class VideoRow(Base):
    __tablename__ = "videos"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    title_ua: Mapped[str] = mapped_column(Text, nullable=False, default="")
    title_en: Mapped[Optional[str]] = mapped_column(Text)
    src: Mapped[str] = mapped_column(String, nullable=False)
    image: Mapped[Optional[str]] = mapped_column(String)
    category: Mapped[str] = mapped_column(String, nullable=False)
    description_ua: Mapped[Optional[str]] = mapped_column(Text)
    description_en: Mapped[Optional[str]] = mapped_column(Text)
    published: Mapped[bool] = mapped_column(Boolean, default=True)
    position: Mapped[int] = mapped_column(Integer, default=0)
    date: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)


# ----------------------------------------------------------------------
# Engine helpers
# ----------------------------------------------------------------------
def create_database_engine(database_url: str = "sqlite:///data/app.db") -> Engine:
    """Create an engine; for file-based SQLite make sure the directory exists."""
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        if url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
            return create_engine(
                database_url,
                connect_args={"check_same_thread": False, "timeout": 30},
            )
        # in-memory: every thread must see the same connection
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(database_url, pool_pre_ping=True)


def create_tables(engine: Engine) -> None:
    Base.metadata.create_all(engine)


# ----------------------------------------------------------------------
# Row <-> model conversion
# ----------------------------------------------------------------------
def _card_columns(card: ContentCard) -> dict:
    return {
        "id": card.id,
        "title_ua": card.title.ua,
        "title_en": card.title.en,
        "subtitle_ua": card.subtitle.ua,
        "subtitle_en": card.subtitle.en,
        "content_ua": card.content.ua,
        "content_en": card.content.en,
        "image": card.image,
        "category": card.category,
        "subcategory": card.subcategory,
        "resource": card.resource,
        "position": card.position,
        "published": card.published,
        "date": card.date,
        "image_source": card.image_source.value if card.image_source else None,
    }


def _row_to_card(row: InfoCardRow) -> ContentCard:
    return ContentCard(
        id=row.id,
        title=Bilingual(ua=row.title_ua or "", en=row.title_en or None),
        subtitle=Bilingual(ua=row.subtitle_ua or "", en=row.subtitle_en or None),
        content=Bilingual(ua=row.content_ua or "", en=row.content_en or None),
        image=row.image,
        category=row.category,
        subcategory=row.subcategory,
        resource=row.resource,
        position=row.position or 0,
        published=bool(row.published),
        date=row.date or datetime.now(),
        image_source=ImageSource(row.image_source) if row.image_source else None,
    )


def _video_columns(video: Video) -> dict:
    return {
        "id": video.id,
        "title_ua": video.title.ua,
        "title_en": video.title.en,
        "src": video.src,
        "image": video.image,
        "category": video.category,
        "description_ua": video.description.ua,
        "description_en": video.description.en,
        "published": video.published,
        "position": video.position,
        "date": video.date,
    }


def _row_to_video(row: VideoRow) -> Video:
    return Video(
        id=row.id,
        title=Bilingual(ua=row.title_ua or "", en=row.title_en or None),
        description=Bilingual(ua=row.description_ua or "", en=row.description_en or None),
        src=row.src,
        image=row.image,
        category=row.category,
        position=row.position or 0,
        published=bool(row.published),
        date=row.date or datetime.now(),
    )


class _SqlStore:
    def __init__(self, engine: Engine):
        self.engine = engine
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)
        # SQLite has a single writer; serialize worker threads on it
        self._lock = threading.Lock() if engine.dialect.name == "sqlite" else None

    async def _run(self, fn: Callable[[Session], T]) -> T:
        def work() -> T:
            if self._lock is None:
                return in_session()
            with self._lock:
                return in_session()

        def in_session() -> T:
            with self._session_factory() as session:
                try:
                    result = fn(session)
                    session.commit()
                    return result
                except SQLAlchemyError as exc:
                    session.rollback()
                    logger.error(f"Database error: {exc}")
                    raise PersistenceFailure(str(exc)) from exc

        return await asyncio.to_thread(work)


class SqlCardStore(_SqlStore, CardStore):
    async def get(self, card_id: str, category: Optional[str] = None) -> Optional[ContentCard]:
        def fn(session: Session) -> Optional[ContentCard]:
            row = session.get(InfoCardRow, card_id)
            if row is None or (category and row.category != category):
                return None
            return _row_to_card(row)

        return await self._run(fn)

    async def create(self, card: ContentCard) -> ContentCard:
        def fn(session: Session) -> ContentCard:
            if session.get(InfoCardRow, card.id) is not None:
                raise PersistenceFailure(f"Card '{card.id}' already exists")
            session.add(InfoCardRow(**_card_columns(card)))
            return card

        return await self._run(fn)

    async def update(self, card: ContentCard) -> ContentCard:
        def fn(session: Session) -> ContentCard:
            row = session.get(InfoCardRow, card.id)
            if row is None:
                raise PersistenceFailure(f"Card '{card.id}' does not exist")
            for key, value in _card_columns(card).items():
                setattr(row, key, value)
            return card

        return await self._run(fn)

    async def all(
        self,
        category: Optional[str] = None,
        include_unpublished: bool = False,
        order_by_date: bool = False,
        limit: Optional[int] = None,
    ) -> List[ContentCard]:
        def fn(session: Session) -> List[ContentCard]:
            stmt = select(InfoCardRow)
            if category:
                stmt = stmt.where(InfoCardRow.category == category)
            if not include_unpublished:
                stmt = stmt.where(InfoCardRow.published.is_(True))
            if order_by_date:
                stmt = stmt.order_by(InfoCardRow.date.desc())
            else:
                stmt = stmt.order_by(InfoCardRow.position.asc())
            if limit:
                stmt = stmt.limit(limit)
            return [_row_to_card(row) for row in session.scalars(stmt)]

        return await self._run(fn)

    async def delete(self, card_id: str) -> None:
        def fn(session: Session) -> None:
            row = session.get(InfoCardRow, card_id)
            if row is None:
                raise PersistenceFailure(f"Card '{card_id}' does not exist")
            session.delete(row)

        await self._run(fn)

    async def list_categories(self) -> List[str]:
        def fn(session: Session) -> List[str]:
            stmt = select(InfoCardRow.category).distinct().order_by(InfoCardRow.category)
            return list(session.scalars(stmt))

        return await self._run(fn)


class SqlVideoStore(_SqlStore, VideoStore):
    async def get(self, video_id: str) -> Optional[Video]:
        def fn(session: Session) -> Optional[Video]:
            row = session.get(VideoRow, video_id)
            return _row_to_video(row) if row else None

        return await self._run(fn)

    async def create(self, video: Video) -> Video:
        def fn(session: Session) -> Video:
            if session.get(VideoRow, video.id) is not None:
                raise PersistenceFailure(f"Video '{video.id}' already exists")
            session.add(VideoRow(**_video_columns(video)))
            return video

        return await self._run(fn)

    async def update(self, video: Video) -> Video:
        def fn(session: Session) -> Video:
            row = session.get(VideoRow, video.id)
            if row is None:
                raise PersistenceFailure(f"Video '{video.id}' does not exist")
            for key, value in _video_columns(video).items():
                setattr(row, key, value)
            return video

        return await self._run(fn)

    async def all(self, include_unpublished: bool = False) -> List[Video]:
        def fn(session: Session) -> List[Video]:
            stmt = select(VideoRow)
            if not include_unpublished:
                stmt = stmt.where(VideoRow.published.is_(True))
            stmt = stmt.order_by(VideoRow.position.desc())
            return [_row_to_video(row) for row in session.scalars(stmt)]

        return await self._run(fn)

    async def delete(self, video_id: str) -> None:
        def fn(session: Session) -> None:
            row = session.get(VideoRow, video_id)
            if row is not None:
                session.delete(row)

        await self._run(fn)

    async def list_categories(self) -> List[str]:
        def fn(session: Session) -> List[str]:
            stmt = select(VideoRow.category).distinct().order_by(VideoRow.category)
            return list(session.scalars(stmt))

        return await self._run(fn)


def create_sql_stores(database_url: str) -> Tuple[SqlCardStore, SqlVideoStore]:
    engine = create_database_engine(database_url)
    create_tables(engine)
    return SqlCardStore(engine), SqlVideoStore(engine)
