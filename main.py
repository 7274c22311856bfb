import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from prometheus_client import make_asgi_app

from core.config import Settings, get_settings
from core.exceptions import SyncException, ValidationError
from core.logging import setup_logging
from models.content_card import ContentCard
from services.cache import TTLCache
from services.fetcher import Fetcher
from services.storage import CardStore, VideoStore, create_sql_stores
from services.sync import SyncScheduler, SyncService
from api.v1.endpoints import cards, sync, videos
from api.v1.endpoints.cards import listing_prefix

API_VERSION = "1.0.0"
DESCRIPTION = "Keeps the portal's news, faculty, rectorate and centers cards in sync with the university site"


def create_app(
    settings: Optional[Settings] = None,
    card_store: Optional[CardStore] = None,
    video_store: Optional[VideoStore] = None,
    fetcher: Optional[Fetcher] = None,
) -> FastAPI:
    """
    Build the API app.  Stores and fetcher default to the configured
    SQLite database and a real HTTP client; tests pass their own.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            setup_logging(settings.LOG_LEVEL)
            logger.info("Initializing application...")

            app.state.settings = settings
            app.state.card_store = card_store
            app.state.video_store = video_store
            if card_store is None or video_store is None:
                sql_cards, sql_videos = create_sql_stores(settings.DATABASE_URL)
                if card_store is None:
                    app.state.card_store = sql_cards
                if video_store is None:
                    app.state.video_store = sql_videos

            app.state.cache = TTLCache(
                max_entries=settings.CACHE_MAX_ENTRIES,
                ttl_seconds=settings.CACHE_TTL_SECONDS,
            )
            app.state.fetcher = fetcher or Fetcher.from_settings(settings)

            def drop_cached_listing(card: ContentCard) -> None:
                app.state.cache.invalidate_prefix(listing_prefix(card.category))

            app.state.sync_service = SyncService(
                app.state.card_store,
                app.state.fetcher,
                settings=settings,
                on_write=drop_cached_listing,
            )
            app.state.scheduler = SyncScheduler(
                app.state.sync_service, settings.SYNC_INTERVAL_MINUTES
            )
            app.state.scheduler.start()

            yield

            logger.info("Shutting down application...")
            await app.state.scheduler.stop()
            if fetcher is None:
                await app.state.fetcher.aclose()

        except Exception as e:
            logger.exception(f"Application lifecycle error: {str(e)}")
            raise

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description=DESCRIPTION,
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_HOSTS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=settings.ALLOWED_HOSTS,
    )

    app.include_router(cards.router, prefix="/api/v1", tags=["cards"])
    app.include_router(sync.router, prefix="/api/v1", tags=["sync"])
    app.include_router(videos.router, prefix="/api/v1", tags=["videos"])

    @app.middleware("http")
    async def add_timing_header(request: Request, call_next):
        start_time = time.perf_counter()
        response = await call_next(request)
        process_time = time.perf_counter() - start_time
        response.headers["X-Process-Time"] = str(process_time)
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ):
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=jsonable_encoder(ValidationError(errors=exc.errors()).to_dict()),
        )

    @app.exception_handler(SyncException)
    async def sync_exception_handler(request: Request, exc: SyncException):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_dict(),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {str(exc)}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_SERVER_ERROR",
                    "message": "An unexpected error occurred",
                    "status": 500,
                }
            },
        )

    # Prometheus metrics endpoint
    app.mount("/metrics", make_asgi_app())

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "timestamp": time.time()}

    @app.get("/")
    async def root():
        return {
            "name": settings.PROJECT_NAME,
            "version": API_VERSION,
            "description": DESCRIPTION,
            "docs_url": "/docs",
            "health_check": "/health",
            "sync_interval_minutes": settings.SYNC_INTERVAL_MINUTES,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=settings.DEBUG,
        workers=settings.WORKERS,
        log_level=settings.LOG_LEVEL.lower(),
    )
