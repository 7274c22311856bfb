# services/fetcher/fetcher.py
"""
Async HTTP fetcher used by every extraction recipe.

All requests share one ``httpx.AsyncClient`` with a fixed User-Agent, a
per-request timeout and a semaphore that caps simultaneous requests against
the upstream site.  Transport-level failures are retried with exponential
backoff; HTTP status failures are not.
"""

import asyncio
from typing import Any, Dict, Optional

import httpx
from loguru import logger
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from core.config import Settings, get_settings
from core.exceptions import FetchError, NetworkError


def _log_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception()
    logger.warning(f"Retrying after attempt {retry_state.attempt_number}: {exc}")


class Fetcher:
    def __init__(
        self,
        user_agent: str = "Mozilla/5.0",
        timeout: float = 30.0,
        max_concurrent: int = 5,
        retries: int = 3,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        backoff_max: float = 10.0,
    ):
        self.user_agent = user_agent
        self.retries = retries
        self.backoff_max = backoff_max
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self._client = httpx.AsyncClient(
            headers={"User-Agent": user_agent},
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "Fetcher":
        settings = settings or get_settings()
        return cls(
            user_agent=settings.DEFAULT_USER_AGENT,
            timeout=settings.TIMEOUT,
            max_concurrent=settings.CONCURRENT_SCRAPES,
            retries=settings.FETCH_RETRIES,
            transport=transport,
        )

    async def __aenter__(self) -> "Fetcher":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, max=10),
        retry=retry_if_exception_type(NetworkError),
        before_sleep=_log_retry,
        reraise=True,
    )
    async def _get(self, url: str, params: Optional[Dict[str, Any]]) -> str:
        try:
            async with self._semaphore:
                response = await self._client.get(url, params=params)
        except httpx.TransportError as exc:
            raise NetworkError(url, str(exc) or exc.__class__.__name__) from exc

        if not response.is_success:
            raise FetchError(url, response.status_code)
        return response.text

    async def get_text(self, url: str, params: Optional[Dict[str, Any]] = None) -> str:
        """GET ``url`` and return the body as text."""
        logger.debug(f"GET {url} params={params}")
        get_with_retries = self._get.retry_with(
            stop=stop_after_attempt(self.retries),
            wait=wait_exponential(multiplier=0.5, max=self.backoff_max),
        )
        return await get_with_retries(self, url, params)
