# services/sync/scheduler.py
import asyncio
from typing import Optional

from loguru import logger

from .service import SyncService


class SyncScheduler:
    """Runs ``SyncService.sync_all`` every ``interval_minutes`` until stopped."""

    def __init__(self, service: SyncService, interval_minutes: int):
        self.service = service
        self.interval_seconds = interval_minutes * 60
        self._stop = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.interval_seconds <= 0:
            logger.info("Periodic sync disabled (SYNC_INTERVAL_MINUTES=0)")
            return
        if self.running:
            return
        self._stop.clear()
        self._task = asyncio.create_task(self._loop())
        logger.info(f"Periodic sync every {self.interval_seconds // 60} min")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._stop.set()
        try:
            await self._task
        finally:
            self._task = None

    async def _loop(self) -> None:
        while not self._stop.is_set():
            try:
                await self.service.sync_all()
            except Exception as exc:
                logger.exception(f"Scheduled sync pass crashed: {exc}")

            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                continue
