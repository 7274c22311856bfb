# models/sync.py
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ----------------------------------------------------------------------
#  Pass status – used by the sync service to track progress
# ----------------------------------------------------------------------
class SyncStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class SyncAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    SKIP = "skip"


# ----------------------------------------------------------------------
#  Raw record handed from an extractor to the normalizer
# ----------------------------------------------------------------------
class ScrapedItem(BaseModel):
    """
    Fields pulled out of one upstream container element.

    ``content`` is an HTML fragment for rich sources (faculties, centers) and
    plain text for news bodies.  ``resource`` is the detail URL when the
    source has one.
    """

    source: str
    title: Optional[str] = None
    content: Optional[str] = None
    image: Optional[str] = None
    resource: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None
    date_text: Optional[str] = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("*", mode="before")
    @classmethod
    def _strip_and_nullify(cls, v: Optional[Union[str, int]]) -> Optional[Union[str, int]]:
        """Strip strings and turn empty ones into ``None``."""
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v


# ----------------------------------------------------------------------
#  Per-pass report – the service updates this while syncing
# ----------------------------------------------------------------------
class SyncReport(BaseModel):
    source: str
    status: SyncStatus = SyncStatus.PENDING
    created: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0
    errors: List[str] = Field(default_factory=list)
    started_at: datetime = Field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None
    duration_seconds: float = 0.0

    @property
    def writes(self) -> int:
        return self.created + self.updated

    def record(self, action: SyncAction) -> None:
        if action is SyncAction.CREATE:
            self.created += 1
        elif action is SyncAction.UPDATE:
            self.updated += 1
        else:
            self.skipped += 1

    def record_error(self, message: str) -> None:
        self.failed += 1
        self.errors.append(message)

    def finish(self, status: SyncStatus = SyncStatus.COMPLETED) -> "SyncReport":
        self.status = status
        self.finished_at = datetime.now()
        self.duration_seconds = (self.finished_at - self.started_at).total_seconds()
        return self
