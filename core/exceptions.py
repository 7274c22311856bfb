# core/exceptions.py
"""
Error taxonomy for the sync pipeline.

Batch passes catch everything below at the item boundary and log it; the
interactive single-item resync lets these propagate so the API layer can turn
them into an error response via ``to_dict()``.
"""

from typing import Any, Dict, List, Optional


class SyncException(Exception):
    """Base class for every error the service raises on purpose."""

    code = "SYNC_ERROR"
    status_code = 500

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "status": self.status_code,
            }
        }


# ----------------------------------------------------------------------
# Upstream fetching
# ----------------------------------------------------------------------
class FetchFailure(SyncException):
    """Any failure reaching an upstream page."""

    code = "FETCH_FAILURE"
    status_code = 502

    def __init__(self, url: str, message: str):
        super().__init__(message)
        self.url = url


class FetchError(FetchFailure):
    """Upstream answered with a non-success HTTP status."""

    code = "FETCH_ERROR"

    def __init__(self, url: str, status: int):
        super().__init__(url, f"Failed to fetch {url}: HTTP {status}")
        self.status = status


class NetworkError(FetchFailure):
    """Upstream could not be reached at all (DNS, connect, timeout...)."""

    code = "NETWORK_ERROR"

    def __init__(self, url: str, reason: str):
        super().__init__(url, f"Network error fetching {url}: {reason}")
        self.reason = reason


# ----------------------------------------------------------------------
# Extraction
# ----------------------------------------------------------------------
class ExtractionEmpty(SyncException):
    """An expected content selector matched nothing."""

    code = "EXTRACTION_EMPTY"
    status_code = 422

    def __init__(self, url: str, selectors: List[str]):
        super().__init__(f"No content found at {url} for selectors {selectors}")
        self.url = url
        self.selectors = selectors


# ----------------------------------------------------------------------
# Persistence
# ----------------------------------------------------------------------
class PersistenceFailure(SyncException):
    """The store rejected a write."""

    code = "PERSISTENCE_FAILURE"
    status_code = 500


class CardNotFound(SyncException):
    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, card_id: str):
        super().__init__(f"Card '{card_id}' not found")
        self.card_id = card_id


class MissingResourceLink(SyncException):
    """Resync requested for a record that was authored by hand."""

    code = "MISSING_RESOURCE_LINK"
    status_code = 400

    def __init__(self, card_id: str):
        super().__init__("This item was added manually, cannot be synced")
        self.card_id = card_id


class ValidationError(SyncException):
    """Request payload did not validate."""

    code = "VALIDATION_ERROR"
    status_code = 422

    def __init__(self, errors: List[Any]):
        super().__init__("Request validation failed")
        self.errors = errors

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["error"]["details"] = self.errors
        return payload
