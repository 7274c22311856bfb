from .cache_service import TTLCache

__all__ = ["TTLCache"]
