from . import cards, sync, videos

__all__ = ["cards", "sync", "videos"]
