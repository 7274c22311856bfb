from .base import CardStore, VideoStore
from .memory import InMemoryCardStore, InMemoryVideoStore
from .sql import SqlCardStore, SqlVideoStore, create_sql_stores

__all__ = [
    "CardStore",
    "VideoStore",
    "InMemoryCardStore",
    "InMemoryVideoStore",
    "SqlCardStore",
    "SqlVideoStore",
    "create_sql_stores",
]
