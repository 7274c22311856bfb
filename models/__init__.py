from .localized import Bilingual, LocalizedText, as_bilingual, text_for
from .content_card import ContentCard, ImageSource
from .video import Video
from .sync import ScrapedItem, SyncAction, SyncReport, SyncStatus
from .request import (
    CardCreate,
    CardUpdate,
    PublishUpdate,
    ReorderRequest,
    SyncRequest,
    VideoCreate,
    VideoUpdate,
)

__all__ = [
    'Bilingual', 'LocalizedText', 'as_bilingual', 'text_for',
    'ContentCard', 'ImageSource', 'Video',
    'ScrapedItem', 'SyncAction', 'SyncReport', 'SyncStatus',
    'CardCreate', 'CardUpdate', 'PublishUpdate', 'ReorderRequest', 'SyncRequest',
    'VideoCreate', 'VideoUpdate',
]
