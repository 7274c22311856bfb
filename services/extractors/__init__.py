from .config_loader import (
    SourceConfig,
    SourceNotFoundError,
    get_source_config,
    list_available_sources,
)

__all__ = [
    "SourceConfig",
    "SourceNotFoundError",
    "get_source_config",
    "list_available_sources",
]
