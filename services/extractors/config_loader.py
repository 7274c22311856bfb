# services/extractors/config_loader.py
"""
Loads the selector configuration from ``configs/sources.yaml`` and validates it
with Pydantic models.  The file can contain a top-level ``sources`` key or
just the mapping of source names → config dictionaries.

Public API:
* ``get_source_config(name)`` – returns a validated ``SourceConfig`` or
  raises ``SourceNotFoundError``.
* ``list_available_sources()`` – convenience helper for the CLI.
"""

from pathlib import Path
from typing import Dict, List, Optional

import yaml
from pydantic import BaseModel, Field

from core.config import get_settings


class ListPageConfig(BaseModel):
    """Selectors applied to a listing/roster page."""
    container: str
    link: Optional[str] = None
    image: Optional[str] = None
    date: Optional[str] = None
    name: Optional[str] = None
    paragraphs: Optional[str] = None
    title: Optional[str] = None
    body: Optional[str] = None


class DetailPageConfig(BaseModel):
    """Selectors applied to a single detail page."""
    title: Optional[str] = None
    content: List[str] = Field(default_factory=list)
    fallback: Optional[str] = None
    strip_prefixes: List[str] = Field(default_factory=list)
    title_replacements: Dict[str, str] = Field(default_factory=dict)


class SourceConfig(BaseModel):
    """Complete configuration for a single upstream source."""
    id_prefix: str
    category: str
    list_page: Optional[ListPageConfig] = None
    detail_page: Optional[DetailPageConfig] = None
    image_rewrites: Dict[str, str] = Field(default_factory=dict)


class AllSources(BaseModel):
    """Top-level container – maps source name → its config."""
    sources: Dict[str, SourceConfig]


# ----------------------------------------------------------------------
# Internal helpers & caching
# ----------------------------------------------------------------------
_cached: Dict[Path, AllSources] = {}


def _config_path() -> Path:
    return Path(get_settings().SOURCES_CONFIG_PATH)


def _load_yaml(path: Path) -> dict:
    """Read the YAML file and return the inner ``sources`` mapping."""
    with path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}
        return raw.get("sources", raw)


def _load_all(path: Optional[Path] = None) -> AllSources:
    """Parse and validate the whole file once per path."""
    path = path or _config_path()
    if path not in _cached:
        _cached[path] = AllSources(sources=_load_yaml(path))
    return _cached[path]


class SourceNotFoundError(KeyError):
    """Raised when a requested source does not exist in sources.yaml."""

    def __init__(self, source_name: str):
        super().__init__(f"Source '{source_name}' not found.")
        self.source_name = source_name


# ----------------------------------------------------------------------
# Public API
# ----------------------------------------------------------------------
def get_source_config(source_name: str, path: Optional[Path] = None) -> SourceConfig:
    """
    Return a **validated** ``SourceConfig`` for the requested source.

    Raises
    ------
    SourceNotFoundError
        If the source name is not present in the YAML.
    pydantic.ValidationError
        If the YAML exists but does not conform to the schema.
    """
    all_cfg = _load_all(path)
    try:
        return all_cfg.sources[source_name]
    except KeyError as exc:
        raise SourceNotFoundError(source_name) from exc


def list_available_sources(path: Optional[Path] = None) -> List[str]:
    return list(_load_all(path).sources.keys())
