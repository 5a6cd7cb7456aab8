"""Explorer page rendering, metadata extraction and artifact download."""

from .extractor import (
    AssignedStateStrategy,
    Candidate,
    EmbeddedStateStrategy,
    KeyValueScanStrategy,
    KeywordProximityStrategy,
    MetadataExtractor,
    default_strategies,
)
from .fetcher import ArtifactFetcher
from .renderer import ChromiumRenderer, PageRenderer, StaticRenderer, request_url

__all__ = [
    "ArtifactFetcher",
    "AssignedStateStrategy",
    "Candidate",
    "ChromiumRenderer",
    "EmbeddedStateStrategy",
    "KeyValueScanStrategy",
    "KeywordProximityStrategy",
    "MetadataExtractor",
    "PageRenderer",
    "StaticRenderer",
    "default_strategies",
    "request_url",
]
