"""URL detection and shortener classification."""

from .detector import URLDetector
from .shorteners import (
    DEFAULT_SHORTENER_DOMAINS,
    ShortenerClassifier,
    ShortenerRegistry,
    normalize_host,
)

__all__ = [
    "DEFAULT_SHORTENER_DOMAINS",
    "ShortenerClassifier",
    "ShortenerRegistry",
    "URLDetector",
    "normalize_host",
]
