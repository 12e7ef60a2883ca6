"""Local response cache with fixed expiry."""

from .models import CacheEntry
from .store import ResponseCache

__all__ = [
    "CacheEntry",
    "ResponseCache",
]
