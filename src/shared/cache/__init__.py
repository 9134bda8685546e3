"""In-process caching."""
from src.shared.cache.ttl_cache import MISSING, CacheSettings, TTLCache

__all__ = [
    "MISSING",
    "CacheSettings",
    "TTLCache",
]
