"""Persistence subsystem exports."""

from persistence.cache import LocalCacheBackend, build_backend
from persistence.contracts import CacheBackend
from persistence.errors import CacheError, ReserveCacheError, ValidationError

__all__ = [
    "CacheBackend",
    "CacheError",
    "LocalCacheBackend",
    "ReserveCacheError",
    "ValidationError",
    "build_backend",
]
