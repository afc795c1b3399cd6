"""Error taxonomy raised by cache backends."""

from __future__ import annotations


class CacheError(Exception):
    """Generic cache transfer failure; callers recover from it."""


class ValidationError(CacheError):
    """The caller supplied a malformed key or path set."""


class ReserveCacheError(CacheError):
    """An entry for the key already exists or is being written."""


__all__ = ["CacheError", "ReserveCacheError", "ValidationError"]
