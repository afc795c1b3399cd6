"""Persistence protocol contracts."""

from __future__ import annotations

from typing import Protocol, Sequence

from persistence.models import CacheEntry


class CacheBackend(Protocol):
    def is_available(self) -> bool: ...

    async def restore_cache(
        self,
        paths: Sequence[str],
        primary_key: str,
        restore_keys: Sequence[str] | None = None,
    ) -> str | None: ...

    async def save_cache(
        self,
        paths: Sequence[str],
        key: str,
        *,
        upload_chunk_size: int | None = None,
    ) -> int: ...


class EntryStore(Protocol):
    def reserve(self, cache_key: str) -> int: ...

    def commit(
        self, entry_id: int, *, archive_path: str, archive_size: int, content_hash: str
    ) -> None: ...

    def release(self, entry_id: int) -> None: ...

    def get_committed(self, cache_key: str) -> CacheEntry | None: ...

    def find_by_prefix(self, prefix: str) -> CacheEntry | None: ...

    def touch(self, entry_id: int) -> None: ...

    def list_entries(self) -> list[CacheEntry]: ...


__all__ = ["CacheBackend", "EntryStore"]
