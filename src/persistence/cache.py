"""Local filesystem cache backend.

Entries are gzip tarballs of workspace-relative paths, indexed in SQLite.
Keys are immutable once committed: saving an existing key fails with
``ReserveCacheError``. Restore tries the primary key exactly, then each
restore key as a prefix, newest entry first.
"""

from __future__ import annotations

import asyncio
import glob
import logging
import os
import tarfile
from pathlib import Path
from typing import Sequence

from core.config import DEFAULT_UPLOAD_CHUNK_SIZE, Settings, get_settings
from persistence.contracts import EntryStore
from persistence.errors import CacheError, ValidationError
from persistence.fs_store import ArchiveStore
from persistence.hashing import sha256_file
from persistence.models import CacheEntry
from persistence.sqlite_store import SqliteStore
from toolkit.globber import resolve_pattern

logger = logging.getLogger(__name__)

MAX_KEY_LENGTH = 512
MAX_KEY_COUNT = 10


def check_key(key: str) -> None:
    if not key:
        raise ValidationError("Key Validation Error: cache keys cannot be empty.")
    if len(key) > MAX_KEY_LENGTH:
        raise ValidationError(
            f"Key Validation Error: {key} cannot be larger than {MAX_KEY_LENGTH} characters."
        )
    if "," in key:
        raise ValidationError(f"Key Validation Error: {key} cannot contain commas.")


def check_keys(keys: Sequence[str]) -> None:
    if len(keys) > MAX_KEY_COUNT:
        raise ValidationError(
            f"Key Validation Error: Keys are limited to a maximum of {MAX_KEY_COUNT}."
        )
    for key in keys:
        check_key(key)


def check_paths(paths: Sequence[str]) -> None:
    if not paths:
        raise ValidationError(
            "Path Validation Error: At least one directory or file path is required"
        )


class LocalCacheBackend:
    def __init__(
        self,
        base_dir: str | Path,
        *,
        workspace: str | Path,
        upload_chunk_size: int = DEFAULT_UPLOAD_CHUNK_SIZE,
        store: EntryStore | None = None,
    ) -> None:
        self._base_dir = Path(base_dir)
        self._workspace = Path(workspace).resolve()
        self._upload_chunk_size = upload_chunk_size
        self._store = store
        self._archives: ArchiveStore | None = None

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    @property
    def workspace(self) -> Path:
        return self._workspace

    @property
    def store(self) -> EntryStore:
        if self._store is None:
            self._store = SqliteStore(self._base_dir / "metadata.sqlite")
        return self._store

    @property
    def archives(self) -> ArchiveStore:
        if self._archives is None:
            self._archives = ArchiveStore(self._base_dir)
        return self._archives

    def is_available(self) -> bool:
        try:
            self._base_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.debug("Cache directory %s is unusable: %s", self._base_dir, exc)
            return False
        return os.access(self._base_dir, os.W_OK)

    async def restore_cache(
        self,
        paths: Sequence[str],
        primary_key: str,
        restore_keys: Sequence[str] | None = None,
    ) -> str | None:
        keys = [primary_key, *(restore_keys or [])]
        logger.debug("Resolved keys: %s", keys)
        check_keys(keys)
        # Archive members carry workspace-relative names, so paths only matter on save.
        logger.debug("Restore paths: %s", list(paths))
        return await asyncio.to_thread(self._restore, keys)

    async def save_cache(
        self,
        paths: Sequence[str],
        key: str,
        *,
        upload_chunk_size: int | None = None,
    ) -> int:
        check_paths(paths)
        check_key(key)
        resolved = self._resolve_paths(paths)
        chunk_size = upload_chunk_size if upload_chunk_size and upload_chunk_size > 0 else self._upload_chunk_size
        return await asyncio.to_thread(self._save, resolved, key, chunk_size)

    def list_entries(self) -> list[CacheEntry]:
        return self.store.list_entries()

    def _restore(self, keys: list[str]) -> str | None:
        entry = self.store.get_committed(keys[0])
        if entry is None:
            for prefix in keys[1:]:
                entry = self.store.find_by_prefix(prefix)
                if entry is not None:
                    break
        if entry is None:
            return None

        archive_path = Path(entry.archive_path or "")
        if not archive_path.is_file():
            raise CacheError(f"Archive for cache key {entry.cache_key} is missing.")
        if sha256_file(archive_path) != entry.content_hash:
            raise CacheError(f"Archive for cache key {entry.cache_key} failed its integrity check.")

        size = entry.archive_size or 0
        logger.info("Cache Size: ~%d MB (%d B)", round(size / (1024 * 1024)), size)
        try:
            self.archives.extract(archive_path, workspace=self._workspace)
        except (OSError, tarfile.TarError) as exc:
            raise CacheError(f"Failed to extract cache {entry.cache_key}: {exc}") from exc
        self.store.touch(entry.entry_id)
        return entry.cache_key

    def _save(self, paths: list[Path], key: str, chunk_size: int) -> int:
        entry_id = self.store.reserve(key)
        logger.debug("Cache ID: %d", entry_id)
        try:
            archive_path, size, digest = self.archives.pack(
                paths,
                workspace=self._workspace,
                cache_key=key,
                chunk_size=chunk_size,
            )
            self.store.commit(
                entry_id,
                archive_path=str(archive_path),
                archive_size=size,
                content_hash=digest,
            )
        except (OSError, tarfile.TarError) as exc:
            self.store.release(entry_id)
            self.archives.discard(key)
            raise CacheError(f"Failed to save cache {key}: {exc}") from exc
        logger.info("Cache Size: ~%d MB (%d B)", round(size / (1024 * 1024)), size)
        return entry_id

    def _resolve_paths(self, paths: Sequence[str]) -> list[Path]:
        resolved: list[Path] = []
        for raw in paths:
            pattern = resolve_pattern(raw, self._workspace)
            for match in sorted(glob.glob(pattern, recursive=True)):
                path = Path(match).resolve()
                if not path.is_relative_to(self._workspace):
                    raise ValidationError(
                        f"Path Validation Error: {raw} resolves outside the workspace {self._workspace}"
                    )
                if path not in resolved:
                    resolved.append(path)
        if not resolved:
            raise CacheError(
                "Path Validation Error: Path(s) specified in the action for caching do(es) not exist, "
                "hence no cache is being saved."
            )
        return resolved


def build_backend(settings: Settings | None = None) -> LocalCacheBackend:
    """Wire the local backend from settings."""
    resolved = settings or get_settings()
    return LocalCacheBackend(
        resolved.cache_dir,
        workspace=resolved.resolved_workspace(),
        upload_chunk_size=resolved.upload_chunk_size,
    )


__all__ = [
    "LocalCacheBackend",
    "MAX_KEY_COUNT",
    "MAX_KEY_LENGTH",
    "build_backend",
    "check_key",
    "check_keys",
    "check_paths",
]
