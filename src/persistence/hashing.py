"""Hashing helpers for archive digests and entry file names."""

from __future__ import annotations

import hashlib
from pathlib import Path


def sha256_bytes(data: bytes) -> str:
    """Return hex sha256 of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def sha256_file(path: str | Path, *, chunk_size: int = 1024 * 1024) -> str:
    """Return sha256 of a file by streaming."""
    hasher = hashlib.sha256()
    with Path(path).open("rb") as handle:
        while True:
            chunk = handle.read(chunk_size)
            if not chunk:
                break
            hasher.update(chunk)
    return hasher.hexdigest()


def key_digest(cache_key: str) -> str:
    """Filesystem-safe name derived from a cache key."""
    return sha256_bytes(cache_key.encode("utf-8"))


__all__ = ["key_digest", "sha256_bytes", "sha256_file"]
