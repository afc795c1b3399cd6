"""Lightweight persistence records."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class CacheEntry:
    entry_id: int
    cache_key: str
    status: str
    archive_path: str | None
    archive_size: int | None
    content_hash: str | None
    created_at: datetime
    committed_at: datetime | None
    last_accessed: datetime | None

    @property
    def committed(self) -> bool:
        return self.status == "committed"

    def to_dict(self) -> dict[str, Any]:
        return {
            "entry_id": self.entry_id,
            "cache_key": self.cache_key,
            "status": self.status,
            "archive_path": self.archive_path,
            "archive_size": self.archive_size,
            "content_hash": self.content_hash,
            "created_at": self.created_at.isoformat(),
            "committed_at": self.committed_at.isoformat() if self.committed_at else None,
            "last_accessed": self.last_accessed.isoformat() if self.last_accessed else None,
        }


__all__ = ["CacheEntry"]
