"""Filesystem archive store for cache entry contents."""

from __future__ import annotations

import shutil
import tarfile
import tempfile
from pathlib import Path
from typing import Sequence

from persistence.hashing import key_digest, sha256_file


class ArchiveStore:
    def __init__(self, base_dir: str | Path) -> None:
        self._base_dir = Path(base_dir)
        self._archives_dir = self._base_dir / "archives"
        self._tmp_dir = self._base_dir / "tmp"
        self._archives_dir.mkdir(parents=True, exist_ok=True)
        self._tmp_dir.mkdir(parents=True, exist_ok=True)

    @property
    def archives_dir(self) -> Path:
        return self._archives_dir

    def archive_path(self, cache_key: str) -> Path:
        return self._archives_dir / f"{key_digest(cache_key)}.tar.gz"

    def pack(
        self,
        paths: Sequence[Path],
        *,
        workspace: Path,
        cache_key: str,
        chunk_size: int,
    ) -> tuple[Path, int, str]:
        """Archive ``paths`` relative to ``workspace`` and upload into the store.

        Returns the stored archive path, its size and its sha256.
        """
        with tempfile.NamedTemporaryFile(
            dir=self._tmp_dir, suffix=".tar.gz", delete=False
        ) as handle:
            staging = Path(handle.name)
        try:
            with tarfile.open(staging, "w:gz") as archive:
                for path in paths:
                    archive.add(path, arcname=path.relative_to(workspace).as_posix())
            dest = self.archive_path(cache_key)
            with staging.open("rb") as src, dest.open("wb") as dst:
                shutil.copyfileobj(src, dst, chunk_size)
        finally:
            staging.unlink(missing_ok=True)
        return dest, dest.stat().st_size, sha256_file(dest)

    def extract(self, archive_path: str | Path, *, workspace: Path) -> None:
        workspace.mkdir(parents=True, exist_ok=True)
        with tarfile.open(archive_path, "r:gz") as archive:
            archive.extractall(workspace, filter="data")

    def discard(self, cache_key: str) -> None:
        self.archive_path(cache_key).unlink(missing_ok=True)


__all__ = ["ArchiveStore"]
