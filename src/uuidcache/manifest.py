"""Manifest of per-directory cache identifiers."""

from __future__ import annotations

from pathlib import Path
from typing import List

from pydantic import RootModel


class UuidManifest(RootModel[List[str]]):
    """Ordered UUIDs of the directories a save attempted."""


def read_manifest(path: Path) -> list[str]:
    return UuidManifest.model_validate_json(path.read_text(encoding="utf-8")).root


def write_manifest(path: Path, uuids: list[str]) -> None:
    """Fully rewrite the manifest file with ``uuids``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(UuidManifest(list(uuids)).model_dump_json(), encoding="utf-8")


__all__ = ["UuidManifest", "read_manifest", "write_manifest"]
