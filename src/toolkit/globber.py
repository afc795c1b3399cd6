"""Lazy directory globbing for cache path patterns."""

from __future__ import annotations

import asyncio
import glob
import os
from pathlib import Path
from typing import AsyncIterator


def resolve_pattern(pattern: str, root: str | Path) -> str:
    """Expand ``~`` and anchor a relative pattern at ``root``."""
    expanded = os.path.expanduser(pattern.strip())
    if os.path.isabs(expanded):
        return expanded
    return os.path.join(str(root), expanded)


async def iter_directories(pattern: str, root: str | Path) -> AsyncIterator[str]:
    """Yield absolute directories matching ``pattern`` in discovery order.

    The sequence is produced lazily from ``glob.iglob`` and cannot be
    restarted; files matched by the pattern are skipped.
    """
    resolved = resolve_pattern(pattern, root)
    for match in glob.iglob(resolved, recursive=True):
        if not os.path.isdir(match):
            continue
        yield os.path.abspath(match)
        await asyncio.sleep(0)


__all__ = ["iter_directories", "resolve_pattern"]
