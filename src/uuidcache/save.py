"""Save routine: per-directory entries keyed by UUID, then the manifest."""

from __future__ import annotations

import asyncio
import glob
import logging
import os
from pathlib import Path
from typing import Sequence

import toolkit
from core.config import get_settings
from persistence.cache import build_backend
from persistence.contracts import CacheBackend
from persistence.errors import ReserveCacheError, ValidationError
from uuidcache import utils
from uuidcache.constants import MANIFEST_FILE, UUID_MARKER_FILE, Events, Inputs, State
from uuidcache.manifest import write_manifest
from uuidcache.supervisor import TransferSupervisor

logger = logging.getLogger(__name__)


async def save(backend: CacheBackend | None = None) -> None:
    """Save every UUID-marked directory and the manifest listing them.

    Never raises and never fails the run; errors end up as warnings.
    """
    try:
        cache = backend or build_backend()
        if not utils.is_cache_feature_available(cache):
            return

        if not utils.is_valid_event():
            utils.log_warning(
                f"Event Validation Error: The event type {os.environ.get(Events.KEY.value)} "
                "is not supported because it's not tied to a branch or tag ref."
            )
            return

        async with TransferSupervisor(utils.log_warning) as supervisor:
            await _save_entries(cache, supervisor)
    except Exception as exc:
        utils.log_warning(str(exc))


async def _save_entries(cache: CacheBackend, supervisor: TransferSupervisor) -> None:
    state = utils.get_cache_state()

    # Inputs are re-evaluated before the save step, so use the key restore used.
    primary_key = toolkit.get_state(State.CACHE_PRIMARY_KEY.value)
    if not primary_key:
        utils.log_warning("Error retrieving key from state.")
        return

    if utils.is_exact_key_match(primary_key, state):
        logger.info("Cache hit occurred on the primary key %s, not saving cache.", primary_key)
        return

    cache_paths = utils.get_input_as_array(Inputs.PATH.value, required=True)
    upload_chunk_size = utils.get_input_as_int(Inputs.UPLOAD_CHUNK_SIZE.value)

    workspace = get_settings().resolved_workspace()
    manifest_path = workspace / MANIFEST_FILE

    for cache_path in cache_paths:
        uuids: list[str] = []
        async for directory in toolkit.iter_directories(cache_path, workspace):
            uuid = _read_marker(Path(directory))
            if uuid is None:
                utils.log_warning(f"UUID file not found for cache in {directory}")
                continue
            # The backend treats paths as patterns; the matched directory is literal.
            await _save_one(cache, supervisor, [glob.escape(directory)], uuid, upload_chunk_size)
            # Attempted directories are listed even when their save failed.
            uuids.append(uuid)

        # Known limitation: each pattern rewrites the manifest with only its own UUIDs.
        write_manifest(manifest_path, uuids)

    if await _save_one(cache, supervisor, [MANIFEST_FILE], primary_key, upload_chunk_size):
        logger.info("Cache saved with key: %s", primary_key)


async def _save_one(
    cache: CacheBackend,
    supervisor: TransferSupervisor,
    paths: Sequence[str],
    key: str,
    upload_chunk_size: int | None,
) -> bool:
    try:
        await supervisor.run(
            cache.save_cache(paths, key, upload_chunk_size=upload_chunk_size)
        )
    except ValidationError:
        raise
    except ReserveCacheError as exc:
        logger.info(str(exc))
        return False
    except Exception as exc:
        utils.log_warning(str(exc))
        return False
    return True


def _read_marker(directory: Path) -> str | None:
    marker = directory / UUID_MARKER_FILE
    if not marker.is_file():
        return None
    try:
        value = marker.read_text(encoding="utf-8").strip()
    except OSError as exc:
        logger.debug("Unreadable UUID file %s: %s", marker, exc)
        return None
    return value or None


def run(backend: CacheBackend | None = None) -> int:
    """Run the save routine to completion and return the exit code."""
    asyncio.run(save(backend))
    return toolkit.exit_code()


__all__ = ["run", "save"]
