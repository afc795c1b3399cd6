"""Restore routine: manifest lookup followed by per-directory restores."""

from __future__ import annotations

import asyncio
import logging
import os

import toolkit
from core.config import get_settings
from persistence.cache import build_backend
from persistence.contracts import CacheBackend
from persistence.errors import ValidationError
from uuidcache import utils
from uuidcache.constants import MANIFEST_FILE, Events, Inputs, State
from uuidcache.manifest import read_manifest

logger = logging.getLogger(__name__)


async def restore(backend: CacheBackend | None = None) -> None:
    """Restore the manifest under the primary key, then every listed UUID.

    Never raises: configuration and validation errors fail the run, any
    other error becomes a warning.
    """
    try:
        # Restore starts a job; local state from earlier runs no longer applies.
        toolkit.clear_state()

        cache = backend or build_backend()
        if not utils.is_cache_feature_available(cache):
            utils.set_cache_hit_output(False)
            return

        if not utils.is_valid_event():
            utils.log_warning(
                f"Event Validation Error: The event type {os.environ.get(Events.KEY.value)} "
                "is not supported because it's not tied to a branch or tag ref."
            )
            return

        primary_key = toolkit.get_input(Inputs.KEY.value, required=True)
        toolkit.save_state(State.CACHE_PRIMARY_KEY.value, primary_key)

        restore_keys = utils.get_input_as_array(Inputs.RESTORE_KEYS.value)
        cache_paths = _cache_paths()

        try:
            await _restore_entries(cache, primary_key, restore_keys, cache_paths)
        except ValidationError:
            raise
        except Exception as exc:
            utils.log_warning(str(exc))
            utils.set_cache_hit_output(False)
    except Exception as exc:
        toolkit.set_failed(str(exc))


async def _restore_entries(
    cache: CacheBackend,
    primary_key: str,
    restore_keys: list[str],
    cache_paths: list[str],
) -> None:
    cache_key = await cache.restore_cache([MANIFEST_FILE], primary_key)
    if not cache_key:
        logger.info(
            "Cache not found for input keys: %s", ", ".join([primary_key, *restore_keys])
        )
        return

    manifest_path = get_settings().resolved_workspace() / MANIFEST_FILE
    if not manifest_path.exists():
        logger.info("UUIDs file not found for cache")
        return

    for uuid in read_manifest(manifest_path):
        try:
            uuid_cache_key = await cache.restore_cache(cache_paths, uuid, restore_keys)
            if not uuid_cache_key:
                logger.info(
                    "Cache not found for input keys: %s", ", ".join([uuid, *restore_keys])
                )
                continue
            logger.info("Cache restored with key: %s", uuid_cache_key)
        except ValidationError:
            raise
        except Exception as exc:
            utils.log_warning(str(exc))
            utils.set_cache_hit_output(False)

    utils.set_cache_state(cache_key)

    is_exact_key_match = utils.is_exact_key_match(primary_key, cache_key)
    utils.set_cache_hit_output(is_exact_key_match)

    logger.info("Cache restored from key: %s", cache_key)


def _cache_paths() -> list[str]:
    try:
        return utils.get_input_as_array(Inputs.PATH.value, required=True)
    except toolkit.InputError as exc:
        # Archive members are workspace-relative, so restore proceeds without paths.
        logger.debug("%s; restoring with archived paths", exc)
        return []


def run(backend: CacheBackend | None = None) -> int:
    """Run the restore routine to completion and return the exit code."""
    asyncio.run(restore(backend))
    return toolkit.exit_code()


__all__ = ["restore", "run"]
