"""Helpers shared by the restore and save routines."""

from __future__ import annotations

import logging
import os
from urllib.parse import urlparse

import toolkit
from core.config import get_settings
from persistence.contracts import CacheBackend
from uuidcache.constants import REF_BOUND_EVENTS, REF_KEY, Events, Outputs, State

logger = logging.getLogger(__name__)


def is_ghes() -> bool:
    host = urlparse(get_settings().server_url).hostname or ""
    return host.upper() != "GITHUB.COM"


def is_exact_key_match(key: str, cache_key: str | None) -> bool:
    return bool(cache_key) and cache_key == key


def set_cache_state(state: str) -> None:
    toolkit.save_state(State.CACHE_MATCHED_KEY.value, state)


def set_cache_hit_output(is_cache_hit: bool) -> None:
    toolkit.set_output(Outputs.CACHE_HIT.value, is_cache_hit)


def get_cache_state() -> str | None:
    cache_key = toolkit.get_state(State.CACHE_MATCHED_KEY.value)
    if cache_key:
        logger.debug("Cache state/key: %s", cache_key)
        return cache_key
    return None


def log_warning(message: str) -> None:
    logger.warning(message)


def is_valid_event() -> bool:
    """Runs triggered by a ref-bound event with a ref present."""
    event = os.environ.get(Events.KEY.value, "")
    return event in REF_BOUND_EVENTS and bool(os.environ.get(REF_KEY))


def get_input_as_array(name: str, *, required: bool = False) -> list[str]:
    return toolkit.get_multiline_input(name, required=required)


def get_input_as_int(name: str, *, required: bool = False) -> int | None:
    value = toolkit.get_input(name, required=required)
    try:
        return int(value)
    except ValueError:
        return None


def is_cache_feature_available(backend: CacheBackend) -> bool:
    if backend.is_available():
        return True

    if is_ghes():
        log_warning(
            "Cache action is only supported on GHES version >= 3.5. If you are on version >=3.5 "
            "Please check with GHES admin if Actions cache service is enabled or not."
        )
        return False

    log_warning(
        "An internal error has occurred in cache backend. "
        "Please check that the cache storage is reachable and writable."
    )
    return False


__all__ = [
    "get_cache_state",
    "get_input_as_array",
    "get_input_as_int",
    "is_cache_feature_available",
    "is_exact_key_match",
    "is_ghes",
    "is_valid_event",
    "log_warning",
    "set_cache_hit_output",
    "set_cache_state",
]
