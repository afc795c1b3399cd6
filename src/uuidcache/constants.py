"""Names shared by the restore and save routines."""

from __future__ import annotations

from enum import Enum


class Inputs(str, Enum):
    KEY = "key"
    PATH = "path"
    RESTORE_KEYS = "restore-keys"
    UPLOAD_CHUNK_SIZE = "upload-chunk-size"


class Outputs(str, Enum):
    CACHE_HIT = "cache-hit"


class State(str, Enum):
    CACHE_PRIMARY_KEY = "CACHE_KEY"
    CACHE_MATCHED_KEY = "CACHE_RESULT"


class Events(str, Enum):
    KEY = "GITHUB_EVENT_NAME"
    PUSH = "push"
    PULL_REQUEST = "pull_request"
    PULL_REQUEST_TARGET = "pull_request_target"
    SCHEDULE = "schedule"
    WORKFLOW_DISPATCH = "workflow_dispatch"
    WORKFLOW_CALL = "workflow_call"
    WORKFLOW_RUN = "workflow_run"
    MERGE_GROUP = "merge_group"
    REPOSITORY_DISPATCH = "repository_dispatch"
    RELEASE = "release"
    CREATE = "create"


REF_KEY = "GITHUB_REF"

# Events whose runs are tied to a branch or tag ref.
REF_BOUND_EVENTS = frozenset(
    event.value for event in Events if event is not Events.KEY
)

MANIFEST_FILE = "uuids.json"
UUID_MARKER_FILE = "uuid"


__all__ = [
    "Events",
    "Inputs",
    "MANIFEST_FILE",
    "Outputs",
    "REF_BOUND_EVENTS",
    "REF_KEY",
    "State",
    "UUID_MARKER_FILE",
]
