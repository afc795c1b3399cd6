# tests/conftest.py
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Sequence

import pytest

import toolkit
from core.config import get_settings


_RUNNER_PREFIXES = ("INPUT_", "STATE_", "GITHUB_", "RUNNER_", "UUIDCACHE_")


class FakeBackend:
    """In-memory stand-in for a cache backend that records every call."""

    def __init__(self) -> None:
        self.available = True
        self.restore_calls: list[tuple[list[str], str, list[str]]] = []
        self.save_calls: list[tuple[list[str], str, int | None]] = []
        self.restore_results: dict[str, Any] = {}
        self.save_errors: dict[str, Exception] = {}

    def is_available(self) -> bool:
        return self.available

    async def restore_cache(
        self,
        paths: Sequence[str],
        primary_key: str,
        restore_keys: Sequence[str] | None = None,
    ) -> str | None:
        self.restore_calls.append((list(paths), primary_key, list(restore_keys or [])))
        result = self.restore_results.get(primary_key)
        if isinstance(result, Exception):
            raise result
        return result

    async def save_cache(
        self,
        paths: Sequence[str],
        key: str,
        *,
        upload_chunk_size: int | None = None,
    ) -> int:
        self.save_calls.append((list(paths), key, upload_chunk_size))
        error = self.save_errors.get(key)
        if error is not None:
            raise error
        return len(self.save_calls)


class RunnerFiles:
    """Readers for the output and state files a runner hands to a step."""

    def __init__(self, output_path: Path, state_path: Path) -> None:
        self.output_path = output_path
        self.state_path = state_path

    def outputs(self, name: str) -> list[str]:
        return _values(self.output_path, name)

    def states(self, name: str) -> list[str]:
        return _values(self.state_path, name)


def _values(path: Path, name: str) -> list[str]:
    if not path.exists():
        return []
    lines = path.read_text(encoding="utf-8").splitlines()
    values: list[str] = []
    idx = 0
    while idx < len(lines):
        key, _, delimiter = lines[idx].partition("<<")
        idx += 1
        collected: list[str] = []
        while idx < len(lines) and lines[idx] != delimiter:
            collected.append(lines[idx])
            idx += 1
        idx += 1
        if key == name:
            values.append("\n".join(collected))
    return values


@pytest.fixture(autouse=True)
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    for name in list(os.environ):
        if name.startswith(_RUNNER_PREFIXES):
            monkeypatch.delenv(name, raising=False)

    root = tmp_path / "workspace"
    root.mkdir()
    monkeypatch.setenv("GITHUB_WORKSPACE", str(root))
    monkeypatch.setenv("GITHUB_OUTPUT", str(tmp_path / "runner" / "output"))
    monkeypatch.setenv("GITHUB_STATE", str(tmp_path / "runner" / "state"))
    monkeypatch.setenv("UUIDCACHE_DIR", str(tmp_path / "store"))
    monkeypatch.setenv("GITHUB_EVENT_NAME", "push")
    monkeypatch.setenv("GITHUB_REF", "refs/heads/feature-branch")
    monkeypatch.chdir(root)

    root_level = logging.getLogger().level
    get_settings.cache_clear()
    toolkit.reset()
    yield root
    get_settings.cache_clear()
    toolkit.reset()
    _drop_cli_handlers()
    logging.getLogger().setLevel(root_level)


@pytest.fixture
def runner_files(tmp_path: Path) -> RunnerFiles:
    return RunnerFiles(tmp_path / "runner" / "output", tmp_path / "runner" / "state")


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def set_inputs(monkeypatch: pytest.MonkeyPatch):
    def _set(**values: str | list[str]) -> None:
        for name, value in values.items():
            rendered = "\n".join(value) if isinstance(value, list) else value
            monkeypatch.setenv(toolkit.input_env_name(name.replace("_", "-")), rendered)

    return _set


def _drop_cli_handlers() -> None:
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_uuidcache_handler", False):
            root.removeHandler(handler)
