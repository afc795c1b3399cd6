from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path

import toolkit
from core.config import get_settings
from persistence.cache import build_backend
from toolkit.core import read_records
from uuidcache import restore, save
from uuidcache.constants import MANIFEST_FILE

KEY = "node-test"


def _next_job(tmp_path: Path, monkeypatch, job: str) -> None:
    monkeypatch.setenv("GITHUB_OUTPUT", str(tmp_path / job / "output"))
    monkeypatch.setenv("GITHUB_STATE", str(tmp_path / job / "state"))
    get_settings.cache_clear()


def test_save_and_restore_with_local_backend(
    tmp_path: Path, workspace: Path, set_inputs, runner_files, monkeypatch, caplog
) -> None:
    caplog.set_level(logging.INFO)
    build = workspace / "test-build"
    build.mkdir()
    (build / "uuid").write_text("abc123\n", encoding="utf-8")
    (build / "bundle.js").write_text("console.log('cached')", encoding="utf-8")
    set_inputs(key=KEY, path="test-build")

    # First job: nothing cached yet.
    assert restore.run() == 0
    assert runner_files.outputs("cache-hit") == []
    assert runner_files.states("CACHE_KEY") == [KEY]

    monkeypatch.setenv("STATE_CACHE_KEY", KEY)
    assert save.run() == 0
    assert json.loads((workspace / MANIFEST_FILE).read_text(encoding="utf-8")) == ["abc123"]
    committed = sorted(entry.cache_key for entry in build_backend().list_entries() if entry.committed)
    assert committed == ["abc123", KEY]
    assert f"Cache saved with key: {KEY}" in caplog.messages

    # Second job starts from a clean workspace.
    shutil.rmtree(build)
    (workspace / MANIFEST_FILE).unlink()
    monkeypatch.delenv("STATE_CACHE_KEY")
    _next_job(tmp_path, monkeypatch, "second")

    assert restore.run() == 0
    assert (build / "bundle.js").read_text(encoding="utf-8") == "console.log('cached')"
    assert (build / "uuid").read_text(encoding="utf-8") == "abc123\n"

    second = type(runner_files)(tmp_path / "second" / "output", tmp_path / "second" / "state")
    assert second.outputs("cache-hit") == ["true"]
    assert second.states("CACHE_RESULT") == [KEY]

    # Exact hit, so the save step of the second job does nothing.
    caplog.clear()
    monkeypatch.setenv("STATE_CACHE_KEY", KEY)
    monkeypatch.setenv("STATE_CACHE_RESULT", KEY)
    assert save.run() == 0
    assert f"Cache hit occurred on the primary key {KEY}, not saving cache." in caplog.messages
    assert len(build_backend().list_entries()) == 2


def _committed_keys() -> list[str]:
    return sorted(entry.cache_key for entry in build_backend().list_entries() if entry.committed)


def _warnings(caplog) -> list[str]:
    return [r.getMessage() for r in caplog.records if r.levelno == logging.WARNING]


def test_separate_steps_hand_over_key_through_runner_env(
    tmp_path: Path, workspace: Path, set_inputs, monkeypatch, caplog
) -> None:
    build = workspace / "test-build"
    build.mkdir()
    (build / "uuid").write_text("abc123", encoding="utf-8")
    env_file = tmp_path / "runner" / "env"
    monkeypatch.setenv("GITHUB_ENV", str(env_file))
    monkeypatch.setenv("GITHUB_STATE", str(tmp_path / "restore-step" / "state"))
    set_inputs(key=KEY, path="test-build")

    assert restore.run() == 0

    # The runner starts the next step with a fresh state file and the exported env.
    for name, value in read_records(env_file).items():
        monkeypatch.setenv(name, value)
    monkeypatch.setenv("GITHUB_STATE", str(tmp_path / "save-step" / "state"))

    assert save.run() == 0

    assert _warnings(caplog) == []
    assert _committed_keys() == ["abc123", KEY]


def test_save_directory_with_glob_characters(
    workspace: Path, set_inputs, monkeypatch, caplog
) -> None:
    build = workspace / "builds" / "[x]"
    build.mkdir(parents=True)
    (build / "uuid").write_text("abc123", encoding="utf-8")
    monkeypatch.setenv("STATE_CACHE_KEY", KEY)
    set_inputs(path="builds/*")

    assert save.run() == 0

    assert _warnings(caplog) == []
    assert _committed_keys() == ["abc123", KEY]


def test_local_state_from_previous_run_does_not_skip_save(
    tmp_path: Path, workspace: Path, set_inputs, monkeypatch, caplog
) -> None:
    monkeypatch.delenv("GITHUB_STATE")
    monkeypatch.setenv("UUIDCACHE_STATE_FILE", str(tmp_path / "local" / "state"))
    get_settings.cache_clear()
    toolkit.save_state("CACHE_RESULT", KEY)

    build = workspace / "test-build"
    build.mkdir()
    (build / "uuid").write_text("abc123", encoding="utf-8")
    set_inputs(key=KEY, path="test-build")

    assert restore.run() == 0
    assert toolkit.get_state("CACHE_RESULT") == ""

    assert save.run() == 0
    assert _committed_keys() == ["abc123", KEY]
