from __future__ import annotations

import logging

from core.config import get_settings
from uuidcache import utils


def test_is_exact_key_match() -> None:
    assert utils.is_exact_key_match("node-test", "node-test") is True
    assert utils.is_exact_key_match("node-test", "node-") is False
    assert utils.is_exact_key_match("node-test", "Node-Test") is False
    assert utils.is_exact_key_match("node-test", None) is False
    assert utils.is_exact_key_match("node-test", "") is False


def test_is_valid_event_requires_ref_bound_event_and_ref(monkeypatch) -> None:
    assert utils.is_valid_event() is True

    monkeypatch.setenv("GITHUB_EVENT_NAME", "pull_request")
    assert utils.is_valid_event() is True

    monkeypatch.setenv("GITHUB_EVENT_NAME", "commit_comment")
    assert utils.is_valid_event() is False

    monkeypatch.setenv("GITHUB_EVENT_NAME", "push")
    monkeypatch.delenv("GITHUB_REF")
    assert utils.is_valid_event() is False


def test_get_input_as_array(set_inputs) -> None:
    set_inputs(restore_keys="node-\n\n  npm- ")
    assert utils.get_input_as_array("restore-keys") == ["node-", "npm-"]
    assert utils.get_input_as_array("path") == []


def test_get_input_as_int(set_inputs) -> None:
    assert utils.get_input_as_int("upload-chunk-size") is None
    set_inputs(upload_chunk_size="4096")
    assert utils.get_input_as_int("upload-chunk-size") == 4096
    set_inputs(upload_chunk_size="lots")
    assert utils.get_input_as_int("upload-chunk-size") is None


def test_is_ghes(monkeypatch) -> None:
    assert utils.is_ghes() is False

    monkeypatch.setenv("GITHUB_SERVER_URL", "https://ghes.example.com")
    get_settings.cache_clear()
    assert utils.is_ghes() is True


def test_cache_state_round_trip(runner_files) -> None:
    assert utils.get_cache_state() is None
    utils.set_cache_state("node-test")
    assert utils.get_cache_state() == "node-test"
    assert runner_files.states("CACHE_RESULT") == ["node-test"]


def test_set_cache_hit_output(runner_files) -> None:
    utils.set_cache_hit_output(True)
    assert runner_files.outputs("cache-hit") == ["true"]


def test_cache_feature_available(fake_backend, caplog) -> None:
    with caplog.at_level(logging.WARNING):
        assert utils.is_cache_feature_available(fake_backend) is True
    assert caplog.records == []


def test_cache_feature_unavailable_warns(fake_backend, caplog) -> None:
    fake_backend.available = False
    with caplog.at_level(logging.WARNING):
        assert utils.is_cache_feature_available(fake_backend) is False
    assert len(caplog.records) == 1
    assert caplog.records[0].getMessage().startswith("An internal error has occurred in cache backend.")


def test_cache_feature_unavailable_on_ghes_warns(fake_backend, caplog, monkeypatch) -> None:
    monkeypatch.setenv("GITHUB_SERVER_URL", "https://ghes.example.com")
    get_settings.cache_clear()
    fake_backend.available = False
    with caplog.at_level(logging.WARNING):
        assert utils.is_cache_feature_available(fake_backend) is False
    assert "only supported on GHES version >= 3.5" in caplog.records[0].getMessage()
