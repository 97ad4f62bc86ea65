from __future__ import annotations

import logging

import pytest

from common import settings
from common.env import env_bool, env_str
from common.logging import setup_default_logging


def test_env_helpers(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TSP_TEST_BOOL", "yes")
    monkeypatch.setenv("TSP_TEST_STR", "  resources/specs  ")
    assert env_bool("TSP_TEST_BOOL") is True
    assert env_str("TSP_TEST_STR") == "resources/specs"

    monkeypatch.setenv("TSP_TEST_BOOL", "0")
    monkeypatch.setenv("TSP_TEST_STR", "   ")
    assert env_bool("TSP_TEST_BOOL", True) is False
    assert env_str("TSP_TEST_STR", "fallback") == "fallback"

    monkeypatch.setenv("TSP_TEST_BOOL", "maybe")
    assert env_bool("TSP_TEST_BOOL", True) is True
    monkeypatch.delenv("TSP_TEST_BOOL")
    assert env_bool("TSP_TEST_BOOL") is False


def test_settings_reload_from_env(env_settings: pytest.MonkeyPatch) -> None:
    env_settings.setenv("TSP_RESOURCE_DIR", "/tmp/specs")
    env_settings.setenv("TSP_LOG_LEVEL", "debug")
    env_settings.setenv("TSP_WARN_ON_SKIP", "false")
    settings.reload_from_env()
    s = settings.get()
    assert s.RESOURCE_DIR == "/tmp/specs"
    assert s.LOG_LEVEL == "DEBUG"
    assert s.WARN_ON_SKIP is False


def test_setup_default_logging_is_noop_when_configured(monkeypatch: pytest.MonkeyPatch) -> None:
    root = logging.getLogger()
    handler = logging.NullHandler()
    root.addHandler(handler)
    try:
        level = root.level
        setup_default_logging("DEBUG")
        assert root.level == level
    finally:
        root.removeHandler(handler)
