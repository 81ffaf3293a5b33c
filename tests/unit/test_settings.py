"""Tests for environment-driven settings."""

from __future__ import annotations

import logging

import pytest

from actionmap.settings import Settings, configure_logging


class TestSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("ACTIONMAP_LOG_LEVEL", raising=False)
        monkeypatch.delenv("ACTIONMAP_MAX_DOCUMENT_SIZE", raising=False)
        monkeypatch.delenv("ACTIONMAP_MAX_NODE_COUNT", raising=False)
        settings = Settings(_env_file=None)
        assert settings.log_level == "INFO"
        assert settings.max_document_size == 5_000_000
        assert settings.max_node_count == 50_000

    def test_env_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ACTIONMAP_MAX_NODE_COUNT", "10")
        monkeypatch.setenv("ACTIONMAP_LOG_LEVEL", "debug")
        settings = Settings(_env_file=None)
        assert settings.max_node_count == 10
        assert settings.log_level == "debug"

    def test_configure_logging(self, monkeypatch: pytest.MonkeyPatch) -> None:
        calls: list[dict] = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
        configure_logging(Settings(_env_file=None, log_level="warning"))
        assert calls == [{"level": "WARNING"}]
