"""Pytest fixtures for CLI tests."""

import pytest

import promrw.config


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Run every CLI test against a clean configuration."""
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("REMOTE_WRITE_URL", "http://prometheus.test/api/v1/write")
    monkeypatch.setenv("REMOTE_WRITE_LABELS", '{"env": "test"}')
    monkeypatch.delenv("REMOTE_WRITE_HEADERS", raising=False)
    monkeypatch.delenv("REMOTE_WRITE_USER_AGENT", raising=False)

    promrw.config.reset_settings()
    yield
    promrw.config.reset_settings()
