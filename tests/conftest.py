"""Shared pytest fixtures for grove tests."""

from __future__ import annotations

import pytest


class FakeClock:
    """Deterministic clock: returns the same second until advanced."""

    def __init__(self, now: int = 1_700_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int = 60) -> int:
        self.now += seconds
        return self.now


@pytest.fixture
def clock():
    """A fake clock starting at a fixed instant."""
    return FakeClock()


@pytest.fixture
def config(tmp_path):
    """Configuration pointing at a database in a temporary directory."""
    from grove.config import GroveConfig

    return GroveConfig(database_path=tmp_path / "graph.db", color="never")


@pytest.fixture
def app(config, clock):
    """App on a fresh temporary database with a fake clock."""
    from grove.app import App

    application = App(config, clock=clock)
    yield application
    application.close()


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch, tmp_path):
    """Keep user config, data dirs and GROVE_* variables out of tests."""
    import os

    for name in list(os.environ):
        if name.startswith("GROVE_"):
            monkeypatch.delenv(name)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg-data"))
    monkeypatch.delenv("NO_COLOR", raising=False)
