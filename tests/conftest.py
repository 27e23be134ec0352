"""Shared pytest fixtures for logbook tests."""

import tempfile
from pathlib import Path

import pytest

from logbook_notes.config import LogbookConfig, save_config
from logbook_notes.engine import LogbookEngine


@pytest.fixture(autouse=True)
def isolate_config(monkeypatch, tmp_path):
    """Keep tests away from the real user config directory."""
    monkeypatch.delenv("LOGBOOK_CONFIG", raising=False)
    monkeypatch.setattr(
        "logbook_notes.config.user_config_dir",
        lambda app_name: str(tmp_path / "user-config" / app_name),
    )


@pytest.fixture
def temp_dir():
    """Create a temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def logbook_dir(temp_dir):
    """An existing, empty logbook directory."""
    path = temp_dir / "Logbook"
    path.mkdir()
    return path


@pytest.fixture
def engine(logbook_dir):
    """Create a test engine."""
    return LogbookEngine(logbook_dir)


@pytest.fixture
def config_file(temp_dir, logbook_dir):
    """A saved config pointing at ``logbook_dir``."""
    path = temp_dir / "config.json"
    save_config(LogbookConfig(logbook_dir=logbook_dir), path)
    return path
