"""Shared pytest fixtures for blog-sync tests."""

import os
from datetime import datetime
from pathlib import Path

import pytest
from dotenv import load_dotenv

from blog_sync.config import Settings

load_dotenv()


def pytest_addoption(parser):
    """Add custom CLI options for test filtering."""
    parser.addoption(
        "--run-live",
        action="store_true",
        default=False,
        help="Run tests that require a live blog account",
    )


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "live: mark test as requiring a live blog account"
    )


def pytest_collection_modifyitems(config, items):
    """Skip live tests unless --run-live is passed."""
    if config.getoption("--run-live"):
        return
    skip_live = pytest.mark.skip(reason="need --run-live option to run")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every WRITEAS_* / config variable from the environment."""
    for key in list(os.environ):
        if key.startswith("WRITEAS_") or key in ("BLOG_SYNC_CONFIG", "LOG_LEVEL"):
            monkeypatch.delenv(key, raising=False)
    return monkeypatch


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a temporary blog directory."""
    return Settings(
        alias="myblog",
        login="alice",
        password="secret",
        root_dir=tmp_path,
    )


@pytest.fixture
def write_post(tmp_path):
    """Factory fixture writing a file below tmp_path with a given mtime."""

    def _write(name: str, content: str | bytes, mtime: datetime | None = None) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
        if mtime is not None:
            ts = mtime.timestamp()
            os.utime(path, (ts, ts))
        return path

    return _write
