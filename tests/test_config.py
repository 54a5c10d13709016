from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

APP_DIR = Path(__file__).resolve().parents[1] / "app"
if str(APP_DIR) not in sys.path:
    sys.path.insert(0, str(APP_DIR))

import config  # noqa: E402


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("STAFFSYNC_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("STAFFSYNC_STORAGE_KEY", "staff-sync-data-v2")
    monkeypatch.setenv("STAFFSYNC_EDIT_PASSWORD", "4242")
    monkeypatch.setenv("STAFFSYNC_LOG_LEVEL", "debug")
    monkeypatch.delenv("STAFFSYNC_DATABASE_URL", raising=False)
    try:
        reloaded = importlib.reload(config)

        assert reloaded.DATA_DIR == tmp_path
        assert reloaded.EXPORT_DIR == tmp_path / "exports"
        assert reloaded.DATABASE_URL == f"sqlite:///{(tmp_path / 'roster.db').as_posix()}"
        assert reloaded.STORAGE_KEY == "staff-sync-data-v2"
        assert reloaded.EDIT_PASSWORD == "4242"
        assert reloaded.LOG_LEVEL == "DEBUG"

        reloaded.ensure_data_dirs()
        assert (tmp_path / "exports").is_dir()
    finally:
        monkeypatch.undo()
        importlib.reload(config)


def test_configure_logging_applies_level(monkeypatch):
    calls = {}
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.update(kwargs))

    config.configure_logging("WARNING")

    assert calls == {"level": "WARNING", "format": config.LOG_FORMAT}
