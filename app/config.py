from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

APP_DIR = Path(__file__).resolve().parent
DATA_DIR = Path(os.getenv("STAFFSYNC_DATA_DIR") or (APP_DIR / "data"))
EXPORT_DIR = DATA_DIR / "exports"
DATABASE_URL = os.getenv("STAFFSYNC_DATABASE_URL") or f"sqlite:///{(DATA_DIR / 'roster.db').as_posix()}"

# Versioned so a format change can start from a fresh slot.
STORAGE_KEY = os.getenv("STAFFSYNC_STORAGE_KEY", "staff-sync-data-v1")

VIEW_PASSWORD = os.getenv("STAFFSYNC_VIEW_PASSWORD", "1111")
EDIT_PASSWORD = os.getenv("STAFFSYNC_EDIT_PASSWORD", "9999")

LOG_LEVEL = os.getenv("STAFFSYNC_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Chat model behind the natural-language command box.
COMMAND_MODEL = os.getenv("OPENAI_MODEL", "gpt-4.1-mini")


def ensure_data_dirs() -> None:
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    EXPORT_DIR.mkdir(parents=True, exist_ok=True)


def configure_logging(level: str | None = None) -> None:
    """Apply the process-wide logging setup once."""
    logging.basicConfig(level=(level or LOG_LEVEL), format=LOG_FORMAT)
