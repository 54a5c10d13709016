from __future__ import annotations

import datetime
import json
from pathlib import Path
from typing import Optional

from config import EXPORT_DIR
from errors import RosterFormatError
from migration import migrate_legacy_entries, roster_from_payload
from roster import Roster, roster_to_payload


def _timestamp() -> str:
    return datetime.datetime.now().strftime("%Y%m%d_%H%M%S")


def export_roster(roster: Roster, path: Optional[Path] = None) -> Path:
    """Write the roster to a JSON file and return its path."""
    if path is None:
        EXPORT_DIR.mkdir(parents=True, exist_ok=True)
        path = EXPORT_DIR / f"roster_{_timestamp()}.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(
            {
                "generated_at": datetime.datetime.now(datetime.timezone.utc).isoformat(),
                "members": roster_to_payload(roster),
            },
            ensure_ascii=False,
            indent=2,
        ),
        encoding="utf-8",
    )
    return path


def import_roster(path: Path) -> Roster:
    """Read a roster export; bare member lists from older saves are accepted too."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise RosterFormatError(f"Could not read {path.name}: {exc}") from exc
    members = data.get("members") if isinstance(data, dict) else data
    return roster_from_payload(migrate_legacy_entries(members))
