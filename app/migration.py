"""Load-time normalization of stored rosters.

Older saves kept a single ``shift`` string per entry. Those records are
rewritten into the ``shifts`` list shape before the payload is validated
into :class:`roster.Roster` values.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from errors import InvalidEntryError, RosterFormatError
from roster import NOTE_MAX_LENGTH, Member, Roster, ScheduleEntry, date_key, roster_to_payload
from shift_types import ShiftType, parse_shift_label


def migrate_legacy_entries(payload: Any) -> Any:
    """Return a copy of ``payload`` with legacy single-shift entries wrapped.

    Total and idempotent: anything that is not shaped like a member list is
    returned untouched, and entries already carrying ``shifts`` pass through.
    """
    if not isinstance(payload, list):
        return payload
    migrated: List[Any] = []
    for member in payload:
        if not isinstance(member, dict) or not isinstance(member.get("schedules"), dict):
            migrated.append(member)
            continue
        schedules: Dict[str, Any] = {}
        for key, entry in member["schedules"].items():
            schedules[key] = _migrate_entry(entry)
        migrated.append({**member, "schedules": schedules})
    return migrated


def _migrate_entry(entry: Any) -> Any:
    if not isinstance(entry, dict):
        return entry
    legacy = entry.get("shift")
    if legacy and not entry.get("shifts"):
        upgraded = {key: value for key, value in entry.items() if key != "shift"}
        upgraded["shifts"] = [legacy]
        return upgraded
    return dict(entry)


class EntryRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    date: str
    shifts: List[ShiftType] = Field(default_factory=list)
    note: str = ""

    @field_validator("date", mode="before")
    @classmethod
    def _normalize_date(cls, value: Any) -> str:
        try:
            return date_key(value)
        except InvalidEntryError as exc:
            raise ValueError(str(exc)) from exc

    @field_validator("shifts", mode="before")
    @classmethod
    def _parse_shifts(cls, value: Any) -> List[ShiftType]:
        if value is None:
            return []
        if not isinstance(value, list):
            raise ValueError("shifts must be a list")
        try:
            return [parse_shift_label(item) for item in value]
        except InvalidEntryError as exc:
            raise ValueError(str(exc)) from exc

    @field_validator("note", mode="before")
    @classmethod
    def _clip_note(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value)[:NOTE_MAX_LENGTH]


class MemberRecord(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str
    name: str
    role: str = ""
    avatar_url: str = Field(default="", alias="avatarUrl")
    schedules: Dict[str, EntryRecord] = Field(default_factory=dict)

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> str:
        if value is None or value == "":
            raise ValueError("member id is required")
        return str(value)


def roster_from_payload(payload: Any) -> Roster:
    """Validate a migrated payload into a roster; raise RosterFormatError on bad shape."""
    if not isinstance(payload, list):
        raise RosterFormatError("Stored roster must be a list of members.")
    members: List[Member] = []
    seen_ids = set()
    for index, raw in enumerate(payload):
        try:
            record = MemberRecord.model_validate(raw)
        except ValidationError as exc:
            raise RosterFormatError(f"Member #{index} is invalid: {exc.errors()[0]['msg']}") from exc
        if record.id in seen_ids:
            raise RosterFormatError(f"Duplicate member id '{record.id}'.")
        seen_ids.add(record.id)
        schedules: Dict[str, ScheduleEntry] = {}
        for entry in record.schedules.values():
            # The entry's own date wins over the mapping key.
            schedules[entry.date] = ScheduleEntry(date=entry.date, shifts=tuple(entry.shifts), note=entry.note)
        members.append(
            Member(
                id=record.id,
                name=record.name,
                role=record.role,
                avatar_url=record.avatar_url,
                schedules=schedules,
            )
        )
    return Roster(members=tuple(members))


def normalize_roster(roster: Roster) -> Roster:
    """Roster-to-roster form of the normalizer; current-format rosters come back equal."""
    return roster_from_payload(migrate_legacy_entries(roster_to_payload(roster)))


def load_roster_json(text: Optional[str]) -> Roster:
    if not text:
        raise RosterFormatError("No stored roster.")
    try:
        payload = json.loads(text)
    except (TypeError, ValueError) as exc:
        raise RosterFormatError(f"Stored roster is not valid JSON: {exc}") from exc
    return roster_from_payload(migrate_legacy_entries(payload))


def dump_roster_json(roster: Roster) -> str:
    return json.dumps(roster_to_payload(roster), ensure_ascii=False)
