from __future__ import annotations

import calendar
import datetime
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from errors import InvalidEntryError
from shift_types import ShiftType, is_rest_label, parse_shift_label

NOTE_MAX_LENGTH = 60


@dataclass(frozen=True)
class ScheduleEntry:
    date: str
    shifts: Tuple[ShiftType, ...]
    note: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "shifts": [str(shift) for shift in self.shifts],
            "note": self.note,
        }


@dataclass(frozen=True)
class Member:
    id: str
    name: str
    role: str = ""
    avatar_url: str = ""
    # Treated as read-only; the pipeline swaps in a new mapping on write.
    schedules: Mapping[str, ScheduleEntry] = field(default_factory=dict)

    def entry_for(self, date_value: str | datetime.date) -> Optional[ScheduleEntry]:
        return self.schedules.get(date_key(date_value))

    def sorted_entries(self) -> List[ScheduleEntry]:
        return [self.schedules[key] for key in sorted(self.schedules)]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "role": self.role,
            "avatarUrl": self.avatar_url,
            "schedules": {key: entry.to_dict() for key, entry in sorted(self.schedules.items())},
        }


@dataclass(frozen=True)
class Roster:
    members: Tuple[Member, ...] = ()

    def __iter__(self) -> Iterator[Member]:
        return iter(self.members)

    def __len__(self) -> int:
        return len(self.members)

    def member(self, member_id: str) -> Optional[Member]:
        for member in self.members:
            if member.id == member_id:
                return member
        return None

    def index_of(self, member_id: str) -> int:
        for index, member in enumerate(self.members):
            if member.id == member_id:
                return index
        return -1

    def search(self, query: str) -> List[Member]:
        """Case-insensitive name filter; a blank query returns everyone."""
        needle = (query or "").strip().lower()
        if not needle:
            return list(self.members)
        return [member for member in self.members if needle in member.name.lower()]


@dataclass(frozen=True)
class UpdateCommand:
    target_name: str
    date: str
    shifts: Tuple[ShiftType, ...]


def date_key(value: str | datetime.date) -> str:
    """Return the YYYY-MM-DD key used by member schedules."""
    if isinstance(value, datetime.datetime):
        value = value.date()
    if isinstance(value, datetime.date):
        return value.isoformat()
    if isinstance(value, str):
        try:
            return datetime.date.fromisoformat(value.strip()).isoformat()
        except ValueError:
            pass
    raise InvalidEntryError(f"Date must be YYYY-MM-DD, got {value!r}.")


def make_entry(date_value: str | datetime.date, shifts: Iterable[object], note: str = "") -> ScheduleEntry:
    """Build an entry that satisfies the write invariants."""
    labels = tuple(parse_shift_label(shift) for shift in shifts)
    if not labels:
        raise InvalidEntryError("A saved entry needs at least one shift.")
    note = note or ""
    if len(note) > NOTE_MAX_LENGTH:
        raise InvalidEntryError(f"Note is limited to {NOTE_MAX_LENGTH} characters.")
    return ScheduleEntry(date=date_key(date_value), shifts=labels, note=note)


def is_off_day(entry: Optional[ScheduleEntry]) -> bool:
    if entry is None:
        return False
    return any(is_rest_label(shift) for shift in entry.shifts)


def is_work_day(entry: Optional[ScheduleEntry]) -> bool:
    if entry is None:
        return False
    return any(not is_rest_label(shift) for shift in entry.shifts)


def month_dates(year: int, month: int) -> List[datetime.date]:
    _, days = calendar.monthrange(year, month)
    return [datetime.date(year, month, day) for day in range(1, days + 1)]


def roster_to_payload(roster: Roster) -> List[Dict[str, Any]]:
    return [member.to_dict() for member in roster]
