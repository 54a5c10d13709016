"""Copy-on-write updates to a roster.

Every function returns a new :class:`Roster`; the input is never mutated.
Members and entries that an update does not touch are carried over by
reference.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

from errors import InvalidEntryError, UnknownMemberError
from identity import resolve_member
from roster import Member, Roster, ScheduleEntry, UpdateCommand, date_key, make_entry
from shift_types import parse_shift_label

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchResult:
    roster: Roster
    applied: Tuple[UpdateCommand, ...] = ()
    skipped: Tuple[UpdateCommand, ...] = ()


def _with_entry(member: Member, entry: ScheduleEntry) -> Member:
    schedules: Dict[str, ScheduleEntry] = dict(member.schedules)
    schedules[entry.date] = entry
    return dataclasses.replace(member, schedules=schedules)


def _replace_member(roster: Roster, index: int, member: Member) -> Roster:
    members = list(roster.members)
    members[index] = member
    return Roster(members=tuple(members))


def apply_direct_edit(roster: Roster, member_id: str, entry: ScheduleEntry) -> Roster:
    """Overwrite ``member_id``'s entry for ``entry.date`` with ``entry``."""
    index = roster.index_of(member_id)
    if index < 0:
        raise UnknownMemberError(member_id)
    if not entry.shifts:
        raise InvalidEntryError("A saved entry needs at least one shift.")
    # Re-validates labels, date and note length; labels are stored in canonical form.
    checked = make_entry(entry.date, entry.shifts, entry.note)
    if checked.date != entry.date:
        raise InvalidEntryError(f"Date must be YYYY-MM-DD, got {entry.date!r}.")
    stored = dataclasses.replace(entry, shifts=checked.shifts)
    return _replace_member(roster, index, _with_entry(roster.members[index], stored))


def apply_batch_updates_with_report(roster: Roster, commands: Iterable[UpdateCommand]) -> BatchResult:
    """Apply commands in order, skipping any whose name does not resolve."""
    members: List[Member] = list(roster.members)
    applied: List[UpdateCommand] = []
    skipped: List[UpdateCommand] = []
    changed = False
    for command in commands:
        try:
            date = date_key(command.date)
            shifts = tuple(parse_shift_label(shift) for shift in command.shifts)
        except InvalidEntryError as exc:
            logger.info("Skipping update for %s: %s", command.target_name, exc)
            skipped.append(command)
            continue
        if not shifts:
            logger.info("Skipping update for %s on %s: empty shift set", command.target_name, date)
            skipped.append(command)
            continue
        # Resolution runs against the working list so roster order is preserved.
        target = resolve_member(Roster(members=tuple(members)), command.target_name)
        if target is None:
            logger.info("Skipping update for unknown member %r on %s", command.target_name, date)
            skipped.append(command)
            continue
        index = next(i for i, member in enumerate(members) if member.id == target.id)
        existing = target.schedules.get(date) or ScheduleEntry(date=date, shifts=(), note="")
        merged = dataclasses.replace(existing, shifts=shifts)
        members[index] = _with_entry(target, merged)
        applied.append(command)
        changed = True
    new_roster = Roster(members=tuple(members)) if changed else roster
    return BatchResult(roster=new_roster, applied=tuple(applied), skipped=tuple(skipped))


def apply_batch_updates(roster: Roster, commands: Iterable[UpdateCommand]) -> Roster:
    return apply_batch_updates_with_report(roster, commands).roster
