from __future__ import annotations

import sys
from pathlib import Path

import pytest

APP_DIR = Path(__file__).resolve().parents[1] / "app"
if str(APP_DIR) not in sys.path:
    sys.path.insert(0, str(APP_DIR))

from errors import InvalidEntryError, UnknownMemberError  # noqa: E402
from migration import dump_roster_json, load_roster_json  # noqa: E402
from pipeline import apply_batch_updates, apply_batch_updates_with_report, apply_direct_edit  # noqa: E402
from roster import Member, Roster, ScheduleEntry, UpdateCommand  # noqa: E402
from shift_types import SHIFT_LABELS, ShiftType  # noqa: E402

DAY = "2024-05-01"
NEXT_DAY = "2024-05-02"


@pytest.fixture()
def roster() -> Roster:
    return Roster(
        members=(
            Member(
                id="member-0",
                name="佐藤 健一",
                schedules={
                    DAY: ScheduleEntry(DAY, (ShiftType.MORNING_N,), "取材A"),
                    NEXT_DAY: ScheduleEntry(NEXT_DAY, (ShiftType.OFF,), ""),
                },
            ),
            Member(
                id="member-1",
                name="鈴木 一郎",
                schedules={DAY: ScheduleEntry(DAY, (ShiftType.NIGHT_N,), "")},
            ),
        )
    )


def test_direct_edit_overwrites_entry(roster):
    entry = ScheduleEntry(DAY, (ShiftType.C_NARRE, ShiftType.RELAY_1), "リハ")

    updated = apply_direct_edit(roster, "member-0", entry)

    assert updated.member("member-0").schedules[DAY] == entry
    # Old note is gone: a full overwrite, not a merge.
    assert updated.member("member-0").schedules[DAY].note == "リハ"


def test_direct_edit_leaves_everything_else_shared(roster):
    entry = ScheduleEntry(DAY, (ShiftType.OFF,), "")

    updated = apply_direct_edit(roster, "member-0", entry)

    assert updated is not roster
    assert updated.members[1] is roster.members[1]
    assert updated.member("member-0").schedules[NEXT_DAY] is roster.members[0].schedules[NEXT_DAY]
    # The input roster is untouched.
    assert roster.members[0].schedules[DAY].shifts == (ShiftType.MORNING_N,)


def test_direct_edit_creates_entry_for_new_date(roster):
    entry = ScheduleEntry("2024-05-10", (ShiftType.DAY_MID,), "")

    updated = apply_direct_edit(roster, "member-1", entry)

    assert updated.member("member-1").schedules["2024-05-10"] == entry
    assert "2024-05-10" not in roster.member("member-1").schedules


def test_direct_edit_rejects_unknown_member(roster):
    with pytest.raises(UnknownMemberError):
        apply_direct_edit(roster, "member-99", ScheduleEntry(DAY, (ShiftType.OFF,), ""))


@pytest.mark.parametrize(
    "entry",
    [
        ScheduleEntry(DAY, (), ""),
        ScheduleEntry(DAY, ("早番",), ""),
        ScheduleEntry(DAY, (ShiftType.OFF,), "x" * 61),
        ScheduleEntry("2024/05/01", (ShiftType.OFF,), ""),
    ],
)
def test_direct_edit_rejects_invalid_entries(roster, entry):
    with pytest.raises(InvalidEntryError):
        apply_direct_edit(roster, "member-0", entry)


def test_batch_replaces_shifts_and_keeps_note(roster):
    commands = [UpdateCommand("佐藤", DAY, (ShiftType.CATCH_S,))]

    updated = apply_batch_updates(roster, commands)

    entry = updated.member("member-0").schedules[DAY]
    assert entry.shifts == (ShiftType.CATCH_S,)
    assert entry.note == "取材A"
    assert entry.date == DAY


def test_batch_creates_missing_entry_with_empty_note(roster):
    updated = apply_batch_updates(roster, [UpdateCommand("鈴木 一郎さん", NEXT_DAY, (ShiftType.OFF,))])

    assert updated.member("member-1").schedules[NEXT_DAY] == ScheduleEntry(NEXT_DAY, (ShiftType.OFF,), "")


def test_batch_skips_unresolved_names(roster):
    result = apply_batch_updates_with_report(
        roster,
        [
            UpdateCommand("高橋", DAY, (ShiftType.OFF,)),
            UpdateCommand("鈴木", DAY, (ShiftType.OFF,)),
        ],
    )

    assert [command.target_name for command in result.skipped] == ["高橋"]
    assert [command.target_name for command in result.applied] == ["鈴木"]
    assert result.roster.member("member-1").schedules[DAY].shifts == (ShiftType.OFF,)
    assert result.roster.member("member-0") is roster.member("member-0")


def test_batch_with_only_unresolved_names_has_no_effect(roster):
    assert apply_batch_updates(roster, [UpdateCommand("高橋", DAY, (ShiftType.OFF,))]) == roster


def test_batch_skips_empty_or_invalid_shift_sets(roster):
    result = apply_batch_updates_with_report(
        roster,
        [
            UpdateCommand("佐藤", DAY, ()),
            UpdateCommand("佐藤", DAY, ("遅番",)),
            UpdateCommand("佐藤", "not-a-date", (ShiftType.OFF,)),
        ],
    )

    assert len(result.skipped) == 3
    assert result.roster == roster


def test_batch_later_command_wins_on_same_cell(roster):
    commands = [
        UpdateCommand("佐藤", DAY, (ShiftType.NIGHT_S,)),
        UpdateCommand("佐藤 健一", DAY, (ShiftType.DAY_N, ShiftType.RELAY_2)),
    ]

    updated = apply_batch_updates(roster, commands)

    assert updated.member("member-0").schedules[DAY].shifts == (ShiftType.DAY_N, ShiftType.RELAY_2)


def test_batch_order_does_not_matter_for_distinct_cells(roster):
    first = UpdateCommand("佐藤", NEXT_DAY, (ShiftType.CATCH_E,))
    second = UpdateCommand("鈴木", DAY, (ShiftType.ASADORE_M,))

    assert apply_batch_updates(roster, [first, second]) == apply_batch_updates(roster, [second, first])


def test_batch_accepts_plain_string_labels(roster):
    updated = apply_batch_updates(roster, [UpdateCommand("佐藤", DAY, ("Cナレ",))])

    assert updated.member("member-0").schedules[DAY].shifts == (ShiftType.C_NARRE,)


def test_direct_edit_stores_canonical_labels(roster):
    entry = ScheduleEntry(DAY, (" Cナレ ", "休"), "リハ")

    updated = apply_direct_edit(roster, "member-0", entry)

    stored = updated.member("member-0").schedules[DAY]
    assert stored.shifts == (ShiftType.C_NARRE, ShiftType.OFF)
    assert all(shift in SHIFT_LABELS for shift in stored.shifts)
    assert (stored.date, stored.note) == (DAY, "リハ")
    assert load_roster_json(dump_roster_json(updated)) == updated
