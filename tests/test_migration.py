from __future__ import annotations

import copy
import json
import sys
from pathlib import Path

import pytest

APP_DIR = Path(__file__).resolve().parents[1] / "app"
if str(APP_DIR) not in sys.path:
    sys.path.insert(0, str(APP_DIR))

from errors import RosterFormatError  # noqa: E402
from migration import (  # noqa: E402
    dump_roster_json,
    load_roster_json,
    migrate_legacy_entries,
    normalize_roster,
    roster_from_payload,
)
from roster import Member, Roster, ScheduleEntry  # noqa: E402
from shift_types import ShiftType  # noqa: E402


def _legacy_payload():
    return [
        {
            "id": "member-0",
            "name": "佐藤 健一",
            "role": "部長",
            "avatarUrl": "https://example.test/a.png",
            "schedules": {
                "2024-05-01": {"date": "2024-05-01", "shift": "朝N", "note": "取材A"},
                "2024-05-02": {"date": "2024-05-02", "shifts": ["休", "Cナレ"], "note": ""},
            },
        }
    ]


def test_legacy_single_shift_is_wrapped():
    migrated = migrate_legacy_entries(_legacy_payload())

    entry = migrated[0]["schedules"]["2024-05-01"]
    assert entry["shifts"] == ["朝N"]
    assert "shift" not in entry
    assert entry["note"] == "取材A"
    assert migrated[0]["schedules"]["2024-05-02"]["shifts"] == ["休", "Cナレ"]


def test_migration_is_idempotent_and_does_not_touch_source():
    source = _legacy_payload()
    snapshot = copy.deepcopy(source)

    once = migrate_legacy_entries(source)
    twice = migrate_legacy_entries(once)

    assert once == twice
    assert source == snapshot


def test_migration_is_total_on_odd_shapes():
    assert migrate_legacy_entries({"not": "a list"}) == {"not": "a list"}
    assert migrate_legacy_entries([1, "x", {"id": "a"}]) == [1, "x", {"id": "a"}]
    assert migrate_legacy_entries([{"id": "a", "schedules": {"d": None}}]) == [{"id": "a", "schedules": {"d": None}}]


def test_parse_produces_typed_roster():
    roster = roster_from_payload(migrate_legacy_entries(_legacy_payload()))

    member = roster.members[0]
    assert member.avatar_url == "https://example.test/a.png"
    assert member.schedules["2024-05-01"].shifts == (ShiftType.MORNING_N,)
    assert member.schedules["2024-05-02"].shifts == (ShiftType.OFF, ShiftType.C_NARRE)


@pytest.mark.parametrize(
    "payload",
    [
        {"members": []},
        [{"name": "no id"}],
        [{"id": "a", "name": "A", "schedules": {"2024-05-01": {"date": "2024-05-01", "shifts": ["遅番"]}}}],
        [{"id": "a", "name": "A", "schedules": {"x": {"date": "tomorrow", "shifts": ["休"]}}}],
        [{"id": "a", "name": "A"}, {"id": "a", "name": "B"}],
    ],
)
def test_structurally_invalid_payloads_are_rejected(payload):
    with pytest.raises(RosterFormatError):
        roster_from_payload(payload)


def test_overlong_notes_are_clipped_on_load():
    payload = [{"id": "a", "name": "A", "schedules": {"2024-05-01": {"date": "2024-05-01", "shifts": ["休"], "note": "x" * 80}}}]

    roster = roster_from_payload(payload)

    assert len(roster.members[0].schedules["2024-05-01"].note) == 60


def test_load_roster_json_rejects_garbage():
    with pytest.raises(RosterFormatError):
        load_roster_json("{not json")
    with pytest.raises(RosterFormatError):
        load_roster_json("")


def test_round_trip_preserves_current_format_roster():
    roster = Roster(
        members=(
            Member(
                id="member-0",
                name="佐藤 健一",
                role="部長",
                avatar_url="a.png",
                schedules={
                    "2024-05-01": ScheduleEntry("2024-05-01", (ShiftType.CATCH_M, ShiftType.COMING_SHADOW), "取材A"),
                    "2024-05-03": ScheduleEntry("2024-05-03", (ShiftType.OFF,), ""),
                },
            ),
            Member(id="member-1", name="鈴木 一郎", role="メンバー", avatar_url="b.png", schedules={}),
        )
    )

    restored = load_roster_json(dump_roster_json(roster))

    assert restored == roster
    assert normalize_roster(roster) == roster
    assert normalize_roster(normalize_roster(roster)) == normalize_roster(roster)


def test_dump_keeps_labels_readable():
    roster = Roster(members=(Member(id="m", name="A", schedules={"2024-05-01": ScheduleEntry("2024-05-01", (ShiftType.OFF,), "")}),))

    payload = json.loads(dump_roster_json(roster))

    assert payload[0]["schedules"]["2024-05-01"]["shifts"] == ["休"]
    assert "休" in dump_roster_json(roster)
