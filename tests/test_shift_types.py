from __future__ import annotations

import sys
from pathlib import Path

import pytest

APP_DIR = Path(__file__).resolve().parents[1] / "app"
if str(APP_DIR) not in sys.path:
    sys.path.insert(0, str(APP_DIR))

from errors import InvalidEntryError  # noqa: E402
from shift_types import (  # noqa: E402
    SHIFT_COLORS,
    SHIFT_GROUPS,
    SHIFT_LABELS,
    ShiftType,
    is_rest_label,
    palette_for_shift,
    parse_shift_label,
    working_labels,
)


def test_vocabulary_has_twenty_unique_labels():
    assert len(SHIFT_LABELS) == 20
    assert len({label.value for label in SHIFT_LABELS}) == 20
    assert SHIFT_LABELS[0] is ShiftType.OFF
    assert SHIFT_LABELS[-1] is ShiftType.COMING_SHADOW


@pytest.mark.parametrize("label", ["休", "必休", "休(出)"])
def test_rest_labels(label):
    assert is_rest_label(label)
    assert is_rest_label(parse_shift_label(label))


def test_working_labels_exclude_rest():
    working = working_labels()

    assert len(working) == 17
    assert ShiftType.QUAKE_DRILL in working
    assert not any(is_rest_label(label) for label in working)


def test_enum_members_and_strings_share_dict_keys():
    counts = {ShiftType.NIGHT_N: 3}

    assert counts["夜N"] == 3
    assert str(ShiftType.C_NARRE_1) == "Cナレ①"


def test_parse_shift_label():
    assert parse_shift_label(" 朝N ") is ShiftType.MORNING_N
    assert parse_shift_label(ShiftType.CATCH_E) is ShiftType.CATCH_E
    for bad in ("遅番", "", None, 3):
        with pytest.raises(InvalidEntryError):
            parse_shift_label(bad)


def test_every_label_has_a_group_color():
    grouped = [label for labels in SHIFT_GROUPS.values() for label in labels]

    assert sorted(grouped) == sorted(SHIFT_LABELS)
    assert palette_for_shift(ShiftType.NIGHT_S) == SHIFT_COLORS["Night"]
    assert palette_for_shift(ShiftType.OFF_WORK) == SHIFT_COLORS["Rest"]
