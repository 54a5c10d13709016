from __future__ import annotations

from enum import Enum
from typing import Dict, List, Tuple

from errors import InvalidEntryError


class ShiftType(str, Enum):
    OFF = "休"
    MORNING_N = "朝N"
    DAY_MID = "昼中"
    DAY_N = "昼N"
    C_NARRE = "Cナレ"
    C_NARRE_1 = "Cナレ①"
    C_NARRE_3 = "Cナレ③"
    NIGHT_N = "夜N"
    NIGHT_S = "夜S"
    QUAKE_DRILL = "地震訓練"
    COMP_OFF = "必休"
    OFF_WORK = "休(出)"
    CATCH_M = "キャッチM"
    CATCH_S = "キャッチS"
    CATCH_E = "キャッチE"
    ASADORE_M = "あさドレM"
    ASADORE_S = "あさドレS"
    RELAY_1 = "あ中継①"
    RELAY_2 = "あ中継②"
    COMING_SHADOW = "カミング影"

    def __str__(self) -> str:
        return self.value

    # Members and their plain-string labels are interchangeable as dict keys.
    __hash__ = str.__hash__


# Declaration order is the display and aggregation order.
SHIFT_LABELS: Tuple[ShiftType, ...] = tuple(ShiftType)

REST_MARKER = "休"

SHIFT_GROUPS: Dict[str, List[ShiftType]] = {
    "Rest": [ShiftType.OFF, ShiftType.COMP_OFF, ShiftType.OFF_WORK],
    "Day": [ShiftType.MORNING_N, ShiftType.DAY_MID, ShiftType.DAY_N],
    "Narration": [ShiftType.C_NARRE, ShiftType.C_NARRE_1, ShiftType.C_NARRE_3],
    "Night": [ShiftType.NIGHT_N, ShiftType.NIGHT_S],
    "Catch": [ShiftType.CATCH_M, ShiftType.CATCH_S, ShiftType.CATCH_E],
    "Asadore": [ShiftType.ASADORE_M, ShiftType.ASADORE_S],
    "Relay": [ShiftType.RELAY_1, ShiftType.RELAY_2],
    "Other": [ShiftType.COMING_SHADOW, ShiftType.QUAKE_DRILL],
}

SHIFT_COLORS: Dict[str, str] = {
    "Rest": "#e2e8f0",
    "Day": "#bae6fd",
    "Narration": "#a7f3d0",
    "Night": "#c7d2fe",
    "Catch": "#fed7aa",
    "Asadore": "#fbcfe8",
    "Relay": "#a5f3fc",
    "Other": "#e9d5ff",
}

_BY_VALUE: Dict[str, ShiftType] = {label.value: label for label in ShiftType}


def is_rest_label(label: str) -> bool:
    """A label is off-duty when it carries the rest glyph (休, 必休, 休(出))."""
    return REST_MARKER in str(label)


def parse_shift_label(value: object) -> ShiftType:
    if isinstance(value, ShiftType):
        return value
    if not isinstance(value, str):
        raise InvalidEntryError(f"Shift label must be a string, got {type(value).__name__}.")
    label = _BY_VALUE.get(value.strip())
    if label is None:
        raise InvalidEntryError(f"Unknown shift label '{value}'.")
    return label


def shift_group(label: str) -> str:
    for group, members in SHIFT_GROUPS.items():
        if label in members:
            return group
    return "Other"


def palette_for_shift(label: str) -> str:
    return SHIFT_COLORS.get(shift_group(label), SHIFT_COLORS["Other"])


def working_labels() -> List[ShiftType]:
    """Vocabulary labels that count as on-duty, in display order."""
    return [label for label in SHIFT_LABELS if not is_rest_label(label)]
