from __future__ import annotations

import datetime
import random
from typing import Dict, List, Optional, Tuple

from roster import Member, Roster, ScheduleEntry, month_dates
from shift_types import ShiftType

DEMO_NAMES = [
    "佐藤 健一", "鈴木 一郎", "高橋 花子", "田中 美咲", "伊藤 翔太",
    "渡辺 謙", "山本 未来", "中村 優", "小林 さくら", "加藤 剛",
    "吉田 輝", "山田 太郎", "佐々木 希", "山口 達也", "松本 潤",
    "井上 真央", "木村 拓哉", "林 修", "清水 翔太", "山崎 賢人",
    "池田 エライザ", "橋本 環奈", "中川 大志", "村上 信五", "近藤 真彦",
    "石川 遼", "長谷川 博己", "藤原 竜也", "岡田 准一", "斎藤 工",
]
DEMO_ROLES = ["部長", "課長", "リーダー", "メンバー"]
AVATAR_URL = "https://picsum.photos/seed/{seed}/32/32"

# Cumulative thresholds over one random draw; the tail falls through to 昼N.
SHIFT_WEIGHTS: List[Tuple[float, Tuple[ShiftType, ...]]] = [
    (0.10, (ShiftType.OFF,)),
    (0.20, (ShiftType.MORNING_N,)),
    (0.30, (ShiftType.DAY_MID,)),
    (0.35, (ShiftType.CATCH_M,)),
    (0.40, (ShiftType.CATCH_S,)),
    (0.45, (ShiftType.ASADORE_M,)),
    (0.50, (ShiftType.NIGHT_N,)),
    (0.55, (ShiftType.RELAY_1,)),
    (0.65, (ShiftType.OFF,)),
    (0.70, (ShiftType.CATCH_M, ShiftType.COMING_SHADOW)),
    (0.75, (ShiftType.MORNING_N, ShiftType.RELAY_2)),
]
DEFAULT_SHIFTS: Tuple[ShiftType, ...] = (ShiftType.DAY_N,)


def role_for_index(index: int) -> str:
    if index == 0:
        return DEMO_ROLES[0]
    if index < 3:
        return DEMO_ROLES[1]
    if index < 8:
        return DEMO_ROLES[2]
    return DEMO_ROLES[3]


def random_shifts(rng: random.Random) -> Tuple[ShiftType, ...]:
    draw = rng.random()
    for threshold, shifts in SHIFT_WEIGHTS:
        if draw < threshold:
            return shifts
    return DEFAULT_SHIFTS


def note_for(shifts: Tuple[ShiftType, ...], rng: random.Random) -> str:
    if ShiftType.RELAY_1 in shifts:
        return "機材搬入\n14:00〜リハ"
    if ShiftType.CATCH_M in shifts:
        return "取材A"
    if rng.random() > 0.8:
        return "13:00 会議\n第2会議室"
    return ""


def month_schedule(year: int, month: int, rng: random.Random) -> Dict[str, ScheduleEntry]:
    schedule: Dict[str, ScheduleEntry] = {}
    for day in month_dates(year, month):
        shifts = random_shifts(rng)
        key = day.isoformat()
        schedule[key] = ScheduleEntry(date=key, shifts=shifts, note=note_for(shifts, rng))
    return schedule


def generate_demo_roster(
    today: Optional[datetime.date] = None,
    rng: Optional[random.Random] = None,
) -> Roster:
    """Build the sample roster used when nothing usable is stored."""
    today = today or datetime.date.today()
    rng = rng or random.Random()
    members = [
        Member(
            id=f"member-{index}",
            name=name,
            role=role_for_index(index),
            avatar_url=AVATAR_URL.format(seed=index + 200),
            schedules=month_schedule(today.year, today.month, rng),
        )
        for index, name in enumerate(DEMO_NAMES)
    ]
    return Roster(members=tuple(members))
