from __future__ import annotations

import dataclasses
import datetime
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Tuple

from roster import Member, Roster, date_key, is_off_day, is_work_day
from shift_types import SHIFT_LABELS, ShiftType, parse_shift_label, working_labels

WEEKDAY_TOKENS = ["日", "月", "火", "水", "木", "金", "土"]
WEEK_LENGTH = 7
FULL_WEEK_WORKDAYS = 7
WARNING_WORKDAYS = 6
MIN_OFF_DAYS = 1

# Checklist headings, worded as in the shift check dialog.
CHECK_MISSING = "シフト未入力"
CHECK_MULTIPLE = "複数シフト登録"
CHECK_UNCOVERED = "配置なしの勤務内容"
CHECK_FULL_WEEK = "7連勤"
CHECK_NO_DAY_OFF = "休日なし"


@dataclass(frozen=True)
class MultipleAssignment:
    member: Member
    shifts: Tuple[ShiftType, ...]


@dataclass(frozen=True)
class DailyReport:
    date: str
    missing: Tuple[Member, ...]
    multiple: Tuple[MultipleAssignment, ...]
    counts: Dict[ShiftType, int]
    zero_coverage: Tuple[ShiftType, ...]

    @property
    def has_issues(self) -> bool:
        return bool(self.missing or self.multiple or self.zero_coverage)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "weekday": WEEKDAY_TOKENS[_sunday_index(datetime.date.fromisoformat(self.date))],
            "missing": [_member_ref(member) for member in self.missing],
            "multiple": [
                {**_member_ref(item.member), "shifts": [str(shift) for shift in item.shifts]}
                for item in self.multiple
            ],
            "counts": {label.value: count for label, count in self.counts.items()},
            "zero_coverage": [label.value for label in self.zero_coverage],
            "has_issues": self.has_issues,
        }


@dataclass(frozen=True)
class WorkloadRow:
    member: Member
    work_days: int
    off_days: int
    longest_streak: int = 0

    @property
    def level(self) -> str:
        if self.work_days >= FULL_WEEK_WORKDAYS:
            return "consecutive"
        if self.work_days >= WARNING_WORKDAYS or self.off_days < MIN_OFF_DAYS:
            return "warning"
        return "ok"

    def to_dict(self) -> Dict[str, Any]:
        return {
            **_member_ref(self.member),
            "work_days": self.work_days,
            "off_days": self.off_days,
            "longest_streak": self.longest_streak,
            "level": self.level,
        }


@dataclass(frozen=True)
class WeeklyReport:
    week_start: str
    dates: Tuple[str, ...]
    daily_issues: Tuple[DailyReport, ...]
    workload: Tuple[WorkloadRow, ...]
    checks: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def has_issues(self) -> bool:
        return bool(self.daily_issues) or any(row.level != "ok" for row in self.workload)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "week_start": self.week_start,
            "week_end": self.dates[-1],
            "dates": list(self.dates),
            "daily_issues": [report.to_dict() for report in self.daily_issues],
            "workload": [row.to_dict() for row in self.workload],
            "checks": list(self.checks),
            "has_issues": self.has_issues,
        }


def _member_ref(member: Member) -> Dict[str, str]:
    return {"id": member.id, "name": member.name}


def _sunday_index(value: datetime.date) -> int:
    """0 = Sunday, matching the calendar header."""
    return (value.weekday() + 1) % 7


def _as_date(value: str | datetime.date) -> datetime.date:
    return datetime.date.fromisoformat(date_key(value))


def normalize_week_start(value: str | datetime.date) -> datetime.date:
    """Return the Sunday on or before the provided date."""
    date_value = _as_date(value)
    return date_value - datetime.timedelta(days=_sunday_index(date_value))


def week_window(reference: str | datetime.date) -> List[str]:
    start = normalize_week_start(reference)
    return [(start + datetime.timedelta(days=offset)).isoformat() for offset in range(WEEK_LENGTH)]


def daily_report(roster: Roster, target: str | datetime.date) -> DailyReport:
    """Summarize one date: unreported members, doubled-up members, per-label headcount."""
    key = date_key(target)
    missing: List[Member] = []
    multiple: List[MultipleAssignment] = []
    counts: Dict[ShiftType, int] = {label: 0 for label in SHIFT_LABELS}

    for member in roster:
        entry = member.schedules.get(key)
        labels = tuple(parse_shift_label(shift) for shift in entry.shifts) if entry else ()
        if not labels:
            missing.append(member)
            continue
        if len(labels) > 1:
            multiple.append(MultipleAssignment(member=member, shifts=labels))
        # A member counts once per label even if the label is repeated.
        for label in dict.fromkeys(labels):
            counts[label] += 1

    zero_coverage = tuple(label for label in working_labels() if counts[label] == 0)
    return DailyReport(
        date=key,
        missing=tuple(missing),
        multiple=tuple(multiple),
        counts=counts,
        zero_coverage=zero_coverage,
    )


def workload_summary(roster: Roster, dates: Iterable[str | datetime.date]) -> List[WorkloadRow]:
    """Work/off day counts per member over ``dates``, busiest first."""
    keys = [date_key(value) for value in dates]
    rows: List[WorkloadRow] = []
    for member in roster:
        flags = [is_work_day(member.schedules.get(key)) for key in keys]
        work_days = sum(1 for flag in flags if flag)
        rows.append(
            WorkloadRow(
                member=member,
                work_days=work_days,
                off_days=len(keys) - work_days,
                longest_streak=_longest_run(flags),
            )
        )
    # sorted() is stable, so ties keep roster order.
    return sorted(rows, key=lambda row: row.work_days, reverse=True)


def _longest_run(flags: List[bool]) -> int:
    best = current = 0
    for flag in flags:
        current = current + 1 if flag else 0
        best = max(best, current)
    return best


def weekly_report(roster: Roster, reference: str | datetime.date) -> WeeklyReport:
    dates = week_window(reference)
    reports = [daily_report(roster, key) for key in dates]
    daily_issues = tuple(report for report in reports if report.has_issues)
    workload = tuple(workload_summary(roster, dates))
    report = WeeklyReport(
        week_start=dates[0],
        dates=tuple(dates),
        daily_issues=daily_issues,
        workload=workload,
    )
    return dataclasses.replace(report, checks=build_checklist(report))


def shift_totals_by_member(
    roster: Roster,
    start: str | datetime.date,
    end: str | datetime.date,
) -> List[Dict[str, Any]]:
    """Per-member label counts over an inclusive date range, in roster order."""
    first = _as_date(start)
    last = _as_date(end)
    if last < first:
        raise ValueError("end must not be before start")
    keys = [(first + datetime.timedelta(days=offset)).isoformat() for offset in range((last - first).days + 1)]
    summary: List[Dict[str, Any]] = []
    for member in roster:
        totals: Dict[str, int] = {label.value: 0 for label in SHIFT_LABELS}
        reported = 0
        off_days = 0
        for key in keys:
            entry = member.schedules.get(key)
            if not entry or not entry.shifts:
                continue
            reported += 1
            if is_off_day(entry):
                off_days += 1
            for label in entry.shifts:
                totals[parse_shift_label(label).value] += 1
        summary.append(
            {
                **_member_ref(member),
                "reported_days": reported,
                "unreported_days": len(keys) - reported,
                "off_days": off_days,
                "totals": {label: count for label, count in totals.items() if count},
            }
        )
    return summary


def build_checklist(report: WeeklyReport) -> List[Dict[str, Any]]:
    """
    Produce a concise, UI-friendly checklist:
    - `status`: ok|fail
    - `label`: human readable prompt
    - `details`: optional context for failures
    """
    checks: List[Dict[str, Any]] = []

    def summarize(parts: List[str], *, limit: int = 5) -> str:
        shown = parts[:limit]
        if len(parts) > limit:
            shown.append(f"他{len(parts) - limit}件")
        return "、".join(shown)

    def add_check(label: str, ok: bool, *, details: str = "") -> None:
        checks.append(
            {
                "label": label,
                "status": "ok" if ok else "fail",
                "details": details if not ok else "",
            }
        )

    def day_label(day: DailyReport) -> str:
        value = datetime.date.fromisoformat(day.date)
        return f"{value.month}/{value.day}({WEEKDAY_TOKENS[_sunday_index(value)]})"

    missing_days = [f"{day_label(day)} {len(day.missing)}名" for day in report.daily_issues if day.missing]
    add_check(CHECK_MISSING, not missing_days, details=summarize(missing_days))

    multiple_days = [f"{day_label(day)} {len(day.multiple)}名" for day in report.daily_issues if day.multiple]
    add_check(CHECK_MULTIPLE, not multiple_days, details=summarize(multiple_days))

    uncovered = [
        f"{day_label(day)} {'・'.join(label.value for label in day.zero_coverage)}"
        for day in report.daily_issues
        if day.zero_coverage
    ]
    add_check(CHECK_UNCOVERED, not uncovered, details=summarize(uncovered, limit=3))

    full_week = [row.member.name for row in report.workload if row.level == "consecutive"]
    add_check(CHECK_FULL_WEEK, not full_week, details=summarize(full_week))

    heavy = [f"{row.member.name} ({row.work_days}日)" for row in report.workload if row.level == "warning"]
    add_check(CHECK_NO_DAY_OFF, not heavy, details=summarize(heavy))
    return checks
