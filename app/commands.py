"""Contract with the natural-language command service.

The service answers with free text that may carry one fenced ``json`` block::

    {"action": "update_schedule", "updates": [{"name": ..., "date": ..., "shifts": [...]}]}

Anything else in the reply is commentary for display. Bad JSON, other
actions and malformed updates never raise; they just yield no commands.
"""

from __future__ import annotations

import datetime
import json
import logging
import re
from dataclasses import dataclass
from typing import Any, List, Optional, Protocol, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from errors import InvalidEntryError
from roster import Roster, UpdateCommand, date_key
from shift_types import SHIFT_LABELS, ShiftType, parse_shift_label

logger = logging.getLogger(__name__)

UPDATE_ACTION = "update_schedule"
COMMAND_BLOCK_RE = re.compile(r"```json\s*([\s\S]*?)\s*```")


class CommandSource(Protocol):
    def respond(self, instruction: str, roster: Roster, reference_date: datetime.date) -> str:
        ...


class UpdatePayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = Field(validation_alias=AliasChoices("name", "targetName", "target_name"))
    date: str
    shifts: List[ShiftType]

    @field_validator("name")
    @classmethod
    def _require_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("name is required")
        return value.strip()

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
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, list) or not value:
            raise ValueError("shifts must be a non-empty list")
        try:
            return [parse_shift_label(item) for item in value]
        except InvalidEntryError as exc:
            raise ValueError(str(exc)) from exc

    def to_command(self) -> UpdateCommand:
        return UpdateCommand(target_name=self.name, date=self.date, shifts=tuple(self.shifts))


class CommandEnvelope(BaseModel):
    model_config = ConfigDict(extra="ignore")

    action: str
    updates: List[Any] = Field(default_factory=list)


@dataclass(frozen=True)
class CommandResponse:
    display_text: str
    commands: Tuple[UpdateCommand, ...] = ()
    rejected: Tuple[Any, ...] = ()

    @property
    def has_commands(self) -> bool:
        return bool(self.commands)


def extract_command_block(text: str) -> Optional[str]:
    match = COMMAND_BLOCK_RE.search(text or "")
    if not match:
        return None
    return match.group(1)


def parse_command_response(text: Optional[str]) -> CommandResponse:
    text = text or ""
    block = extract_command_block(text)
    if block is None:
        return CommandResponse(display_text=text.strip())
    try:
        envelope = CommandEnvelope.model_validate(json.loads(block))
    except (ValueError, ValidationError) as exc:
        # json.JSONDecodeError is a ValueError.
        logger.warning("Ignoring malformed command block: %s", exc)
        return CommandResponse(display_text=text.strip())
    if envelope.action != UPDATE_ACTION:
        logger.info("Ignoring command block with action %r", envelope.action)
        return CommandResponse(display_text=text.strip())

    commands: List[UpdateCommand] = []
    rejected: List[Any] = []
    for raw in envelope.updates:
        try:
            commands.append(UpdatePayload.model_validate(raw).to_command())
        except ValidationError as exc:
            logger.warning("Rejected update %r: %s", raw, exc.errors()[0]["msg"])
            rejected.append(raw)
    display_text = COMMAND_BLOCK_RE.sub("", text, count=1).strip()
    return CommandResponse(display_text=display_text, commands=tuple(commands), rejected=tuple(rejected))


def _schedule_line(entries) -> str:
    return "|".join(f"{entry.date}:{','.join(str(shift) for shift in entry.shifts)}" for entry in entries)


def build_command_context(roster: Roster, reference_date: datetime.date) -> str:
    """Render the system instructions handed to the command service."""
    year = reference_date.year
    month = reference_date.month
    members = [
        {"name": member.name, "role": member.role, "schedule": _schedule_line(member.sorted_entries())}
        for member in roster
    ]
    labels = ", ".join(label.value for label in SHIFT_LABELS)
    example = json.dumps(
        {
            "action": UPDATE_ACTION,
            "updates": [{"name": "対象者の名前(部分一致)", "date": "YYYY-MM-DD", "shifts": ["正確なShiftType文字列"]}],
        },
        ensure_ascii=False,
        indent=2,
    )
    return "\n".join(
        [
            "あなたは「StaffSync AI」という勤務表管理アシスタントです。",
            "",
            "**現在のコンテキスト:**",
            f"- 年月: {year}年{month}月",
            f"- 有効な勤務内容(ShiftType): [{labels}]",
            "",
            "**ユーザーの意図を判断してください:**",
            "1. **質問**: 日本語で丁寧に答えてください。",
            "2. **変更・指示**: 回答の最後に以下のJSONを含め、解説テキストも必ず含めてください。",
            f"   「毎週月曜日」などの繰り返し表現は{year}年{month}月の具体的な日付(YYYY-MM-DD)に展開してください。",
            "",
            "```json",
            example,
            "```",
            "",
            "**データ:**",
            json.dumps(members, ensure_ascii=False),
        ]
    )
