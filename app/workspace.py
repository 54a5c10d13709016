from __future__ import annotations

import datetime
import logging
import random
from pathlib import Path
from typing import Callable, Iterable, Optional

import analytics
from commands import CommandResponse, CommandSource, parse_command_response
from config import STORAGE_KEY
from data_exchange import export_roster, import_roster
from database import SessionLocal, load_roster_payload, save_roster_payload
from demo_data import generate_demo_roster
from errors import RosterFormatError
from migration import dump_roster_json, load_roster_json
from pipeline import BatchResult, apply_batch_updates_with_report, apply_direct_edit
from roster import Roster, ScheduleEntry, UpdateCommand

logger = logging.getLogger(__name__)


class RosterWorkspace:
    """Owns the current roster; every change goes through the pipeline and is saved.

    Credential checks belong to the caller (see ``auth.AccessGate``).
    """

    def __init__(
        self,
        session_factory: Callable = SessionLocal,
        *,
        storage_key: str = STORAGE_KEY,
        today: Optional[Callable[[], datetime.date]] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.session_factory = session_factory
        self.storage_key = storage_key
        self._today = today or datetime.date.today
        self._rng = rng
        self._roster = Roster()
        self.is_new = False
        self.loaded = False

    @property
    def roster(self) -> Roster:
        return self._roster

    @property
    def rejected_key(self) -> str:
        return f"{self.storage_key}.rejected"

    def load(self) -> Roster:
        with self.session_factory() as session:
            payload = load_roster_payload(session, self.storage_key)
        if payload is None:
            logger.info("No stored roster under '%s'; generating demo data", self.storage_key)
            self._roster = self._demo()
            self.is_new = True
        else:
            try:
                self._roster = load_roster_json(payload)
                self.is_new = False
                logger.info("Loaded %d members from '%s'", len(self._roster), self.storage_key)
            except RosterFormatError as exc:
                logger.warning(
                    "Discarding unreadable roster '%s' (kept under '%s'): %s",
                    self.storage_key,
                    self.rejected_key,
                    exc,
                )
                with self.session_factory() as session:
                    save_roster_payload(session, self.rejected_key, payload)
                self._roster = self._demo()
                self.is_new = False
        self.loaded = True
        # Persists demo data and rewrites migrated legacy entries in the current shape.
        self.save()
        return self._roster

    def save(self) -> bool:
        if not len(self._roster):
            return False
        with self.session_factory() as session:
            return save_roster_payload(session, self.storage_key, dump_roster_json(self._roster))

    def _demo(self) -> Roster:
        return generate_demo_roster(self._today(), self._rng)

    def _commit(self, roster: Roster) -> Roster:
        self._roster = roster
        self.save()
        return roster

    def edit_entry(self, member_id: str, entry: ScheduleEntry) -> Roster:
        return self._commit(apply_direct_edit(self._roster, member_id, entry))

    def apply_updates(self, commands: Iterable[UpdateCommand]) -> BatchResult:
        result = apply_batch_updates_with_report(self._roster, commands)
        if result.applied:
            self._commit(result.roster)
        return result

    def apply_command_response(self, text: str) -> tuple[CommandResponse, BatchResult]:
        response = parse_command_response(text)
        return response, self.apply_updates(response.commands)

    def ask(self, instruction: str, source: CommandSource) -> tuple[CommandResponse, BatchResult]:
        reply = source.respond(instruction, self._roster, self._today())
        return self.apply_command_response(reply)

    def reset(self) -> Roster:
        logger.info("Resetting roster '%s' to demo data", self.storage_key)
        return self._commit(self._demo())

    def daily_report(self, target: Optional[datetime.date | str] = None) -> analytics.DailyReport:
        return analytics.daily_report(self._roster, target or self._today())

    def weekly_report(self, reference: Optional[datetime.date | str] = None) -> analytics.WeeklyReport:
        return analytics.weekly_report(self._roster, reference or self._today())

    def export(self, path: Optional[Path] = None) -> Path:
        return export_roster(self._roster, path)

    def import_from(self, path: Path) -> Roster:
        return self._commit(import_roster(path))
