"""FastAPI wrapper around the roster workspace.

Viewing needs the ``x-view-password`` header, editing the
``x-edit-password`` header. The workspace itself never checks secrets.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
import datetime
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

# Ensure flat imports (e.g., "import roster") still resolve.
APP_DIR = Path(__file__).resolve().parent
if str(APP_DIR) not in sys.path:
    sys.path.insert(0, str(APP_DIR))

from analytics import shift_totals_by_member  # noqa: E402
from assistant import ChatModelCommandSource  # noqa: E402
from auth import AccessGate  # noqa: E402
from commands import CommandResponse, CommandSource  # noqa: E402
from config import configure_logging  # noqa: E402
from database import init_database  # noqa: E402
from errors import (  # noqa: E402
    CommandSourceError,
    InvalidEntryError,
    RosterError,
    RosterFormatError,
    UnknownMemberError,
)
from pipeline import BatchResult  # noqa: E402
from roster import date_key, make_entry, month_dates  # noqa: E402
from shift_types import SHIFT_LABELS, ShiftType, is_rest_label, palette_for_shift, shift_group  # noqa: E402
from workspace import RosterWorkspace  # noqa: E402

ERROR_STATUS = {
    UnknownMemberError: 404,
    InvalidEntryError: 422,
    RosterFormatError: 422,
    CommandSourceError: 502,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    init_database()
    app.state.gate = AccessGate()
    app.state.workspace = RosterWorkspace()
    app.state.command_source = ChatModelCommandSource()
    app.state.workspace.load()
    yield


app = FastAPI(title="StaffSync Roster API", version="0.1", lifespan=lifespan)


class EntryBody(BaseModel):
    shifts: List[str] = Field(default_factory=list)
    note: str = ""


class CommandBody(BaseModel):
    text: str


@app.exception_handler(RosterError)
async def roster_error_handler(_: Request, exc: RosterError) -> JSONResponse:
    status = ERROR_STATUS.get(type(exc), 400)
    return JSONResponse(status_code=status, content={"detail": str(exc)})


def get_workspace(request: Request) -> RosterWorkspace:
    return request.app.state.workspace


def get_gate(request: Request) -> AccessGate:
    return request.app.state.gate


def get_command_source(request: Request) -> CommandSource:
    return request.app.state.command_source


def require_view(
    x_view_password: Optional[str] = Header(None),
    gate: AccessGate = Depends(get_gate),
) -> None:
    if not x_view_password or not gate.verify_view(x_view_password):
        raise HTTPException(status_code=401, detail="Viewing requires the view password")


def require_edit(
    x_edit_password: Optional[str] = Header(None),
    gate: AccessGate = Depends(get_gate),
) -> None:
    if not x_edit_password or not gate.verify_edit(x_edit_password):
        raise HTTPException(status_code=401, detail="Editing requires the edit password")


def _parse_date(value: str) -> datetime.date:
    try:
        return datetime.date.fromisoformat(date_key(value))
    except InvalidEntryError:
        raise HTTPException(status_code=400, detail="date must be YYYY-MM-DD")


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.get("/api/v1/shift-types", dependencies=[Depends(require_view)])
def list_shift_types() -> JSONResponse:
    labels = [
        {
            "label": label.value,
            "group": shift_group(label),
            "color": palette_for_shift(label),
            "rest": is_rest_label(label),
        }
        for label in SHIFT_LABELS
    ]
    return JSONResponse(content={"labels": labels})


@app.get("/api/v1/roster", dependencies=[Depends(require_view)])
def get_roster(workspace: RosterWorkspace = Depends(get_workspace)) -> JSONResponse:
    payload = [member.to_dict() for member in workspace.roster]
    return JSONResponse(content={"members": payload, "is_new": workspace.is_new})


@app.get("/api/v1/members", dependencies=[Depends(require_view)])
def search_members(
    search: str = Query(""),
    workspace: RosterWorkspace = Depends(get_workspace),
) -> JSONResponse:
    members = [
        {"id": member.id, "name": member.name, "role": member.role, "avatarUrl": member.avatar_url}
        for member in workspace.roster.search(search)
    ]
    return JSONResponse(content={"members": members})


@app.put("/api/v1/members/{member_id}/schedules/{date}", dependencies=[Depends(require_edit)])
def put_entry(
    member_id: str,
    date: str,
    body: EntryBody,
    workspace: RosterWorkspace = Depends(get_workspace),
) -> JSONResponse:
    target = _parse_date(date)
    # Deselecting everything saves as a rest day, as the cell editor does.
    shifts: List[Any] = body.shifts or [ShiftType.OFF]
    entry = make_entry(target, shifts, body.note)
    workspace.edit_entry(member_id, entry)
    return JSONResponse(content={"member_id": member_id, "entry": entry.to_dict()})


@app.post("/api/v1/commands", dependencies=[Depends(require_view)])
def post_commands(body: CommandBody, workspace: RosterWorkspace = Depends(get_workspace)) -> JSONResponse:
    """Apply a reply that already came back from the command service."""
    response, result = workspace.apply_command_response(body.text)
    return _batch_response(response, result)


@app.post("/api/v1/ask", dependencies=[Depends(require_view)])
def ask(
    body: CommandBody,
    workspace: RosterWorkspace = Depends(get_workspace),
    source: CommandSource = Depends(get_command_source),
) -> JSONResponse:
    response, result = workspace.ask(body.text, source)
    return _batch_response(response, result)


def _batch_response(response: CommandResponse, result: BatchResult) -> JSONResponse:
    return JSONResponse(
        content=jsonable_encoder(
            {
                "display_text": response.display_text,
                "applied": [_command_dict(command) for command in result.applied],
                "skipped": [_command_dict(command) for command in result.skipped],
                "rejected": list(response.rejected),
            }
        )
    )


def _command_dict(command) -> Dict[str, Any]:
    return {"name": command.target_name, "date": command.date, "shifts": [str(shift) for shift in command.shifts]}


@app.get("/api/v1/checks/daily/{date}", dependencies=[Depends(require_view)])
def daily_check(date: str, workspace: RosterWorkspace = Depends(get_workspace)) -> JSONResponse:
    report = workspace.daily_report(_parse_date(date))
    return JSONResponse(content=report.to_dict())


@app.get("/api/v1/checks/weekly/{date}", dependencies=[Depends(require_view)])
def weekly_check(date: str, workspace: RosterWorkspace = Depends(get_workspace)) -> JSONResponse:
    report = workspace.weekly_report(_parse_date(date))
    return JSONResponse(content=report.to_dict())


@app.get("/api/v1/summary/{year}/{month}", dependencies=[Depends(require_view)])
def month_summary(year: int, month: int, workspace: RosterWorkspace = Depends(get_workspace)) -> JSONResponse:
    if not 1 <= month <= 12:
        raise HTTPException(status_code=400, detail="month must be 1-12")
    days = month_dates(year, month)
    summary = shift_totals_by_member(workspace.roster, days[0], days[-1])
    return JSONResponse(content={"year": year, "month": month, "members": summary})


@app.post("/api/v1/roster/reset", dependencies=[Depends(require_edit)])
def reset_roster(workspace: RosterWorkspace = Depends(get_workspace)) -> JSONResponse:
    roster = workspace.reset()
    return JSONResponse(content={"members": len(roster)})
