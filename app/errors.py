from __future__ import annotations


class RosterError(Exception):
    """Base class for roster engine failures."""


class UnknownMemberError(RosterError):
    """Raised when an edit targets a member id that is not on the roster."""

    def __init__(self, member_id: str) -> None:
        super().__init__(f"Member '{member_id}' was not found.")
        self.member_id = member_id


class InvalidEntryError(RosterError):
    """Raised when a schedule entry breaks the write invariants."""


class RosterFormatError(RosterError):
    """Raised when a stored or imported roster cannot be parsed."""


class CommandSourceError(RosterError):
    """Raised when the command service cannot produce a reply."""
