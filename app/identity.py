from __future__ import annotations

from typing import Optional

from roster import Member, Roster


def normalize_name(name: str) -> str:
    return (name or "").strip()


def names_match(member_name: str, query: str) -> bool:
    """Return True when either name contains the other."""
    candidate = normalize_name(member_name)
    target = normalize_name(query)
    if not candidate or not target:
        return False
    return target in candidate or candidate in target


def resolve_member(roster: Roster, query: str) -> Optional[Member]:
    """Return the first member in roster order whose name matches ``query``.

    No scoring: with overlapping names the earlier member wins. ``None``
    means the name could not be resolved and the caller should skip it.
    """
    for member in roster:
        if names_match(member.name, query):
            return member
    return None
