"""Shared helpers for comma-joined group columns and date inputs.

split_groups:  "Dev, Lead,," → ["Dev", "Lead"]
join_groups:   ["Dev", " Lead "] → "Dev,Lead"
parse_date:    ISO string / date → date (None on bad input)
"""
from datetime import date, datetime


def split_groups(raw) -> list[str]:
    """Parse a stored comma-joined group column into a clean list.

    Accepts a string, a list (already parsed), or None. Blank entries are
    dropped and duplicates collapse, first occurrence wins.
    """
    if raw is None:
        return []
    if isinstance(raw, (list, tuple, set)):
        items = [str(x) for x in raw]
    else:
        items = str(raw).split(",")
    out: list[str] = []
    for item in items:
        name = item.strip()
        if name and name not in out:
            out.append(name)
    return out


def join_groups(groups) -> str:
    """Serialise a group list for storage."""
    return ",".join(split_groups(groups))


def parse_date(value):
    """Parse an ISO date (or datetime) string to a date object.

    Returns None for empty/invalid input.
    """
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except (ValueError, TypeError):
        pass
    try:
        return datetime.fromisoformat(str(value)).date()
    except (ValueError, TypeError):
        return None
