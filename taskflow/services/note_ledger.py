"""
Note Ledger — the append-only audit log kept in a task's notes column.

Each entry is a block:

    \\n--- NOTE ENTRY ---\\n[2025-03-04 09:15] Doing - alice\\n<body>\\n

Blocks are stored in append (chronological) order and never rewritten.
``parse_entries`` returns them newest first for display.
"""

from dataclasses import dataclass
from datetime import datetime

NOTE_SEPARATOR = "\n--- NOTE ENTRY ---\n"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M"

_STATE_LABELS = {
    "Open": "Open",
    "ToDo": "ToDo",
    "Doing": "Doing",
    "Done": "Done",
    "Closed": "Closed",
}


@dataclass(frozen=True)
class NoteEntry:
    header: str
    body: str

    def to_dict(self):
        return {"header": self.header, "body": self.body}


def state_label(state) -> str:
    return _STATE_LABELS.get(state, str(state or "").upper())


def format_timestamp(when: datetime | None = None) -> str:
    """Server-local time, minute precision."""
    return (when or datetime.now()).strftime(TIMESTAMP_FORMAT)


_SEPARATOR_LINE = NOTE_SEPARATOR.strip()


def _neutralise(body: str) -> str:
    """Indent body lines that would read as an entry separator."""
    return "\n".join(
        f" {line}" if line.strip() == _SEPARATOR_LINE else line
        for line in body.split("\n")
    )


def make_entry(username: str, text, state, timestamp: datetime | None = None) -> str:
    """Build one ledger block; an empty body yields an empty string."""
    body = str(text if text is not None else "").strip()
    if not body:
        return ""
    body = _neutralise(body)
    return f"{NOTE_SEPARATOR}[{format_timestamp(timestamp)}] {state_label(state)} - {username}\n{body}\n"


def append_entry(existing, username: str, text, state, timestamp: datetime | None = None) -> str:
    """Return ``existing`` with a new block appended. ``None`` counts as empty."""
    return (existing or "") + make_entry(username, text, state, timestamp)


def parse_entries(blob) -> list[NoteEntry]:
    """Split a notes blob into entries, most recent first."""
    entries = []
    for block in str(blob or "").split(NOTE_SEPARATOR):
        block = block.strip()
        if not block:
            continue
        header, _, body = block.partition("\n")
        entries.append(NoteEntry(header=header.strip(), body=body.strip()))
    entries.reverse()
    return entries
