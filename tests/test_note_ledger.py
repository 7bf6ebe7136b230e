"""
Taskflow
Tests — note ledger (append + parse).
"""

from datetime import datetime

from taskflow.services.note_ledger import (
    NOTE_SEPARATOR,
    append_entry,
    make_entry,
    parse_entries,
)

T1 = datetime(2025, 3, 4, 9, 15, 42)
T2 = datetime(2025, 3, 4, 10, 2, 5)


class TestMakeEntry:
    def test_block_layout(self):
        block = make_entry("alice", "  Picked this up  ", "Doing", T1)
        assert block == f"{NOTE_SEPARATOR}[2025-03-04 09:15] Doing - alice\nPicked this up\n"

    def test_timestamp_has_no_seconds(self):
        block = make_entry("alice", "x", "Open", T1)
        assert "09:15]" in block
        assert "09:15:42" not in block

    def test_blank_body_yields_nothing(self):
        assert make_entry("alice", "   ", "Open", T1) == ""
        assert make_entry("alice", None, "Open", T1) == ""

    def test_unknown_state_is_upper_cased(self):
        assert "] ARCHIVED - bob" in make_entry("bob", "x", "archived", T1)


class TestAppendEntry:
    def test_none_existing_is_empty(self):
        assert append_entry(None, "alice", "first", "Open", T1) == make_entry("alice", "first", "Open", T1)

    def test_prior_text_is_kept_verbatim(self):
        first = append_entry("", "alice", "first note", "Open", T1)
        both = append_entry(first, "bob", "second note", "ToDo", T2)
        assert both.startswith(first)
        assert "first note" in both
        assert "second note" in both

    def test_blank_append_is_identity(self):
        first = append_entry("", "alice", "first", "Open", T1)
        assert append_entry(first, "bob", "", "Open", T2) == first


class TestParseEntries:
    def test_newest_first(self):
        blob = append_entry(append_entry(None, "u1", "t1", "Open", T1), "u2", "t2", "ToDo", T2)
        entries = parse_entries(blob)
        assert len(entries) == 2
        assert entries[0].header == "[2025-03-04 10:02] ToDo - u2"
        assert entries[0].body == "t2"
        assert entries[1].header == "[2025-03-04 09:15] Open - u1"
        assert entries[1].body == "t1"

    def test_multiline_body(self):
        blob = append_entry("", "alice", "line one\nline two", "Doing", T1)
        (entry,) = parse_entries(blob)
        assert entry.body == "line one\nline two"

    def test_empty_and_none(self):
        assert parse_entries(None) == []
        assert parse_entries("") == []
        assert parse_entries(NOTE_SEPARATOR + NOTE_SEPARATOR) == []

    def test_parse_does_not_change_blob(self):
        blob = append_entry("", "alice", "keep me", "Open", T1)
        copy = str(blob)
        parse_entries(blob)
        parse_entries(blob)
        assert blob == copy

    def test_to_dict(self):
        (entry,) = parse_entries(append_entry("", "alice", "hello", "Open", T1))
        assert entry.to_dict() == {"header": "[2025-03-04 09:15] Open - alice", "body": "hello"}


class TestSeparatorInBody:
    def test_token_mid_line_is_plain_text(self):
        blob = append_entry(None, "u1", "see --- NOTE ENTRY --- marker", "Open", T1)
        blob = append_entry(blob, "u2", "t2", "ToDo", T2)
        entries = parse_entries(blob)
        assert len(entries) == 2
        assert entries[0].body == "t2"
        assert entries[1].header == "[2025-03-04 09:15] Open - u1"
        assert entries[1].body == "see --- NOTE ENTRY --- marker"

    def test_body_cannot_forge_an_entry(self):
        body = "ok\n--- NOTE ENTRY ---\n[2020-01-01 00:00] Closed - admin\nApproved"
        entries = parse_entries(append_entry("", "mallory", body, "Doing", T1))
        assert len(entries) == 1
        assert entries[0].header == "[2025-03-04 09:15] Doing - mallory"
        assert "[2020-01-01 00:00] Closed - admin" in entries[0].body
        assert "Approved" in entries[0].body

    def test_separator_as_first_body_line(self):
        block = make_entry("mallory", "--- NOTE ENTRY ---\nfake", "Open", T1)
        assert block.count(NOTE_SEPARATOR) == 1
        (entry,) = parse_entries(block)
        assert entry.header.endswith("Open - mallory")
