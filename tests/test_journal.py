"""Tests for the operation journal."""

import re

import pytest

from gasnet.journal import SESSION_END, SESSION_START, OperationJournal

LINE = re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2} \| (.*)$")


def entries(path):
    result = []
    for line in path.read_text(encoding="utf-8").splitlines():
        match = LINE.match(line)
        assert match, f"unexpected journal line: {line!r}"
        result.append(match.group(1))
    return result


def test_session_is_framed(tmp_path):
    path = tmp_path / "journal.txt"
    with OperationJournal(path) as journal:
        journal.record("Add pipe", "id 1, Main")
        journal.record("Save")
    assert entries(path) == [SESSION_START, "Add pipe | id 1, Main", "Save", SESSION_END]
    assert journal.closed


def test_sessions_append(tmp_path):
    path = tmp_path / "journal.txt"
    for action in ("first", "second"):
        with OperationJournal(path) as journal:
            journal.record(action)
    assert entries(path) == [
        SESSION_START,
        "first",
        SESSION_END,
        SESSION_START,
        "second",
        SESSION_END,
    ]


def test_close_is_idempotent(tmp_path):
    journal = OperationJournal(tmp_path / "journal.txt")
    journal.close()
    journal.close()
    assert entries(journal.path).count(SESSION_END) == 1
    with pytest.raises(RuntimeError, match="closed"):
        journal.record("late")


def test_journal_stays_off_the_console(tmp_path, capsys):
    with OperationJournal(tmp_path / "journal.txt") as journal:
        journal.record("quiet")
    assert "quiet" not in capsys.readouterr().out
