from __future__ import annotations

import sqlite3
from datetime import datetime, timezone

import pytest

from adapters.sqlite_storage import SQLiteAuditLog
from core.badwords import build_bad_words, match_bad_words
from core.models import IncomingLine


def _line(text: str, nick: str = "bob") -> IncomingLine:
    return IncomingLine(
        nick=nick,
        ident="~bob",
        host="example.net",
        source=f"{nick}!~bob@example.net",
        command="PRIVMSG",
        target="#x",
        text=text,
        timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


def test_record_appends_message_rows(tmp_path) -> None:
    db_path = str(tmp_path / "audit.db")
    audit = SQLiteAuditLog(db_path)
    audit.init_db()

    audit.record(_line("hello"), "#x", "hello")
    audit.record(_line("again"), "#x", "again")

    with sqlite3.connect(db_path) as conn:
        rows = conn.execute("SELECT nick, ident, cmd, channel, message FROM messages ORDER BY id").fetchall()
    assert rows == [
        ("bob", "~bob", "PRIVMSG", "#x", "hello"),
        ("bob", "~bob", "PRIVMSG", "#x", "again"),
    ]


def test_bad_words_are_tallied_per_nick(tmp_path) -> None:
    bad_words = build_bad_words(
        [{"word": "darn", "query": r"\bdarn\b"}, {"word": "heck", "query": r"\bheck(s)?\b"}]
    )
    audit = SQLiteAuditLog(str(tmp_path / "audit.db"), bad_words)
    audit.init_db()

    audit.record(_line("darn it"), "#x", "darn it")
    audit.record(_line("darn, what the heck"), "#x", "darn, what the heck")
    audit.record(_line("heck", nick="alice"), "#x", "heck")

    assert audit.top_words("bob") == [("darn", 2), ("heck", 1)]
    assert audit.top_words("alice") == [("heck", 1)]
    assert audit.top_words("nobody") == []


def test_match_bad_words_keeps_table_order() -> None:
    bad_words = build_bad_words([{"word": "b", "query": "b"}, {"word": "a", "query": "a"}])
    assert match_bad_words("a b", bad_words) == ["b", "a"]
    assert match_bad_words("none", bad_words) == []


def test_bad_word_entries_must_be_complete() -> None:
    with pytest.raises(ValueError):
        build_bad_words([{"word": "x"}])
