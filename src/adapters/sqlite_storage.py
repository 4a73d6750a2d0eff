"""SQLite audit log adapter.

Implements the core AuditPort using a simple SQLite database.
"""

from __future__ import annotations

import sqlite3
from typing import Iterable, List, Tuple

from core.badwords import BadWord, match_bad_words
from core.models import IncomingLine


class SQLiteAuditLog:
    """Thin SQLite wrapper that satisfies the AuditPort contract.

    A fresh connection per call keeps it safe to use from the worker threads
    the dispatcher writes from.
    """

    def __init__(self, db_path: str, bad_words: Iterable[BadWord] = ()) -> None:
        self._db_path = db_path
        self._bad_words = list(bad_words)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, timeout=10)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        """Create tables if they do not exist.

        Tables:
        - messages: append-only log of every line seen
        - words: per-nick tallies of configured bad words
        """

        with self._connect() as conn:
            # messages mirrors the protocol line so traffic can be replayed
            # or searched later.
            # Fields:
            # - id: auto-increment primary key
            # - nick/ident/host: sender identity
            # - src: raw source prefix of the line
            # - cmd: protocol command (PRIVMSG, ACTION)
            # - channel: where the line was seen (sender nick for PMs)
            # - message: line text
            # - time: timestamp from the transport
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS messages (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    nick TEXT,
                    ident TEXT,
                    host TEXT,
                    src TEXT,
                    cmd TEXT,
                    channel TEXT,
                    message TEXT,
                    time TIMESTAMP
                )
                """
            )
            # words keeps one counter per (nick, word).
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS words (
                    nick TEXT NOT NULL,
                    word TEXT NOT NULL,
                    count INTEGER NOT NULL,
                    PRIMARY KEY (nick, word)
                )
                """
            )

    def record(self, line: IncomingLine, channel: str, text: str) -> None:
        """Persist one line and bump the sender's bad-word counters."""

        hits = match_bad_words(text, self._bad_words)
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO messages (
                    nick,
                    ident,
                    host,
                    src,
                    cmd,
                    channel,
                    message,
                    time
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    line.nick,
                    line.ident,
                    line.host,
                    line.source,
                    line.command,
                    channel,
                    text,
                    line.timestamp.isoformat(),
                ),
            )
            for word in hits:
                conn.execute(
                    """
                    INSERT INTO words (nick, word, count)
                    VALUES (?, ?, 1)
                    ON CONFLICT(nick, word) DO UPDATE SET count = count + 1
                    """,
                    (line.nick, word),
                )

    def top_words(self, nick: str) -> List[Tuple[str, int]]:
        """Return (word, count) pairs for a nick, most used first."""

        with self._connect() as conn:
            rows = conn.execute(
                "SELECT word, count FROM words WHERE nick = ? ORDER BY count DESC, word",
                (nick,),
            ).fetchall()
        return [(row["word"], int(row["count"])) for row in rows]
