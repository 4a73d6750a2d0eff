from __future__ import annotations

from irc.client import ServerNotConnectedError

from adapters.irc_sender import IrcSender, split_message


class DummyConnection:
    def __init__(self, connected: bool = True) -> None:
        self.sent: list[tuple[str, str]] = []
        self._connected = connected

    def privmsg(self, target: str, text: str) -> None:
        if not self._connected:
            raise ServerNotConnectedError("Not connected.")
        self.sent.append((target, text))


def test_short_text_is_sent_as_is() -> None:
    connection = DummyConnection()
    IrcSender(connection, 450).send("#x", "hello")
    assert connection.sent == [("#x", "hello")]


def test_long_text_is_split_on_character_boundaries() -> None:
    chunks = list(split_message("é" * 10, 5))
    assert all(len(chunk.encode("utf-8")) <= 5 for chunk in chunks)
    assert "".join(chunks) == "é" * 10


def test_newlines_become_separate_messages() -> None:
    connection = DummyConnection()
    IrcSender(connection, 450).send("#x", "one\ntwo\r\n\nthree")
    assert connection.sent == [("#x", "one"), ("#x", "two"), ("#x", "three")]


def test_disconnected_send_is_dropped() -> None:
    connection = DummyConnection(connected=False)
    IrcSender(connection, 450).send("#x", "hello")
    assert connection.sent == []
