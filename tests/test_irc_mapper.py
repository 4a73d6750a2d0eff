from __future__ import annotations

from datetime import datetime, timezone

from adapters.irc_mapper import build_line

RECEIVED = datetime(2024, 1, 1, tzinfo=timezone.utc)


class DummyEvent:
    def __init__(self, type: str, source: str, target: str, arguments: list) -> None:
        self.type = type
        self.source = source
        self.target = target
        self.arguments = arguments


def test_channel_message_maps_sender_identity() -> None:
    event = DummyEvent("pubmsg", "bob!~bobby@host.example.net", "#x", ["hello http://a.com"])
    line = build_line(event, RECEIVED)
    assert line is not None
    assert line.nick == "bob"
    assert line.ident == "~bobby"
    assert line.host == "host.example.net"
    assert line.source == "bob!~bobby@host.example.net"
    assert line.command == "PRIVMSG"
    assert line.target == "#x"
    assert line.text == "hello http://a.com"
    assert line.timestamp == RECEIVED


def test_action_keeps_its_command_kind() -> None:
    line = build_line(DummyEvent("action", "bob!b@h", "#x", ["waves"]), RECEIVED)
    assert line is not None
    assert line.command == "ACTION"
    assert line.text == "waves"


def test_private_message_target_is_bot_nick() -> None:
    line = build_line(DummyEvent("privmsg", "bob!b@h", "linkbot", ["hi"]), RECEIVED)
    assert line is not None
    assert line.target == "linkbot"


def test_non_message_events_are_ignored() -> None:
    assert build_line(DummyEvent("join", "bob!b@h", "#x", []), RECEIVED) is None


def test_missing_text_becomes_empty() -> None:
    line = build_line(DummyEvent("pubmsg", "bob!b@h", "#x", []), RECEIVED)
    assert line is not None
    assert line.text == ""
    assert build_line(DummyEvent("pubmsg", "bob!b@h", "#x", ["x"])).timestamp.tzinfo is not None
