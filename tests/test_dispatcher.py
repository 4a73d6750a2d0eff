from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

from core.commands import CommandRouter
from core.config import BotConfig, PreviewConfig, build_command_table
from core.dispatcher import MessageDispatcher, reply_target
from core.models import IncomingLine
from core.tasks import TaskSpawner


class FakeSender:
    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []

    def send(self, target: str, text: str) -> None:
        self.sent.append((target, text))


class FakePreviewer:
    def __init__(self, fail_on: Optional[str] = None) -> None:
        self.calls: list[tuple[str, str, Optional[str]]] = []
        self._fail_on = fail_on

    async def preview(self, candidate: str, channel: str, nick: Optional[str] = None) -> None:
        self.calls.append((candidate, channel, nick))
        if candidate == self._fail_on:
            raise RuntimeError("boom")


class FakeAudit:
    def __init__(self, fail: bool = False) -> None:
        self.records: list[tuple[IncomingLine, str, str]] = []
        self._fail = fail

    def record(self, line: IncomingLine, channel: str, text: str) -> None:
        if self._fail:
            raise RuntimeError("database is gone")
        self.records.append((line, channel, text))


def _line(text: str, *, target: str = "#x", nick: str = "bob") -> IncomingLine:
    return IncomingLine(
        nick=nick,
        ident="bob",
        host="example.net",
        source=f"{nick}!bob@example.net",
        command="PRIVMSG",
        target=target,
        text=text,
        timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


def _dispatch(
    line: IncomingLine,
    *,
    previewer=None,
    audit=None,
    commands=(),
    config=None,
    current_nick=None,
):
    sender = FakeSender()
    previewer = previewer or FakePreviewer()
    audit = audit or FakeAudit()
    router = CommandRouter(
        table=build_command_table(commands),
        sender=sender,
        admin_nick="sadbox",
    )

    async def run() -> None:
        spawner = TaskSpawner()
        dispatcher = MessageDispatcher(
            config=config or BotConfig(nick="linkbot"),
            router=router,
            previewer=previewer,
            audit=audit,
            spawner=spawner,
            current_nick=current_nick,
        )
        await dispatcher.dispatch(line)
        await spawner.wait_idle()

    asyncio.run(run())
    return sender, previewer, audit


def test_message_without_links_spawns_no_previews() -> None:
    _, previewer, audit = _dispatch(_line("nothing to see here"))
    assert previewer.calls == []
    assert [record[2] for record in audit.records] == ["nothing to see here"]


def test_duplicate_links_are_previewed_once() -> None:
    _, previewer, _ = _dispatch(_line("http://a.com/x and again http://a.com/x"))
    assert previewer.calls == [("http://a.com/x", "#x", "bob")]


def test_at_most_three_previews_per_message() -> None:
    text = "http://a.com http://b.com http://c.com http://d.com http://e.com"
    _, previewer, _ = _dispatch(_line(text))
    assert len(previewer.calls) == 3


def test_private_message_replies_to_sender() -> None:
    commands = [{"channel": "default", "commands": [{"name": "!ping", "text": "pong"}]}]
    sender, previewer, audit = _dispatch(
        _line("!ping http://a.com", target="LinkBot"), commands=commands
    )
    assert sender.sent == [("bob", "http://a.com: pong")]
    assert previewer.calls == [("http://a.com", "bob", "bob")]
    assert audit.records[0][1] == "bob"


def test_audit_failure_does_not_stop_commands_or_previews(caplog) -> None:
    commands = [{"channel": "default", "commands": [{"name": "!ping", "text": "pong"}]}]
    with caplog.at_level(logging.ERROR):
        sender, previewer, _ = _dispatch(
            _line("!ping see http://a.com"), audit=FakeAudit(fail=True), commands=commands
        )
    assert sender.sent == [("#x", "see: pong")]
    assert previewer.calls == [("http://a.com", "#x", "bob")]
    assert "Failed to log message" in caplog.text


def test_one_failing_preview_does_not_affect_the_others() -> None:
    previewer = FakePreviewer(fail_on="http://a.com")
    _, previewer, audit = _dispatch(_line("http://a.com http://b.com"), previewer=previewer)
    assert sorted(call[0] for call in previewer.calls) == ["http://a.com", "http://b.com"]
    assert len(audit.records) == 1


def test_reply_target() -> None:
    assert reply_target(_line("hi", target="#chan"), "linkbot") == "#chan"
    assert reply_target(_line("hi", target="linkbot"), "linkbot") == "bob"


def test_configured_link_cap_never_exceeds_three() -> None:
    text = "http://a.com http://b.com http://c.com http://d.com http://e.com"
    config = BotConfig(nick="linkbot", preview=PreviewConfig(max_links=10))
    _, previewer, _ = _dispatch(_line(text), config=config)
    assert len(previewer.calls) == 3


def test_private_message_after_nick_change_replies_to_sender() -> None:
    commands = [{"channel": "default", "commands": [{"name": "!ping", "text": "pong"}]}]
    sender, _, audit = _dispatch(
        _line("!ping", target="linkbot_"), commands=commands, current_nick=lambda: "linkbot_"
    )
    assert sender.sent == [("bob", "pong")]
    assert audit.records[0][1] == "bob"
