"""Core message dispatch pipeline.

This module is integration-agnostic. It only relies on ports for sending,
audit logging and task scheduling, so any chat transport can feed it.

Every incoming line fans out into independent tasks:
1) One per matched command handler
2) One page preview per harvested link (capped per message)
3) One audit log write

No branch waits for another and a failure in one never stops the rest.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from core.commands import CommandRouter
from core.config import BotConfig
from core.links import MAX_LINKS, harvest_links
from core.models import IncomingLine
from core.ports import AuditPort, PreviewPort, TaskSpawnerPort

LOGGER = logging.getLogger(__name__)


def reply_target(line: IncomingLine, own_nick: str) -> str:
    """Private messages are answered to the sender, everything else in place."""

    if line.target.lower() == own_nick.lower():
        return line.nick
    return line.target


class MessageDispatcher:
    """Entry point for every chat line the transport delivers."""

    def __init__(
        self,
        config: BotConfig,
        router: CommandRouter,
        previewer: PreviewPort,
        audit: AuditPort,
        spawner: TaskSpawnerPort,
        current_nick: Optional[Callable[[], str]] = None,
    ) -> None:
        self._config = config
        self._router = router
        self._previewer = previewer
        self._audit = audit
        self._spawner = spawner
        # The server may change our nick after connecting; ask the transport.
        self._current_nick = current_nick or (lambda: config.nick)

    async def dispatch(self, line: IncomingLine) -> None:
        """Schedule all work for one line and return without waiting on it."""

        target = reply_target(line, self._current_nick())

        try:
            invocations = self._router.route(line, target)
        except Exception:
            LOGGER.exception("Command routing failed for %s in %s", line.nick, target)
            invocations = []
        for invocation in invocations:
            self._spawner.spawn(invocation, name=f"command:{target}")

        try:
            links = harvest_links(line.text, min(self._config.preview.max_links, MAX_LINKS))
        except Exception:
            LOGGER.exception("Link harvesting failed for %s in %s", line.nick, target)
            links = []
        for link in links:
            self._spawner.spawn(
                self._previewer.preview(link, target, line.nick),
                name=f"preview:{link}",
            )

        self._spawner.spawn(self._record(line, target), name=f"audit:{target}")

    async def _record(self, line: IncomingLine, channel: str) -> None:
        # The audit sink is blocking; keep it off the event loop.
        try:
            await asyncio.to_thread(self._audit.record, line, channel, line.text)
        except Exception:
            LOGGER.exception("Failed to log message from %s in %s", line.nick, channel)
