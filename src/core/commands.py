"""Command parsing and routing (core domain)."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Awaitable, Callable, List, Mapping, Optional, Tuple

from core.config import CommandEntry, CommandTable
from core.models import IncomingLine
from core.ports import SenderPort

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandCall:
    """A line split into its command word and arguments."""

    line: IncomingLine
    target: str
    words: Tuple[str, ...]

    @property
    def name(self) -> str:
        return self.words[0] if self.words else ""

    @property
    def argument(self) -> Optional[str]:
        """Second word of the line, if any."""

        return self.words[1] if len(self.words) >= 2 else None

    @property
    def tail(self) -> str:
        """Everything after the command word, whitespace-trimmed."""

        parts = self.line.text.strip().split(None, 1)
        return parts[1].strip() if len(parts) == 2 else ""


Handler = Callable[[CommandCall], Awaitable[None]]


def parse_command(line: IncomingLine, target: str) -> CommandCall:
    return CommandCall(line=line, target=target, words=tuple(line.text.split()))


def format_configured_reply(entry: CommandEntry, call: CommandCall) -> str:
    """Canned response, addressed to the second word when one is given."""

    if call.argument:
        return f"{call.argument}: {entry.text}"
    return entry.text


class CommandRouter:
    """Match a line against the three command tiers.

    Tiers are independent: an admin line can fire a privileged handler, a
    public handler and a configured response at once. Within the configured
    tier the first table hit wins.
    """

    def __init__(
        self,
        table: CommandTable,
        sender: SenderPort,
        admin_nick: str,
        privileged: Optional[Mapping[str, Handler]] = None,
        public: Optional[Mapping[str, Handler]] = None,
    ) -> None:
        self._table = table
        self._sender = sender
        self._admin_nick = admin_nick
        self._privileged = dict(privileged or {})
        self._public = dict(public or {})

    def route(self, line: IncomingLine, target: str) -> List[Awaitable[None]]:
        """Return the handler invocations this line triggers, not yet awaited."""

        call = parse_command(line, target)
        if not call.name:
            return []

        invocations: List[Awaitable[None]] = []
        if line.nick == self._admin_nick:
            handler = self._privileged.get(call.name)
            if handler is not None:
                invocations.append(handler(call))

        handler = self._public.get(call.name)
        if handler is not None:
            invocations.append(handler(call))

        entry = self._table.lookup(target, call.name)
        if entry is not None:
            invocations.append(self._send_configured(entry, call))

        if invocations:
            LOGGER.info("%s used %s in %s", line.nick, call.name, target)
        return invocations

    async def _send_configured(self, entry: CommandEntry, call: CommandCall) -> None:
        self._sender.send(call.target, format_configured_reply(entry, call))
