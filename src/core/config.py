"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely. All of
them are frozen: they are built once before the event loop starts and then
shared by every dispatch call without locking.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Tuple

from core.links import MAX_LINKS

DEFAULT_SCOPE = "default"
# Body bytes read per preview; a truncated page may simply have no title.
MAX_BODY_BYTES = 50000


@dataclass(frozen=True)
class CommandEntry:
    """One operator-configured command and its canned response."""

    name: str
    text: str


@dataclass(frozen=True)
class CommandGroup:
    """Commands that apply to one channel, or to every channel for "default"."""

    channel: str
    commands: Tuple[CommandEntry, ...]

    def applies_to(self, channel: str) -> bool:
        return self.channel == channel or self.channel == DEFAULT_SCOPE


@dataclass(frozen=True)
class CommandTable:
    """Ordered, read-only command lookup table."""

    groups: Tuple[CommandGroup, ...] = ()

    def lookup(self, channel: str, name: str) -> Optional[CommandEntry]:
        """Return the first entry named `name` visible from `channel`.

        Groups are scanned in table order and the first hit ends the whole
        scan, so an earlier "default" entry shadows a later channel entry
        with the same name.
        """

        for group in self.groups:
            if not group.applies_to(channel):
                continue
            for entry in group.commands:
                if entry.name == name:
                    return entry
        return None

    def __len__(self) -> int:
        return sum(len(group.commands) for group in self.groups)


@dataclass(frozen=True)
class PreviewConfig:
    """Link preview limits consumed by the page fetcher."""

    timeout_seconds: float = 10.0
    max_links: int = MAX_LINKS
    max_body_bytes: int = MAX_BODY_BYTES


@dataclass(frozen=True)
class BotConfig:
    """Everything the dispatcher needs to know about its own identity."""

    nick: str
    admin_nick: str = "sadbox"
    split_len: int = 450
    broadcast_channels: Tuple[str, ...] = ()
    preview: PreviewConfig = field(default_factory=PreviewConfig)


def build_command_table(commands_config: Iterable[dict]) -> CommandTable:
    """Normalize command configs into an immutable table.

    Config order is preserved because lookup is first-match-wins.
    """

    groups = []
    for group in commands_config:
        channel = group.get("channel")
        if not channel:
            raise ValueError(f"Command group without a channel: {group!r}")
        entries = []
        for command in group.get("commands", []) or []:
            name = command.get("name")
            text = command.get("text")
            if not name or text is None:
                raise ValueError(f"Command in {channel} needs a name and text: {command!r}")
            entries.append(CommandEntry(name=name, text=text))
        groups.append(CommandGroup(channel=channel, commands=tuple(entries)))
    return CommandTable(groups=tuple(groups))
