"""IRC-to-core line mapping adapter.

This keeps irc library details out of the core pipeline.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from irc.client import NickMask

from core.models import IncomingLine

# irc event types that carry chat text, mapped to the protocol command kind.
MESSAGE_EVENTS = {
    "pubmsg": "PRIVMSG",
    "privmsg": "PRIVMSG",
    "action": "ACTION",
}


def _event_text(event: Any) -> str:
    arguments = getattr(event, "arguments", None) or []
    if not arguments:
        return ""
    return str(arguments[0])


def build_line(event: Any, received_at: Optional[datetime] = None) -> Optional[IncomingLine]:
    """Build a core IncomingLine from an irc Event, or None for non-message events."""

    command = MESSAGE_EVENTS.get(getattr(event, "type", ""))
    if command is None:
        return None

    source = str(getattr(event, "source", "") or "")
    mask = NickMask(source)
    return IncomingLine(
        nick=mask.nick or "",
        ident=mask.user or "",
        host=mask.host or "",
        source=source,
        command=command,
        target=str(getattr(event, "target", "") or ""),
        text=_event_text(event),
        timestamp=received_at or datetime.now(timezone.utc),
    )
