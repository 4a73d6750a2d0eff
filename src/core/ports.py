"""Ports (interfaces) used by the core pipeline.

Ports define the minimal contracts for the chat transport, the audit log and
task scheduling so that the core can be reused with different backends.
"""

from __future__ import annotations

from typing import Any, Coroutine, Optional, Protocol

from core.models import IncomingLine


class SenderPort(Protocol):
    """Outgoing side of the chat transport."""

    def send(self, target: str, text: str) -> None:
        ...


class AuditPort(Protocol):
    """Append-only traffic log."""

    def record(self, line: IncomingLine, channel: str, text: str) -> None:
        ...


class TaskSpawnerPort(Protocol):
    """Fire-and-forget scheduling with no completion handle."""

    def spawn(self, coro: Coroutine[Any, Any, Any], name: Optional[str] = None) -> None:
        ...


class AnswerPort(Protocol):
    """Third-party lookup client (Q&A, weather) behind `!ask` and `!w`.

    No implementation ships with the bot; see `core.builtins.public_handlers`.
    """

    async def answer(self, query: str, nick: str) -> Optional[str]:
        ...


class PreviewPort(Protocol):
    """Link preview worker; sends its own reply, if any."""

    async def preview(self, candidate: str, channel: str, nick: Optional[str] = None) -> None:
        ...
