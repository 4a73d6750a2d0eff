"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any integration-specific types.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class IncomingLine:
    """Minimal chat line used by the core dispatch pipeline."""

    nick: str
    ident: str
    host: str
    source: str
    command: str
    target: str
    text: str
    timestamp: datetime


class ContentKind(Enum):
    """Coarse classification of a fetched resource."""

    HTML = "html"
    NON_HTML = "non-html"


class FetchStatus(Enum):
    OK = "ok"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class FetchResult:
    """Outcome of one page preview attempt."""

    status: FetchStatus
    title: Optional[str] = None
    host: Optional[str] = None
    reason: Optional[str] = None

    @classmethod
    def ok(cls, title: str, host: str) -> "FetchResult":
        return cls(status=FetchStatus.OK, title=title, host=host)

    @classmethod
    def skipped(cls, reason: str) -> "FetchResult":
        return cls(status=FetchStatus.SKIPPED, reason=reason)

    @classmethod
    def failed(cls, reason: str) -> "FetchResult":
        return cls(status=FetchStatus.FAILED, reason=reason)
