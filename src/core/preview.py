"""Page preview fetching for links posted in chat.

A preview walks a strict sequence and stops quietly at the first step that
fails:
1) Add a default scheme and parse the URL
2) GET it within a total deadline; status >= 400 ends here
3) Decide whether the body is a page (declared or sniffed content type)
4) Read a capped amount of body, decode it, extract the title
5) Format a reply that fits one protocol line and send it

Nothing is retried and nothing is reported to the channel on failure; the
only trace of an aborted preview is a log line.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Optional
from urllib.parse import urlsplit

import aiohttp
from aiohttp import hdrs

from core.config import PreviewConfig
from core.models import ContentKind, FetchResult, FetchStatus
from core.ports import SenderPort
from core.sniffing import SNIFF_LEN, classify, normalize
from core.titles import extract_title

LOGGER = logging.getLogger(__name__)

_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.-]*://", re.IGNORECASE)
_FETCHABLE_SCHEMES = {"http", "https"}


def ensure_scheme(candidate: str) -> str:
    if _SCHEME_RE.match(candidate):
        return candidate
    return f"http://{candidate}"


def truncate_utf8(text: str, max_bytes: int) -> str:
    """Cut `text` to at most `max_bytes` UTF-8 bytes on a character boundary."""

    encoded = text.encode("utf-8")
    if len(encoded) <= max_bytes:
        return text
    return encoded[: max(max_bytes, 0)].decode("utf-8", errors="ignore")


def format_reply(title: str, host: str, nick: Optional[str], split_len: int) -> Optional[str]:
    """Return "<title> (<host> / <nick>)" sized to one outgoing line.

    Only the title is shortened. Returns None when even the suffix would not
    fit in the line.
    """

    suffix = f" ({host} / {nick})" if nick else f" ({host})"
    budget = split_len - len(suffix.encode("utf-8")) - 1
    if budget <= 0:
        return None
    return truncate_utf8(title, budget) + suffix


async def _read_capped(stream: aiohttp.StreamReader, limit: int) -> bytes:
    chunks = []
    remaining = limit
    while remaining > 0:
        chunk = await stream.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


class PagePreviewFetcher:
    """Fetch one link and post its title to the channel it came from."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        sender: SenderPort,
        split_len: int,
        config: Optional[PreviewConfig] = None,
    ) -> None:
        self._session = session
        self._sender = sender
        self._split_len = split_len
        self._config = config or PreviewConfig()

    async def fetch_title(self, candidate: str) -> FetchResult:
        """Run the fetch steps for one candidate and report how it ended."""

        url = ensure_scheme(candidate)
        try:
            parts = urlsplit(url)
            # Accessing .port validates it; urlsplit alone does not.
            _ = parts.port
        except ValueError as exc:
            return FetchResult.failed(f"malformed url: {exc}")
        if parts.scheme.lower() not in _FETCHABLE_SCHEMES:
            return FetchResult.skipped(f"unsupported scheme {parts.scheme}")
        if not parts.hostname:
            return FetchResult.failed("url has no host")
        host = parts.netloc.rpartition("@")[2]

        LOGGER.info("Fetching title for %s", url)
        timeout = aiohttp.ClientTimeout(total=self._config.timeout_seconds)
        try:
            async with self._session.get(url, timeout=timeout) as response:
                if response.status >= 400:
                    return FetchResult.failed(f"http status {response.status}")

                declared_type = response.headers.get(hdrs.CONTENT_TYPE)
                prefix = b""
                kind = ContentKind.HTML
                if declared_type:
                    kind = classify(declared_type, b"")
                else:
                    try:
                        prefix = await _read_capped(response.content, SNIFF_LEN)
                    except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
                        LOGGER.info("Reading sniff prefix of %s failed: %s", url, exc)
                    else:
                        kind = classify(None, prefix)
                if kind is not ContentKind.HTML:
                    return FetchResult.skipped("content-type is not text/html")

                remaining = max(self._config.max_body_bytes - len(prefix), 0)
                body = prefix + await _read_capped(response.content, remaining)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as exc:
            return FetchResult.failed(f"{type(exc).__name__}: {exc}")

        title = extract_title(normalize(body, declared_type))
        if title is None:
            return FetchResult.skipped("no usable title")
        return FetchResult.ok(title, host)

    async def preview(self, candidate: str, channel: str, nick: Optional[str] = None) -> None:
        """Send at most one title line for `candidate` to `channel`."""

        result = await self.fetch_title(candidate)
        if result.status is not FetchStatus.OK:
            LOGGER.info("No preview for %s in %s: %s", candidate, channel, result.reason)
            return

        reply = format_reply(result.title, result.host, nick, self._split_len)
        if reply is None:
            LOGGER.info("No preview for %s in %s: reply suffix exceeds line length", candidate, channel)
            return
        LOGGER.info("%s", reply)
        self._sender.send(channel, reply)
