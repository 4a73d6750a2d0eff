"""Document title extraction (core domain)."""

from __future__ import annotations

import html
import logging
import re
from typing import Optional

from bs4 import BeautifulSoup

LOGGER = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")
# C0 controls and DEL carry CTCP, colour and formatting codes on IRC.
_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")


def _collapse_whitespace(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


def _is_valid_text(text: str) -> bool:
    # Lone surrogates are what undecodable bytes turn into during normalize().
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def extract_title(markup: str) -> Optional[str]:
    """Return the first <title> of `markup`, cleaned up, or None.

    Entities are unescaped by the parser and again on the extracted text,
    whitespace runs collapse to a single space and control characters are
    dropped. Empty or undecodable titles count as no title.
    """

    try:
        soup = BeautifulSoup(markup, "html.parser")
    except Exception:
        LOGGER.info("Could not parse page markup", exc_info=True)
        return None

    tag = soup.find("title")
    if tag is None:
        return None

    # Whitespace controls become spaces first so words stay apart.
    text = _WHITESPACE_RE.sub(" ", html.unescape(tag.get_text()))
    title = _collapse_whitespace(_CONTROL_RE.sub("", text))
    if not title or not _is_valid_text(title):
        return None
    return title
