"""Link harvesting from raw chat text (core domain)."""

from __future__ import annotations

import re
from typing import List

MAX_LINKS = 3

# Relaxed URL pattern: explicit scheme, "www." prefix, or a bare host with a
# known-looking TLD followed by a path. Parenthesised segments are allowed
# one level deep so links like .../Foo_(bar) survive.
_PATH_CHARS = r"[^\s()<>\"'`\[\]{}]"
_PATH = rf"(?:{_PATH_CHARS}|\({_PATH_CHARS}*\))*"
_HOST = r"(?:[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?\.)+[a-z]{2,24}"

URL_PATTERN = re.compile(
    rf"""
    (?<![\w@.])
    (?:
        [a-z][a-z0-9+.-]{{1,15}}://{_PATH_CHARS}{_PATH}    # scheme://anything
      | www\.{_HOST}(?::\d{{1,5}})?(?:/{_PATH})?           # www.host
      | {_HOST}(?::\d{{1,5}})?/{_PATH}                     # host.tld/path
    )
    """,
    re.IGNORECASE | re.VERBOSE,
)

# Punctuation that usually ends a sentence rather than a URL.
_TRAILING = ".,:;!?'\""


def _trim_candidate(candidate: str) -> str:
    while candidate:
        last = candidate[-1]
        if last in _TRAILING:
            candidate = candidate[:-1]
            continue
        if last == ")" and candidate.count(")") > candidate.count("("):
            candidate = candidate[:-1]
            continue
        break
    return candidate


def harvest_links(text: str, limit: int = MAX_LINKS) -> List[str]:
    """Return up to `limit` distinct URL-like substrings in message order.

    Duplicates are compared by exact string; anything past the limit is
    dropped without error.
    """

    links: List[str] = []
    if limit <= 0:
        return links
    for match in URL_PATTERN.finditer(text):
        candidate = _trim_candidate(match.group(0))
        if not candidate or candidate.endswith("://") or candidate in links:
            continue
        links.append(candidate)
        if len(links) >= limit:
            break
    return links
