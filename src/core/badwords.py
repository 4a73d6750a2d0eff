"""Bad-word pattern compilation and matching (core domain)."""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Iterable, List


@dataclass(frozen=True)
class BadWord:
    """Compiled bad-word pattern tallied per nick by the audit log."""

    word: str
    pattern: re.Pattern


def build_bad_words(bad_words_config: Iterable[dict]) -> List[BadWord]:
    """Compile bad-word configs once at startup.

    A broken pattern raises re.error here rather than on some later message.
    """

    compiled: List[BadWord] = []
    for entry in bad_words_config:
        word = entry.get("word")
        query = entry.get("query")
        if not word or not query:
            raise ValueError(f"Bad word entry needs a word and a query: {entry!r}")
        compiled.append(BadWord(word=word, pattern=re.compile(query)))
    return compiled


def match_bad_words(text: str, bad_words: Iterable[BadWord]) -> List[str]:
    """Return the words whose pattern occurs in `text`, in table order."""

    return [bad_word.word for bad_word in bad_words if bad_word.pattern.search(text)]
