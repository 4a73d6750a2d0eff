"""IRC sending adapter.

Wraps the irc connection so the core only ever sees SenderPort.send().
"""

from __future__ import annotations

import logging
from typing import Iterator

from irc.client import ServerNotConnectedError

LOGGER = logging.getLogger(__name__)


def split_message(text: str, split_len: int) -> Iterator[str]:
    """Yield chunks of at most `split_len` UTF-8 bytes, cut on character boundaries."""

    for raw_line in text.splitlines() or [""]:
        encoded = raw_line.encode("utf-8")
        while len(encoded) > split_len:
            cut = split_len
            # Back off to the start of a UTF-8 sequence.
            while cut > 0 and (encoded[cut] & 0xC0) == 0x80:
                cut -= 1
            if cut == 0:
                cut = split_len
            yield encoded[:cut].decode("utf-8", errors="ignore")
            encoded = encoded[cut:]
        if encoded:
            yield encoded.decode("utf-8")


class IrcSender:
    """SenderPort adapter that posts PRIVMSGs on a live connection."""

    def __init__(self, connection, split_len: int) -> None:
        self._connection = connection
        self._split_len = split_len

    def send(self, target: str, text: str) -> None:
        """Send `text` to a channel or nick, one PRIVMSG per split chunk."""

        for chunk in split_message(text, self._split_len):
            try:
                self._connection.privmsg(target, chunk)
            except ServerNotConnectedError:
                LOGGER.warning("Dropping message to %s: not connected", target)
                return
