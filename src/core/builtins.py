"""Built-in command handlers wired into the router's fixed tiers."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Iterable, Mapping, Optional
from urllib.parse import quote_plus

from core.commands import CommandCall, Handler
from core.ports import AnswerPort, SenderPort

LOGGER = logging.getLogger(__name__)

AUDIO_URL = "https://sadbox.org/static/stuff/audiophile.html"
# mIRC colour 9 on 13.
CST_TEXT = "\x039,13#CSTMASTERRACE"
DANCE_FRAMES = (":D-<", ":D|-<", ":D/-<", ":D\\-<")
SEARCH_URL = "https://www.google.com/search?q={query}"
NO_IDEA = "I have no idea."


def reply_with(sender: SenderPort, text: str) -> Handler:
    async def handle(call: CommandCall) -> None:
        sender.send(call.target, text)

    return handle


def dance(sender: SenderPort, delay: float = 0.5) -> Handler:
    async def handle(call: CommandCall) -> None:
        for index, frame in enumerate(DANCE_FRAMES):
            if index:
                await asyncio.sleep(delay)
            sender.send(call.target, frame)

    return handle


def search(sender: SenderPort) -> Handler:
    async def handle(call: CommandCall) -> None:
        if not call.tail:
            sender.send(call.target, "Example: !search kittens")
            return
        link = SEARCH_URL.format(query=quote_plus(call.tail))
        sender.send(call.target, f"{call.line.nick}: {link}")

    return handle


def meebcast(sender: SenderPort, broadcast_channels: Iterable[str]) -> Handler:
    """Relay a short announcement to every broadcast channel but the origin."""

    channels = tuple(broadcast_channels)

    async def handle(call: CommandCall) -> None:
        if not call.tail:
            sender.send(call.target, f"{call.line.nick}: Example: !meebcast going live")
            return
        relayed = 0
        for channel in channels:
            if channel == call.target:
                continue
            sender.send(channel, f"<{call.line.nick}@{call.target}> {call.tail}")
            relayed += 1
        LOGGER.info("Relayed broadcast from %s to %s channels", call.line.nick, relayed)

    return handle


def answer(sender: SenderPort, client: AnswerPort, example: str) -> Handler:
    """Ask an external lookup client and relay its answer.

    An empty query gets the usage example; an empty answer gets the stock
    fallback.
    """

    async def handle(call: CommandCall) -> None:
        query = call.tail
        if not query:
            sender.send(call.target, example)
            return
        result = await client.answer(query, call.line.nick)
        if not result:
            sender.send(call.target, NO_IDEA)
            return
        sender.send(call.target, f"{call.line.nick}: {result}")

    return handle


def privileged_handlers(sender: SenderPort) -> Dict[str, Handler]:
    return {
        "!dance": dance(sender),
        "!audio": reply_with(sender, AUDIO_URL),
        "!cst": reply_with(sender, CST_TEXT),
    }


def public_handlers(
    sender: SenderPort,
    broadcast_channels: Iterable[str] = (),
    answer_clients: Optional[Mapping[str, AnswerPort]] = None,
) -> Dict[str, Handler]:
    """Public commands.

    `!ask` and `!w` are extension points: they are registered only for the
    names present in `answer_clients`. The bot itself ships no lookup client,
    so a deployment that wants them passes its own AnswerPort implementations.
    """

    handlers: Dict[str, Handler] = {
        "!search": search(sender),
        "!meebcast": meebcast(sender, broadcast_channels),
    }
    clients = answer_clients or {}
    if "!ask" in clients:
        handlers["!ask"] = answer(sender, clients["!ask"], "Example: !ask pi")
    if "!w" in clients:
        handlers["!w"] = answer(sender, clients["!w"], "Example: !w San Francisco, CA")
    return handlers
