"""IRC client factory for linkbot.

We explicitly manage the connection lifecycle (connect, join on welcome,
stop on disconnect) so it is obvious when the session starts and ends.
"""

from __future__ import annotations

import asyncio
import logging
import os

from dotenv import load_dotenv
from irc.client_aio import AioConnection, AioReactor
from irc.connection import AioFactory

import settings

LOGGER = logging.getLogger(__name__)


def build_client(loop: asyncio.AbstractEventLoop) -> AioReactor:
    """Create a reactor bound to `loop` that joins the configured channels."""

    reactor = AioReactor(loop=loop)

    def on_welcome(connection: AioConnection, event) -> None:
        for channel in settings.CHANNELS:
            LOGGER.info("Joining %s", channel)
            connection.join(channel)
        LOGGER.info("Connected!")

    reactor.add_global_handler("welcome", on_welcome)
    return reactor


async def connect_client(reactor: AioReactor) -> AioConnection:
    """Open the server connection using config.json plus IRC_PASS from the env.

    The server password is sent as "<nick>:<IRC_PASS>" so services can
    identify the account during registration.
    """

    load_dotenv()

    irc_pass = os.getenv("IRC_PASS")
    password = f"{settings.NICK}:{irc_pass}" if irc_pass else None

    LOGGER.info("Connecting to %s:%s as %s", settings.SERVER, settings.PORT, settings.NICK)
    connection = reactor.server()
    await connection.connect(
        settings.SERVER,
        settings.PORT,
        settings.NICK,
        password=password,
        username=settings.IDENT,
        ircname=settings.FULL_NAME,
        connect_factory=AioFactory(ssl=settings.SSL),
    )
    return connection
