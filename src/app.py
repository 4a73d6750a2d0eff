"""Application entry point for the linkbot IRC bot."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

import aiohttp
from art import tprint
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

import settings
from adapters.irc_mapper import MESSAGE_EVENTS, build_line
from adapters.irc_sender import IrcSender
from adapters.sqlite_storage import SQLiteAuditLog
from client import build_client, connect_client
from core.builtins import privileged_handlers, public_handlers
from core.commands import CommandRouter
from core.dispatcher import MessageDispatcher
from core.preview import PagePreviewFetcher
from core.tasks import TaskSpawner

NAME = "LINKBOT"
FONT = "tarty-1"
# Outstanding previews get this long to finish after a disconnect.
SHUTDOWN_GRACE_SECONDS = 15


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


class _RedactingFormatter(logging.Formatter):
    def __init__(self, secrets: list[str], fmt: str, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._secrets = [secret for secret in secrets if secret]

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


def _collect_redaction_values(config: dict) -> list[str]:
    redact_cfg = config.get("redact", {}) if config else {}
    if not redact_cfg.get("enabled", False):
        return []
    values = []
    for name in redact_cfg.get("patterns", []):
        value = os.getenv(name)
        if value:
            values.append(value)
    return sorted(set(values), key=len, reverse=True)


def _configure_logging() -> None:
    config = settings.LOGGING or {}
    if not config.get("enabled", False):
        return

    load_dotenv()
    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    secrets = _collect_redaction_values(config)
    formatter = _RedactingFormatter(secrets, fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/linkbot.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        max_bytes = int(file_cfg.get("max_bytes", 5 * 1024 * 1024))
        backup_count = int(file_cfg.get("backup_count", 5))
        file_handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)


def _log_commands(logger: logging.Logger) -> None:
    number = 0
    for group in settings.COMMANDS.groups:
        for command in group.commands:
            number += 1
            logger.info("%d %s/%s: %s", number, group.channel, command.name, command.text)
    logger.info("Found %d commands", number)


async def _serve() -> None:
    logger = logging.getLogger(__name__)

    audit = SQLiteAuditLog(settings.DB_PATH, settings.BAD_WORDS)
    audit.init_db()
    logger.info("%s bad words are loaded", len(settings.BAD_WORDS))

    loop = asyncio.get_running_loop()
    reactor = build_client(loop)
    spawner = TaskSpawner()
    disconnected = loop.create_future()

    async with aiohttp.ClientSession() as session:
        connection = await connect_client(reactor)
        sender = IrcSender(connection, settings.SPLIT_LEN)

        router = CommandRouter(
            table=settings.COMMANDS,
            sender=sender,
            admin_nick=settings.BOT.admin_nick,
            privileged=privileged_handlers(sender),
            public=public_handlers(sender, settings.BOT.broadcast_channels),
        )
        previewer = PagePreviewFetcher(session, sender, settings.SPLIT_LEN, settings.PREVIEW)
        dispatcher = MessageDispatcher(
            config=settings.BOT,
            router=router,
            previewer=previewer,
            audit=audit,
            spawner=spawner,
            current_nick=connection.get_nickname,
        )

        # Every message event type shares this handler; fan-out happens in the dispatcher.
        def on_message(connection, event) -> None:
            try:
                line = build_line(event)
            except Exception:
                logger.exception("Could not map %s event", event.type)
                return
            if line is not None:
                spawner.spawn(dispatcher.dispatch(line), name=f"dispatch:{line.target}")

        def on_disconnect(connection, event) -> None:
            logger.info("Disconnected from %s", settings.SERVER)
            if not disconnected.done():
                disconnected.set_result(None)

        for event_type in MESSAGE_EVENTS:
            reactor.add_global_handler(event_type, on_message)
        reactor.add_global_handler("disconnect", on_disconnect)

        logger.info("Client connected. Listening for incoming messages...")
        await disconnected

        try:
            await asyncio.wait_for(spawner.wait_idle(), SHUTDOWN_GRACE_SECONDS)
        except asyncio.TimeoutError:
            logger.warning("Stopping with %s tasks still running", spawner.pending)


def _run() -> None:
    _print_banner()
    _configure_logging()
    logger = logging.getLogger(__name__)

    logger.info("Starting linkbot")
    logger.info("Joining: %s", settings.CHANNELS)
    logger.info("Nick: %s", settings.NICK)
    logger.info("Ident: %s", settings.IDENT)
    logger.info("FullName: %s", settings.FULL_NAME)
    _log_commands(logger)

    asyncio.run(_serve())


def _show_commands() -> None:
    table = Table(title="Configured commands")
    table.add_column("#", justify="right")
    table.add_column("Channel")
    table.add_column("Name")
    table.add_column("Response")
    number = 0
    for group in settings.COMMANDS.groups:
        for command in group.commands:
            number += 1
            table.add_row(str(number), group.channel, command.name, command.text)
    Console().print(table)


def _show_words(nick: str) -> None:
    audit = SQLiteAuditLog(settings.DB_PATH)
    audit.init_db()
    table = Table(title=f"Bad words used by {nick}")
    table.add_column("Word")
    table.add_column("Count", justify="right")
    for word, count in audit.top_words(nick):
        table.add_row(word, str(count))
    Console().print(table)


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="linkbot")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("run", help="Connect and start answering")
    subparsers.add_parser("commands", help="List the configured command table")
    words_parser = subparsers.add_parser("words", help="Show bad-word counts for a nick")
    words_parser.add_argument("nick")

    args = parser.parse_args(argv)
    if args.command == "commands":
        _show_commands()
        return
    if args.command == "words":
        _show_words(args.nick)
        return
    _run()


if __name__ == "__main__":
    main()
