"""Static configuration for linkbot.

All user-editable settings (server, channels, commands, bad words, logging)
live in a single JSON file for quick edits without touching Python. Secrets
stay in the environment (see client.py).
"""

import json
import os

from dotenv import load_dotenv

from core.badwords import build_bad_words
from core.config import BotConfig, PreviewConfig, build_command_table
from core.links import MAX_LINKS

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

load_dotenv()

# config.json sits next to src/ unless LINKBOT_CONFIG points elsewhere.
CONFIG_PATH = os.getenv("LINKBOT_CONFIG", os.path.join(PROJECT_ROOT, "config.json"))


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Connection settings.
SERVER = _CONFIG.get("server", "irc.libera.chat")
PORT = int(_CONFIG.get("port", 6697))
SSL = bool(_CONFIG.get("ssl", True))
NICK = _CONFIG["nick"]
IDENT = _CONFIG.get("ident", NICK)
FULL_NAME = _CONFIG.get("full_name", NICK)
CHANNELS = list(_CONFIG.get("channels", []))

# Where to store the SQLite audit log.
DB_PATH = _CONFIG.get("db_path") or os.path.join(PROJECT_ROOT, "linkbot.db")
if not os.path.isabs(DB_PATH):
    DB_PATH = os.path.join(PROJECT_ROOT, DB_PATH)

# Longest line the transport sends in one PRIVMSG, in bytes.
SPLIT_LEN = int(_CONFIG.get("split_len", 450))

# Link previews: total request deadline and per-message link cap (never above 3).
_preview = _CONFIG.get("preview", {})
PREVIEW = PreviewConfig(
    timeout_seconds=float(_preview.get("timeout_seconds", 10)),
    max_links=min(int(_preview.get("max_links", MAX_LINKS)), MAX_LINKS),
)

BOT = BotConfig(
    nick=NICK,
    admin_nick=_CONFIG.get("admin_nick", "sadbox"),
    split_len=SPLIT_LEN,
    broadcast_channels=tuple(_CONFIG.get("broadcast_channels", [])),
    preview=PREVIEW,
)

# Commands and bad words are compiled once; both are read-only afterwards.
COMMANDS = build_command_table(_CONFIG.get("commands", []))
BAD_WORDS = build_bad_words(_CONFIG.get("bad_words", []))

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
