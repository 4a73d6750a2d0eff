"""Adapters that connect the core to IRC and SQLite."""
