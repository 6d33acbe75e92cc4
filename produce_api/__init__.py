"""Produce API: CRUD over produce records stored in SQLite."""

__version__ = "0.1.0"
