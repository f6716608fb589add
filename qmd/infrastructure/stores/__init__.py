"""Persistent storage implementations."""
from .sqlite_store import SqliteStore

__all__ = ["SqliteStore"]
