"""SQLite-backed persistence adapters for domain repository ports."""

from .sqlite_session_repository import SQLiteSessionRepository

__all__ = ["SQLiteSessionRepository"]
