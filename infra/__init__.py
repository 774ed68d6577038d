"""Infrastructure adapters – concrete implementations of domain ports."""

from .config import FileSystemConfigProvider
from .http import UrllibApiClient
from .interaction import ConsoleNotifier
from .persistence import SQLiteSessionRepository
from .runtime import StructuredLogger

__all__ = [
    "FileSystemConfigProvider",
    "UrllibApiClient",
    "ConsoleNotifier",
    "SQLiteSessionRepository",
    "StructuredLogger",
]
