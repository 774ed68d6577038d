from __future__ import annotations

from typing import Any

from domain.ports import LoggerPort, NavigatorPort, NotifierPort


class InMemoryLogger:
    def __init__(self) -> None:
        self.events: list[tuple[str, str, dict[str, Any]]] = []

    def info(self, message: str, **fields: Any) -> None:
        self.events.append(("info", message, fields))

    def warning(self, message: str, **fields: Any) -> None:
        self.events.append(("warning", message, fields))

    def error(self, message: str, **fields: Any) -> None:
        self.events.append(("error", message, fields))

    def messages(self) -> list[str]:
        return [message for _, message, _ in self.events]


class RecordingNotifier:
    def __init__(self) -> None:
        self.successes: list[str] = []
        self.errors: list[str] = []

    def success(self, message: str) -> None:
        self.successes.append(message)

    def error(self, message: str) -> None:
        self.errors.append(message)

    @property
    def count(self) -> int:
        return len(self.successes) + len(self.errors)


class RecordingNavigator:
    """Unguarded navigator that records every requested path."""

    def __init__(self, start_path: str = "/") -> None:
        self.visited: list[str] = [start_path]

    @property
    def current_path(self) -> str:
        return self.visited[-1]

    def navigate(self, path: str) -> str:
        self.visited.append(path)
        return path


_logger_check: LoggerPort = InMemoryLogger()
_notifier_check: NotifierPort = RecordingNotifier()
_navigator_check: NavigatorPort = RecordingNavigator()
