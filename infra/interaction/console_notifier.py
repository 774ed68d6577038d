from __future__ import annotations

import sys
from typing import TextIO


class ConsoleNotifier:
    """Simple stdout implementation of NotifierPort."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream
        self.last_message: str | None = None

    def success(self, message: str) -> None:
        self._write(f"[ok] {message}")

    def error(self, message: str) -> None:
        self._write(f"[error] {message}")

    def _write(self, line: str) -> None:
        self.last_message = line
        print(line, file=self._stream if self._stream is not None else sys.stdout)
