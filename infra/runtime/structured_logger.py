from __future__ import annotations

import json
import sys
from datetime import datetime, timezone
from typing import Any, TextIO


class StructuredLogger:
    """JSON-lines logger. Writes to stderr so stdout stays free for command output."""

    def __init__(self, name: str = "job_portal", stream: TextIO | None = None) -> None:
        self._name = name
        self._stream = stream

    def info(self, message: str, **fields: Any) -> None:
        self._emit("info", message, fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._emit("warning", message, fields)

    def error(self, message: str, **fields: Any) -> None:
        self._emit("error", message, fields)

    def _emit(self, level: str, message: str, fields: dict[str, Any]) -> None:
        payload = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": level,
            "logger": self._name,
            "message": message,
            "fields": fields,
        }
        stream = self._stream if self._stream is not None else sys.stderr
        print(json.dumps(payload, sort_keys=True, default=str), file=stream)
