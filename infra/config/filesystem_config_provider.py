from __future__ import annotations

import json
import urllib.parse
from pathlib import Path

from domain.models import AppConfig

DEFAULT_API_BASE_URL = "http://localhost:8000/api/v1"

_REQUIRED_CONFIG_KEYS = {"API_BASE_URL"}
_PLACEHOLDER_PREFIX = "YOUR_"


class FileSystemConfigProvider:
    """Reads config.json from a config directory.

    Every public method re-reads from disk so that edits
    to the JSON file take effect without restarting the app.
    Relative paths in the file are resolved against the config directory.
    """

    def __init__(self, config_dir: str) -> None:
        self._config_dir = Path(config_dir)

    @property
    def config_path(self) -> Path:
        return self._config_dir / "config.json"

    def validate(self) -> list[str]:
        errors: list[str] = []
        data = self._validate_json_file(self.config_path, _REQUIRED_CONFIG_KEYS, errors)
        if data is not None:
            errors.extend(self._validate_config_formats(data))
        return errors

    @staticmethod
    def _validate_config_formats(data: dict) -> list[str]:
        errors: list[str] = []

        base_url = str(data.get("API_BASE_URL", ""))
        parsed = urllib.parse.urlparse(base_url)
        if base_url.upper().startswith(_PLACEHOLDER_PREFIX):
            errors.append("API_BASE_URL is a placeholder. Set the URL of the portal API.")
        elif parsed.scheme not in ("http", "https") or not parsed.netloc:
            errors.append("API_BASE_URL must start with 'http://' or 'https://'.")

        timeout = data.get("REQUEST_TIMEOUT_SECONDS")
        if timeout is not None and (
            isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0
        ):
            errors.append("REQUEST_TIMEOUT_SECONDS must be a positive number.")

        persist = data.get("PERSIST_SESSION")
        if persist is not None and not isinstance(persist, bool):
            errors.append("PERSIST_SESSION must be a boolean (true/false), not a string.")

        for key in ("SESSION_DB_PATH", "COOKIE_JAR_PATH"):
            value = data.get(key)
            if value is not None and (not isinstance(value, str) or not value.strip()):
                errors.append(f"{key} must be a non-empty string.")

        return errors

    def get_config(self) -> AppConfig:
        data = self._read_json("config.json")
        cookie_jar = data.get("COOKIE_JAR_PATH")
        return AppConfig(
            api_base_url=str(data.get("API_BASE_URL", DEFAULT_API_BASE_URL)).rstrip("/"),
            request_timeout_seconds=float(data.get("REQUEST_TIMEOUT_SECONDS", 30)),
            persist_session=bool(data.get("PERSIST_SESSION", False)),
            session_db_path=self._resolve(data.get("SESSION_DB_PATH", "job_portal_session.db")),
            cookie_jar_path=self._resolve(cookie_jar) if cookie_jar else None,
        )

    # -- internal helpers ---------------------------------------------------

    def _resolve(self, value: str) -> str:
        path = Path(value)
        if value == ":memory:" or path.is_absolute():
            return value
        return str(self._config_dir / path)

    def _read_json(self, filename: str) -> dict:
        path = self._config_dir / filename
        return json.loads(path.read_text(encoding="utf-8"))

    @staticmethod
    def _validate_json_file(
        path: Path,
        required_keys: set[str],
        errors: list[str],
    ) -> dict | None:
        """Validate a JSON file exists and has required keys.

        Returns the parsed dict on success, or None if the file
        is missing or unparseable.
        """
        if not path.is_file():
            errors.append(f"Missing file: {path}")
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            errors.append(f"Cannot read {path}: {exc}")
            return None
        if not isinstance(data, dict):
            errors.append(f"{path.name} must contain a JSON object")
            return None
        missing = required_keys - set(data.keys())
        if missing:
            errors.append(f"{path.name} missing keys: {', '.join(sorted(missing))}")
            return None
        return data
