from __future__ import annotations

import json
import sqlite3

from domain.errors import MalformedPayload
from domain.models import User

_DEFAULT_PROFILE_ID = "default"


class SQLiteSessionRepository:
    """SQLite-backed implementation of ``SessionRepositoryPort``.

    Stores the signed-in user as the same JSON object the service returns,
    one row per profile. A row that no longer parses is dropped on load.
    """

    _SCHEMA_SQL = """\
    CREATE TABLE IF NOT EXISTS session (
        profile_id TEXT PRIMARY KEY,
        user_json  TEXT NOT NULL
    );
    """

    def __init__(
        self,
        db_path: str = ":memory:",
        profile_id: str = _DEFAULT_PROFILE_ID,
    ) -> None:
        self._conn = sqlite3.connect(db_path)
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(self._SCHEMA_SQL)
        self._profile_id = profile_id

    def __enter__(self) -> "SQLiteSessionRepository":
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.close()

    def load_identity(self) -> User | None:
        row = self._conn.execute(
            "SELECT user_json FROM session WHERE profile_id = ?",
            (self._profile_id,),
        ).fetchone()
        if row is None:
            return None
        try:
            return User.from_payload(json.loads(row[0]))
        except (json.JSONDecodeError, MalformedPayload):
            self.clear_identity()
            return None

    def save_identity(self, user: User) -> None:
        self._conn.execute(
            "INSERT INTO session (profile_id, user_json) VALUES (?, ?) "
            "ON CONFLICT(profile_id) DO UPDATE SET user_json=excluded.user_json",
            (self._profile_id, json.dumps(user.to_payload(), sort_keys=True)),
        )
        self._conn.commit()

    def clear_identity(self) -> None:
        self._conn.execute("DELETE FROM session WHERE profile_id = ?", (self._profile_id,))
        self._conn.commit()

    def close(self) -> None:
        self._conn.close()
