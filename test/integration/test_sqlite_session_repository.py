from __future__ import annotations

import os
import sqlite3

import pytest

from domain import SessionRepositoryPort
from domain.models import User
from infra.persistence import SQLiteSessionRepository
from test.mocks import user_payload


@pytest.fixture()
def repo(tmp_path: str) -> SQLiteSessionRepository:
    db = os.path.join(tmp_path, "session.db")
    r = SQLiteSessionRepository(db_path=db)
    yield r
    r.close()


def _user(**kwargs) -> User:
    return User.from_payload(user_payload(**kwargs))


def test_conforms_to_session_repository_port(repo: SQLiteSessionRepository) -> None:
    assert isinstance(repo, SessionRepositoryPort)


def test_load_identity_returns_none_when_empty(repo: SQLiteSessionRepository) -> None:
    assert repo.load_identity() is None


def test_save_and_load_identity(repo: SQLiteSessionRepository) -> None:
    user = _user(skills=["python", "sql"], resume="https://cdn/cv.pdf")
    repo.save_identity(user)
    assert repo.load_identity() == user


def test_save_identity_overwrites(repo: SQLiteSessionRepository) -> None:
    repo.save_identity(_user(role="candidate"))
    admin = _user(role="admin", user_id="u2")
    repo.save_identity(admin)
    assert repo.load_identity() == admin


def test_clear_identity_is_idempotent(repo: SQLiteSessionRepository) -> None:
    repo.save_identity(_user())
    repo.clear_identity()
    repo.clear_identity()
    assert repo.load_identity() is None


def test_identity_survives_reopen(tmp_path: str) -> None:
    db = os.path.join(tmp_path, "persist.db")
    user = _user()
    with SQLiteSessionRepository(db_path=db) as first:
        first.save_identity(user)
    with SQLiteSessionRepository(db_path=db) as second:
        assert second.load_identity() == user


def test_profiles_are_isolated(tmp_path: str) -> None:
    db = os.path.join(tmp_path, "multi.db")
    alice = SQLiteSessionRepository(db_path=db, profile_id="alice")
    bob = SQLiteSessionRepository(db_path=db, profile_id="bob")
    alice.save_identity(_user(fullname="Alice"))
    assert bob.load_identity() is None
    assert alice.load_identity().fullname == "Alice"
    alice.close()
    bob.close()


def test_corrupt_row_is_dropped(tmp_path: str) -> None:
    db = os.path.join(tmp_path, "corrupt.db")
    repo = SQLiteSessionRepository(db_path=db)
    conn = sqlite3.connect(db)
    conn.execute(
        "INSERT INTO session (profile_id, user_json) VALUES (?, ?)",
        ("default", '{"_id": "u1", "role": "owner"}'),
    )
    conn.commit()
    conn.close()

    assert repo.load_identity() is None
    assert repo.load_identity() is None
    repo.close()
