from __future__ import annotations

import sqlite3
from datetime import timedelta
from pathlib import Path

import pytest

from accounts_core.db.migrate import apply_migrations
from accounts_core.db.sessions import create_session, delete_session, get_active_session
from accounts_core.db.users import create_user, get_user, get_user_by_email, update_user


def _db(tmp_path: Path) -> Path:
    db_path = tmp_path / "core.sqlite3"
    apply_migrations(db_path)
    return db_path


def test_create_user_defaults(tmp_path: Path) -> None:
    db_path = _db(tmp_path)

    user = create_user(db_path, email="  Alice@Example.TEST ", name="alice")

    assert len(user.user_id) == 64
    assert user.email == "alice@example.test"
    assert user.name == "alice"
    assert user.description == ""
    assert user.image == ""
    assert user.setup_completed is False
    assert get_user_by_email(db_path, email="ALICE@example.test") == user


def test_email_is_unique(tmp_path: Path) -> None:
    db_path = _db(tmp_path)
    create_user(db_path, email="bob@example.test")

    with pytest.raises(sqlite3.IntegrityError):
        create_user(db_path, email="bob@example.test")


def test_update_user_touches_only_given_fields(tmp_path: Path) -> None:
    db_path = _db(tmp_path)
    user = create_user(
        db_path, email="carol@example.test", name="carol", image="https://img.example.test/c.png"
    )

    updated = update_user(db_path, user_id=user.user_id, description="Hi", setup_completed=True)

    assert updated is not None
    assert updated.name == "carol"
    assert updated.image == "https://img.example.test/c.png"
    assert updated.description == "Hi"
    assert updated.setup_completed is True
    assert updated.email == user.email
    assert updated.updated_at >= user.updated_at


def test_update_unknown_user_returns_none(tmp_path: Path) -> None:
    db_path = _db(tmp_path)
    assert update_user(db_path, user_id="missing", name="x") is None
    assert get_user(db_path, user_id="missing") is None


def test_session_lifecycle(tmp_path: Path) -> None:
    db_path = _db(tmp_path)
    user = create_user(db_path, email="dave@example.test")

    session = create_session(db_path, user_id=user.user_id, max_age=timedelta(days=1))
    found = get_active_session(db_path, session_token=session.session_token)
    assert found is not None
    assert found.user_id == user.user_id

    assert delete_session(db_path, session_token=session.session_token) is True
    assert get_active_session(db_path, session_token=session.session_token) is None
    assert delete_session(db_path, session_token=session.session_token) is False


def test_expired_session_is_not_active(tmp_path: Path) -> None:
    db_path = _db(tmp_path)
    user = create_user(db_path, email="erin@example.test")

    session = create_session(db_path, user_id=user.user_id, max_age=timedelta(seconds=-1))

    assert get_active_session(db_path, session_token=session.session_token) is None
