from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from accounts_core.db.ids import new_user_id


def _utc_now_sqlite_iso() -> str:
    # Match the DB default format closely: YYYY-MM-DDTHH:MM:SS.sssZ
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class UserRow:
    user_id: str
    email: str
    name: str
    description: str
    image: str
    setup_completed: bool
    created_at: str
    updated_at: str


def _user_from_db_row(row: sqlite3.Row) -> UserRow:
    return UserRow(
        user_id=row["user_id"],
        email=row["email"],
        name=row["name"],
        description=row["description"],
        image=row["image"],
        setup_completed=bool(row["setup_completed"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _connect(db_path) -> sqlite3.Connection:
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


_SELECT_USER = """
SELECT user_id, email, name, description, image, setup_completed,
       created_at, updated_at
FROM users
""".strip()


def create_user(
    db_path,
    *,
    email: str,
    name: str = "",
    description: str = "",
    image: str = "",
) -> UserRow:
    """Insert a user record.

    Accounts are provisioned by the identity provider on first login; this is the
    hook it (or the dev bootstrapper) calls.
    """

    user_id = new_user_id()

    with _connect(db_path) as conn:
        conn.execute(
            """
            INSERT INTO users (user_id, email, name, description, image)
            VALUES (?, ?, ?, ?, ?);
            """.strip(),
            (user_id, email.strip().lower(), name, description, image),
        )
        row = conn.execute(f"{_SELECT_USER} WHERE user_id = ?;", (user_id,)).fetchone()

    if row is None:
        raise RuntimeError("Failed to read user after insert")

    return _user_from_db_row(row)


def get_user(db_path, *, user_id: str) -> UserRow | None:
    with _connect(db_path) as conn:
        row = conn.execute(f"{_SELECT_USER} WHERE user_id = ?;", (user_id,)).fetchone()

    if row is None:
        return None
    return _user_from_db_row(row)


def get_user_by_email(db_path, *, email: str) -> UserRow | None:
    with _connect(db_path) as conn:
        row = conn.execute(
            f"{_SELECT_USER} WHERE email = ?;", (email.strip().lower(),)
        ).fetchone()

    if row is None:
        return None
    return _user_from_db_row(row)


def update_user(
    db_path,
    *,
    user_id: str,
    name: str | None = None,
    description: str | None = None,
    image: str | None = None,
    setup_completed: bool | None = None,
) -> UserRow | None:
    """Apply a partial update; the email is never touched here."""

    current = get_user(db_path, user_id=user_id)
    if current is None:
        return None

    updates: list[str] = []
    params: list[Any] = []

    if name is not None:
        updates.append("name = ?")
        params.append(name)

    if description is not None:
        updates.append("description = ?")
        params.append(description)

    if image is not None:
        updates.append("image = ?")
        params.append(image)

    if setup_completed is not None:
        updates.append("setup_completed = ?")
        params.append(1 if setup_completed else 0)

    if not updates:
        return current

    updates.append("updated_at = ?")
    params.append(_utc_now_sqlite_iso())
    params.append(user_id)

    with _connect(db_path) as conn:
        conn.execute(
            f"""
            UPDATE users
            SET {", ".join(updates)}
            WHERE user_id = ?;
            """.strip(),
            params,
        )
        row = conn.execute(f"{_SELECT_USER} WHERE user_id = ?;", (user_id,)).fetchone()

    if row is None:
        return None
    return _user_from_db_row(row)
