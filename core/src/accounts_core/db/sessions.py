from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from accounts_core.db.ids import new_session_token


def _iso(ts: datetime) -> str:
    return ts.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class SessionRow:
    session_token: str
    user_id: str
    created_at: str
    expires_at: str


def _session_from_db_row(row: sqlite3.Row) -> SessionRow:
    return SessionRow(
        session_token=row["session_token"],
        user_id=row["user_id"],
        created_at=row["created_at"],
        expires_at=row["expires_at"],
    )


def _connect(db_path) -> sqlite3.Connection:
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


def create_session(db_path, *, user_id: str, max_age: timedelta) -> SessionRow:
    token = new_session_token()
    expires_at = _iso(datetime.now(UTC) + max_age)

    with _connect(db_path) as conn:
        conn.execute(
            "INSERT INTO sessions (session_token, user_id, expires_at) VALUES (?, ?, ?);",
            (token, user_id, expires_at),
        )
        row = conn.execute(
            """
            SELECT session_token, user_id, created_at, expires_at
            FROM sessions
            WHERE session_token = ?;
            """.strip(),
            (token,),
        ).fetchone()

    if row is None:
        raise RuntimeError("Failed to read session after insert")

    return _session_from_db_row(row)


def get_active_session(db_path, *, session_token: str) -> SessionRow | None:
    """Return the session for a token unless it is unknown or expired."""

    now = _iso(datetime.now(UTC))
    with _connect(db_path) as conn:
        row = conn.execute(
            """
            SELECT session_token, user_id, created_at, expires_at
            FROM sessions
            WHERE session_token = ? AND expires_at > ?;
            """.strip(),
            (session_token, now),
        ).fetchone()

    if row is None:
        return None
    return _session_from_db_row(row)


def delete_session(db_path, *, session_token: str) -> bool:
    with _connect(db_path) as conn:
        cur = conn.execute("DELETE FROM sessions WHERE session_token = ?;", (session_token,))
    return cur.rowcount > 0
