from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from accounts_core.db.migrations import MIGRATIONS

logger = logging.getLogger(__name__)

_LEDGER_DDL = (
    "CREATE TABLE IF NOT EXISTS schema_migrations ("
    " name TEXT PRIMARY KEY,"
    " applied_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))"
    ");"
)


def applied_migration_names(conn: sqlite3.Connection) -> set[str]:
    conn.execute(_LEDGER_DDL)
    return {row[0] for row in conn.execute("SELECT name FROM schema_migrations;")}


def apply_migrations(db_path: Path) -> list[str]:
    """Bring the users/sessions schema up to date.

    Returns the names applied by this call; an up-to-date DB yields [].
    """

    db_path.parent.mkdir(parents=True, exist_ok=True)

    newly_applied: list[str] = []
    with sqlite3.connect(db_path) as conn:
        conn.execute("PRAGMA foreign_keys = ON;")
        done = applied_migration_names(conn)

        for name, sql in MIGRATIONS:
            if name in done:
                continue
            logger.info("Applying migration %s to %s", name, db_path)
            conn.executescript(sql)
            conn.execute("INSERT INTO schema_migrations (name) VALUES (?);", (name,))
            newly_applied.append(name)

    return newly_applied
