from __future__ import annotations

from pathlib import Path

from accounts_core.home import AccountsPaths

DEFAULT_DB_FILENAME = "core.sqlite3"


def resolve_db_path(paths: AccountsPaths) -> Path:
    """Resolve the SQLite database holding users and sessions.

    The directory follows the `db_dir` layout entry or its config override.
    """

    return paths.db_dir / DEFAULT_DB_FILENAME
