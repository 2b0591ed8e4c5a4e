from __future__ import annotations

import json
from pathlib import Path

import pytest

from accounts_core.db import resolve_db_path
from accounts_core.db.sessions import get_active_session
from accounts_core.db.users import get_user_by_email
from accounts_core.home import ensure_accounts_layout
from accounts_core.internal.bootstrap_users import main


def test_bootstrap_creates_user_and_session(tmp_path: Path, capsys) -> None:
    rc = main(["--home", str(tmp_path), "--email", "Dev@Example.test", "--session"])
    assert rc == 0

    out = json.loads(capsys.readouterr().out)
    assert out["email"] == "dev@example.test"
    assert out["cookie"] == "accounts_session"

    db_path = resolve_db_path(ensure_accounts_layout(tmp_path))
    user = get_user_by_email(db_path, email="dev@example.test")
    assert user is not None
    assert user.user_id == out["user_id"]

    session = get_active_session(db_path, session_token=out["session_token"])
    assert session is not None
    assert session.user_id == user.user_id


def test_bootstrap_reuses_existing_user(tmp_path: Path, capsys) -> None:
    main(["--home", str(tmp_path), "--email", "dev@example.test", "--name", "dev"])
    first = json.loads(capsys.readouterr().out)

    main(["--home", str(tmp_path), "--email", "dev@example.test"])
    second = json.loads(capsys.readouterr().out)

    assert first["user_id"] == second["user_id"]
    assert "session_token" not in second


def test_bootstrap_session_requires_email(tmp_path: Path) -> None:
    with pytest.raises(SystemExit):
        main(["--home", str(tmp_path), "--session"])
