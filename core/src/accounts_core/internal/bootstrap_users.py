from __future__ import annotations

import argparse
import json
from datetime import timedelta
from pathlib import Path

from accounts_core.config import load_core_config, resolve_configured_paths
from accounts_core.db import resolve_db_path
from accounts_core.db.migrate import apply_migrations
from accounts_core.db.sessions import create_session
from accounts_core.db.users import create_user, get_user_by_email
from accounts_core.home import ensure_accounts_layout, resolve_accounts_home


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="python -m accounts_core.internal.bootstrap_users",
        description=(
            "Accounts Core dev bootstrapper: stands in for the identity provider "
            "by creating users and sessions directly in the DB."
        ),
    )
    parser.add_argument("--home", type=Path, default=None, help="Override ACCOUNTS_HOME")
    parser.add_argument("--migrate", action="store_true", help="Apply migrations")
    parser.add_argument("--email", help="Create (or reuse) the user with this email")
    parser.add_argument("--name", default="", help="Initial display name for a new user")
    parser.add_argument("--image", default="", help="Initial image URL for a new user")
    parser.add_argument(
        "--session",
        action="store_true",
        help="Issue a session token for --email and print it",
    )
    args = parser.parse_args(argv)

    environ = None
    if args.home is not None:
        environ = {"ACCOUNTS_HOME": str(args.home)}

    home = resolve_accounts_home(environ)
    paths = ensure_accounts_layout(home)
    config = load_core_config(paths)
    paths = resolve_configured_paths(paths, config)

    db_path = resolve_db_path(paths)

    if args.migrate or args.email:
        apply_migrations(db_path)

    if args.session and not args.email:
        parser.error("--session requires --email")

    if args.email:
        user = get_user_by_email(db_path, email=args.email)
        if user is None:
            user = create_user(db_path, email=args.email, name=args.name, image=args.image)

        out: dict[str, str] = {"user_id": user.user_id, "email": user.email}
        if args.session:
            session = create_session(
                db_path,
                user_id=user.user_id,
                max_age=timedelta(days=config.auth.session_max_age_days),
            )
            out["session_token"] = session.session_token
            out["cookie"] = config.auth.session_cookie
        print(json.dumps(out, ensure_ascii=False))

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
