from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class AccountsPaths:
    home: Path
    db_dir: Path
    logs_dir: Path
    config_dir: Path
    tmp_dir: Path

    @property
    def core_config_path(self) -> Path:
        return self.config_dir / "core.json"


def resolve_accounts_home(environ: dict[str, str] | None = None) -> Path:
    env = os.environ if environ is None else environ

    raw = (env.get("ACCOUNTS_HOME") or "").strip()
    if raw:
        candidate = Path(raw).expanduser()
        # A relative ACCOUNTS_HOME is anchored at the user's home, never the CWD.
        if not candidate.is_absolute():
            candidate = (Path.home() / candidate).resolve()
        else:
            candidate = candidate.resolve()
        return candidate

    def default_home() -> Path:
        if sys.platform.startswith("win"):
            base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
            if base:
                return Path(base) / "AccountsCore"
            return Path.home() / "AppData" / "Local" / "AccountsCore"

        if sys.platform == "darwin":
            return Path.home() / "Library" / "Application Support" / "AccountsCore"

        xdg = os.environ.get("XDG_DATA_HOME")
        if xdg:
            return Path(xdg) / "accounts-core"
        return Path.home() / ".local" / "share" / "accounts-core"

    return default_home().resolve()


def ensure_accounts_layout(home: Path) -> AccountsPaths:
    home.mkdir(parents=True, exist_ok=True)

    db_dir = home / "db"
    logs_dir = home / "logs"
    config_dir = home / "config"
    tmp_dir = home / "tmp"

    for path in (db_dir, logs_dir, config_dir, tmp_dir):
        path.mkdir(parents=True, exist_ok=True)

    return AccountsPaths(
        home=home,
        db_dir=db_dir,
        logs_dir=logs_dir,
        config_dir=config_dir,
        tmp_dir=tmp_dir,
    )
