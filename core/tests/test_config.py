from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from accounts_core.config import (
    CoreConfig,
    load_core_config,
    resolve_configured_paths,
    write_core_config,
)
from accounts_core.home import ensure_accounts_layout


def test_load_core_config_defaults_when_missing(tmp_path: Path) -> None:
    paths = ensure_accounts_layout(tmp_path)
    cfg = load_core_config(paths)
    assert isinstance(cfg, CoreConfig)
    assert cfg.network.bind_host == "127.0.0.1"
    assert cfg.auth.login_url == "/api/auth/signin"
    assert cfg.uploads.max_image_kb == 5120
    assert cfg.storage.s3.enabled is False


def test_load_core_config_validation_error(tmp_path: Path) -> None:
    paths = ensure_accounts_layout(tmp_path)

    paths.core_config_path.write_text(
        json.dumps({"storage": {"s3": {"presign_expires_seconds": 0}}}),
        encoding="utf-8",
    )

    with pytest.raises(ValidationError):
        load_core_config(paths)


def test_write_then_load_keeps_storage_settings(tmp_path: Path) -> None:
    paths = ensure_accounts_layout(tmp_path)
    cfg = CoreConfig.model_validate(
        {"storage": {"s3": {"enabled": True, "public_base_url": "https://cdn.example.test"}}}
    )

    write_core_config(paths, cfg)
    loaded = load_core_config(paths)

    assert loaded.storage.s3.enabled is True
    assert loaded.storage.s3.public_base_url == "https://cdn.example.test"


def test_resolve_configured_paths_creates_overrides(tmp_path: Path) -> None:
    paths = ensure_accounts_layout(tmp_path)

    cfg = CoreConfig.model_validate({"paths": {"db_dir": "custom_db", "logs_dir": "custom_logs"}})

    resolved = resolve_configured_paths(paths, cfg)
    assert resolved.db_dir.is_dir()
    assert resolved.logs_dir.is_dir()

    assert resolved.db_dir == (tmp_path / "custom_db").resolve()
    assert resolved.logs_dir == (tmp_path / "custom_logs").resolve()

    # Non-configurable dirs remain under home.
    assert resolved.config_dir == tmp_path / "config"
