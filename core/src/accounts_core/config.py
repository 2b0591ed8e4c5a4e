from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from accounts_core.home import AccountsPaths


class NetworkConfig(BaseModel):
    bind_host: str = Field(default="127.0.0.1")
    core_port: int = Field(default=8790, ge=1, le=65535)


class PathOverrides(BaseModel):
    db_dir: str | None = None
    logs_dir: str | None = None


class AuthConfig(BaseModel):
    login_url: str = Field(
        default="/api/auth/signin",
        description="Where the session gate sends visitors without a session.",
    )
    session_cookie: str = Field(default="accounts_session")
    session_max_age_days: int = Field(default=30, ge=1)


class LoggingConfig(BaseModel):
    max_size_mb: int = Field(
        default=10, ge=1, description="Max size of a log file in MB before rolling."
    )
    backup_count: int = Field(default=5, ge=1, description="Number of log archives to keep.")


class UploadsConfig(BaseModel):
    max_image_kb: int = Field(
        default=5120,
        ge=1,
        description="Largest profile image accepted at file selection, in KiB.",
    )


class S3StorageConfig(BaseModel):
    """S3-compatible bucket that receives profile images via presigned PUTs."""

    enabled: bool = Field(default=False)
    endpoint_url: str | None = Field(
        default=None,
        description="S3 endpoint URL; omit for AWS's regional default endpoint.",
    )
    access_key: str | None = Field(default=None)
    secret_key: str | None = Field(default=None)
    bucket: str = Field(default="accounts")
    region: str = Field(default="us-east-1")
    use_ssl: bool = Field(default=True)
    public_base_url: str = Field(
        default="",
        description="Public base URL of the bucket; stored image URLs are '<base>/<key>'.",
    )
    presign_expires_seconds: int = Field(default=60, ge=1, le=7 * 24 * 60 * 60)
    key_prefix: str = Field(default="profile-images")


class StorageConfig(BaseModel):
    s3: S3StorageConfig = Field(default_factory=S3StorageConfig)


class CoreConfig(BaseModel):
    version: str = Field(default="1")
    network: NetworkConfig = Field(default_factory=NetworkConfig)
    paths: PathOverrides = Field(default_factory=PathOverrides)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    uploads: UploadsConfig = Field(default_factory=UploadsConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)


def _read_json(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def load_core_config(paths: AccountsPaths) -> CoreConfig:
    """Load config from ${ACCOUNTS_HOME}/config/core.json.

    - If missing: returns defaults.
    - Validation is performed by Pydantic.
    """

    config_path = paths.core_config_path
    if not config_path.exists():
        return CoreConfig()

    raw = _read_json(config_path)
    return CoreConfig.model_validate(raw)


def write_core_config(paths: AccountsPaths, config: CoreConfig) -> None:
    """Persist config to ${ACCOUNTS_HOME}/config/core.json."""

    payload = config.model_dump(mode="json", exclude_none=True)
    paths.config_dir.mkdir(parents=True, exist_ok=True)
    paths.core_config_path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")


def resolve_configured_paths(paths: AccountsPaths, config: CoreConfig) -> AccountsPaths:
    """Apply user-configurable path overrides from config.

    config/ and tmp/ always stay under the home directory.
    """

    def _resolve_dir(raw: str | None, default: Path) -> Path:
        if raw is None or not str(raw).strip():
            return default
        candidate = Path(raw).expanduser()
        if not candidate.is_absolute():
            candidate = (paths.home / candidate).resolve()
        else:
            candidate = candidate.resolve()
        return candidate

    db_dir = _resolve_dir(config.paths.db_dir, paths.db_dir)
    logs_dir = _resolve_dir(config.paths.logs_dir, paths.logs_dir)

    for p in (db_dir, logs_dir):
        p.mkdir(parents=True, exist_ok=True)

    return AccountsPaths(
        home=paths.home,
        db_dir=db_dir,
        logs_dir=logs_dir,
        config_dir=paths.config_dir,
        tmp_dir=paths.tmp_dir,
    )
