from __future__ import annotations

from urllib.parse import parse_qs, urlsplit

import pytest

from accounts_core.config import CoreConfig
from accounts_core.storage import (
    S3StorageProvider,
    StorageNotConfiguredError,
    build_storage_manager,
    public_url_for_key,
)


def _provider() -> S3StorageProvider:
    return S3StorageProvider(
        endpoint_url="http://127.0.0.1:8333",
        access_key="test-access",
        secret_key="test-secret",
        region="us-east-1",
        use_ssl=False,
        bucket="accounts",
        public_base_url="https://cdn.example.test/accounts/",
        key_prefix="profile-images",
    )


def test_presigned_upload_targets_fresh_key_per_call() -> None:
    s3 = _provider()

    first = s3.presigned_upload_for_user("ABCDEF", expires_in=60)
    second = s3.presigned_upload_for_user("ABCDEF", expires_in=60)

    assert first.key.startswith("profile-images/abcdef/")
    assert first.key != second.key

    parts = urlsplit(first.url)
    assert parts.netloc == "127.0.0.1:8333"
    assert parts.path == f"/accounts/{first.key}"
    query = parse_qs(parts.query)
    assert query["X-Amz-Expires"] == ["60"]
    assert "X-Amz-Signature" in query


def test_public_url_joins_base_and_key() -> None:
    assert _provider().public_url("profile-images/u/k") == (
        "https://cdn.example.test/accounts/profile-images/u/k"
    )
    assert public_url_for_key("https://cdn.example.test", "/k") == "https://cdn.example.test/k"


def test_manager_refuses_when_not_configured() -> None:
    manager = build_storage_manager(config=CoreConfig())
    assert manager.s3_configured() is False

    with pytest.raises(StorageNotConfiguredError):
        manager.issue_presigned_upload(user_id="u1")


def test_manager_issues_ticket_when_configured() -> None:
    config = CoreConfig.model_validate(
        {
            "storage": {
                "s3": {
                    "enabled": True,
                    "endpoint_url": "http://127.0.0.1:8333",
                    "access_key": "a",
                    "secret_key": "b",
                    "use_ssl": False,
                    "public_base_url": "https://cdn.example.test/accounts",
                    "presign_expires_seconds": 120,
                }
            }
        }
    )
    manager = build_storage_manager(config=config)

    ticket = manager.issue_presigned_upload(user_id="u1")

    assert ticket.key.startswith("profile-images/u1/")
    assert "X-Amz-Expires=120" in ticket.url
