from __future__ import annotations

from accounts_core.config import CoreConfig
from accounts_core.storage.s3 import PresignedUpload, S3StorageProvider


class StorageNotConfiguredError(RuntimeError):
    pass


class StorageManager:
    def __init__(self, *, config: CoreConfig) -> None:
        self._config = config
        self._s3: S3StorageProvider | None = None

    def s3_configured(self) -> bool:
        cfg = self._config.storage.s3
        if not cfg.enabled:
            return False
        if not (cfg.public_base_url or "").strip():
            return False
        return bool((cfg.access_key or "").strip() and (cfg.secret_key or "").strip())

    @property
    def public_base_url(self) -> str:
        return self._config.storage.s3.public_base_url.rstrip("/")

    def _get_s3(self) -> S3StorageProvider:
        if self._s3 is not None:
            return self._s3

        if not self.s3_configured():
            raise StorageNotConfiguredError("S3 storage is not configured")

        cfg = self._config.storage.s3
        self._s3 = S3StorageProvider(
            endpoint_url=(cfg.endpoint_url or "").strip() or None,
            access_key=(cfg.access_key or "").strip(),
            secret_key=(cfg.secret_key or "").strip(),
            region=cfg.region,
            use_ssl=cfg.use_ssl,
            bucket=cfg.bucket,
            public_base_url=cfg.public_base_url,
            key_prefix=cfg.key_prefix,
        )
        return self._s3

    def issue_presigned_upload(self, *, user_id: str) -> PresignedUpload:
        s3 = self._get_s3()
        return s3.presigned_upload_for_user(
            user_id, expires_in=self._config.storage.s3.presign_expires_seconds
        )


def build_storage_manager(*, config: CoreConfig) -> StorageManager:
    return StorageManager(config=config)
