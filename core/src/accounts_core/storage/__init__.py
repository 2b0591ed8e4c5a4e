from __future__ import annotations

from accounts_core.storage.manager import (
    StorageManager,
    StorageNotConfiguredError,
    build_storage_manager,
)
from accounts_core.storage.s3 import PresignedUpload, S3StorageProvider, public_url_for_key

__all__ = [
    "PresignedUpload",
    "S3StorageProvider",
    "StorageManager",
    "StorageNotConfiguredError",
    "build_storage_manager",
    "public_url_for_key",
]
