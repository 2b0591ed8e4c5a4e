from __future__ import annotations

from accounts_core.settings.form import FieldError, SettingsForm, check_selected_file
from accounts_core.settings.notifier import Notification, Notifier
from accounts_core.settings.rpc import HttpUserRpc, LocalUserRpc, RpcError, UserRpc
from accounts_core.settings.schema import SettingsInput, UserUpdateRequest
from accounts_core.settings.upload import (
    HandshakeState,
    SelectedFile,
    StorageUploadError,
    TicketRequestError,
    UploadError,
    UploadHandshake,
)
from accounts_core.storage import PresignedUpload

__all__ = [
    "FieldError",
    "HandshakeState",
    "HttpUserRpc",
    "LocalUserRpc",
    "Notification",
    "Notifier",
    "PresignedUpload",
    "RpcError",
    "SelectedFile",
    "SettingsForm",
    "SettingsInput",
    "StorageUploadError",
    "TicketRequestError",
    "UploadError",
    "UploadHandshake",
    "UserRpc",
    "UserUpdateRequest",
    "check_selected_file",
]
