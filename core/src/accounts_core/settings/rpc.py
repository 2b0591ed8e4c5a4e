from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol

import httpx

from accounts_core.db.users import update_user
from accounts_core.settings.schema import UserUpdateRequest
from accounts_core.storage import PresignedUpload, StorageManager


class RpcError(Exception):
    def __init__(self, message: str, *, code: str = "rpc_error") -> None:
        super().__init__(message)
        self.code = code
        self.message = message


class UserRpc(Protocol):
    """The two user procedures the settings page relies on."""

    async def get_presigned_url(self) -> PresignedUpload: ...

    async def update(self, fields: UserUpdateRequest) -> None: ...


class LocalUserRpc:
    """In-process implementation used by the server-rendered page."""

    def __init__(self, *, db_path: Path, storage: StorageManager, user_id: str) -> None:
        self._db_path = db_path
        self._storage = storage
        self._user_id = user_id

    async def get_presigned_url(self) -> PresignedUpload:
        return self._storage.issue_presigned_upload(user_id=self._user_id)

    async def update(self, fields: UserUpdateRequest) -> None:
        row = update_user(
            self._db_path,
            user_id=self._user_id,
            name=fields.name,
            description=fields.description,
            image=fields.image,
            setup_completed=fields.setup_completed,
        )
        if row is None:
            raise RpcError("User not found", code="not_found")


class HttpUserRpc:
    """Calls the JSON endpoints under /v1/user over HTTP.

    The client must already carry the session (cookie or bearer header).
    """

    def __init__(self, client: httpx.AsyncClient, *, prefix: str = "/v1/user") -> None:
        self._client = client
        self._prefix = prefix.rstrip("/")

    async def _call(self, name: str, payload: dict[str, Any] | None = None) -> Any:
        r = await self._client.post(f"{self._prefix}/{name}", json=payload or {})
        try:
            body = r.json()
        except ValueError:
            r.raise_for_status()
            raise RpcError(f"Non-JSON response from {name}") from None

        if not isinstance(body, dict) or not body.get("ok"):
            error = (body or {}).get("error") if isinstance(body, dict) else None
            error = error or {}
            raise RpcError(
                str(error.get("message") or f"HTTP {r.status_code}"),
                code=str(error.get("code") or "rpc_error"),
            )
        return body.get("data")

    async def get_presigned_url(self) -> PresignedUpload:
        data = await self._call("presigned-url")
        if not isinstance(data, dict) or not data.get("url") or not data.get("key"):
            raise RpcError("Malformed presigned upload ticket")
        return PresignedUpload(url=str(data["url"]), key=str(data["key"]))

    async def update(self, fields: UserUpdateRequest) -> None:
        await self._call("update", fields.to_wire())
