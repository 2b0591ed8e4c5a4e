from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, ConfigDict, Field

from accounts_core.api.models import ApiResponse, ok
from accounts_core.auth import require_session_user
from accounts_core.db.users import UserRow, update_user
from accounts_core.settings.schema import UserUpdateRequest
from accounts_core.storage import StorageManager, StorageNotConfiguredError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/user", tags=["user"])


class User(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="id")
    email: str
    name: str
    description: str
    image: str
    setup_completed: bool = Field(alias="setupCompleted")


def _to_user(row: UserRow) -> User:
    return User(
        user_id=row.user_id,
        email=row.email,
        name=row.name,
        description=row.description,
        image=row.image,
        setup_completed=row.setup_completed,
    )


class PresignedUrl(BaseModel):
    url: str
    key: str


def _get_storage(request: Request) -> StorageManager:
    storage = getattr(request.app.state, "storage_manager", None)
    if storage is None:
        raise HTTPException(status_code=500, detail="Storage not initialized")
    return storage


@router.get("/me", response_model=ApiResponse[User])
async def user_me(
    user: UserRow = Depends(require_session_user),  # noqa: B008
) -> ApiResponse[User]:
    return ok(_to_user(user))


@router.post("/presigned-url", response_model=ApiResponse[PresignedUrl])
async def user_presigned_url(
    request: Request,
    user: UserRow = Depends(require_session_user),  # noqa: B008
) -> ApiResponse[PresignedUrl]:
    storage = _get_storage(request)
    try:
        ticket = storage.issue_presigned_upload(user_id=user.user_id)
    except StorageNotConfiguredError as exc:
        raise HTTPException(status_code=503, detail="Image uploads are not configured") from exc

    logger.info("Issued upload ticket for user %s: %s", user.user_id, ticket.key)
    return ok(PresignedUrl(url=ticket.url, key=ticket.key))


@router.post("/update", response_model=ApiResponse[None])
async def user_update(
    request: Request,
    payload: UserUpdateRequest,
    user: UserRow = Depends(require_session_user),  # noqa: B008
) -> ApiResponse[None]:
    db_path = getattr(request.app.state, "db_path", None)
    if db_path is None:
        raise HTTPException(status_code=500, detail="DB not initialized")

    updated = update_user(
        db_path,
        user_id=user.user_id,
        name=payload.name,
        description=payload.description,
        image=payload.image,
        setup_completed=payload.setup_completed,
    )
    if updated is None:
        raise HTTPException(status_code=404, detail="User not found")
    return ok(None)
