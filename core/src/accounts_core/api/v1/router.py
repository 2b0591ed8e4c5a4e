from __future__ import annotations

from fastapi import APIRouter

from accounts_core.api.v1.user import router as user_router

router = APIRouter(prefix="/v1", tags=["v1"])

router.include_router(user_router)
