from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Final
from urllib.parse import urlencode

from fastapi import HTTPException, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from accounts_core.config import AuthConfig
from accounts_core.db.sessions import get_active_session
from accounts_core.db.users import UserRow, get_user

logger = logging.getLogger(__name__)

AUTHORIZATION_HEADER: Final[str] = "Authorization"

_bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class GateResult:
    """Outcome of the session gate: either a redirect target or the signed-in user."""

    redirect_destination: str | None = None
    user: UserRow | None = None


def _auth_config(request: Request) -> AuthConfig:
    config = getattr(request.app.state, "accounts_config", None)
    auth = getattr(config, "auth", None)
    return auth if auth is not None else AuthConfig()


def extract_session_token(request: Request) -> str | None:
    cookie_token = request.cookies.get(_auth_config(request).session_cookie)
    if cookie_token:
        return cookie_token

    auth = request.headers.get(AUTHORIZATION_HEADER)
    if not auth:
        return None

    prefix = "Bearer "
    if auth.startswith(prefix):
        return auth[len(prefix) :].strip() or None
    return None


def _lookup_user(request: Request, token: str) -> UserRow | None:
    db_path = getattr(request.app.state, "db_path", None)
    if db_path is None:
        raise RuntimeError("DB not initialized")

    session = get_active_session(db_path, session_token=token)
    if session is None:
        return None
    return get_user(db_path, user_id=session.user_id)


def resolve_session_user(request: Request, token: str | None = None) -> UserRow | None:
    """Return the signed-in user, or None.

    A failure while resolving is treated the same as a missing session.
    """

    token = token or extract_session_token(request)
    if not token:
        return None

    try:
        return _lookup_user(request, token)
    except Exception:
        logger.warning("Session resolution failed; treating request as anonymous", exc_info=True)
        return None


def login_redirect_url(request: Request, callback: str | None = None) -> str:
    login_url = _auth_config(request).login_url
    callback = callback or request.url.path
    sep = "&" if "?" in login_url else "?"
    return f"{login_url}{sep}{urlencode({'callbackUrl': callback})}"


def session_gate(request: Request) -> GateResult:
    user = resolve_session_user(request)
    if user is None:
        return GateResult(redirect_destination=login_redirect_url(request))
    return GateResult(user=user)


async def require_session_user(
    request: Request,
    bearer: HTTPAuthorizationCredentials | None = Security(_bearer_scheme),  # noqa: B008
) -> UserRow:
    """Require a live session for RPC endpoints.

    Accepts either:
    - the session cookie set at login
    - Authorization: Bearer <session token>
    """

    token = request.cookies.get(_auth_config(request).session_cookie)
    if not token and bearer is not None:
        token = bearer.credentials

    if not token:
        raise HTTPException(status_code=401, detail="Missing session")

    user = resolve_session_user(request, token)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid session")
    return user
