from __future__ import annotations

from pathlib import Path
from typing import Any
from urllib.parse import urlencode

import httpx
from fastapi import APIRouter, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from starlette.responses import Response

from accounts_core.auth import extract_session_token, login_redirect_url, session_gate
from accounts_core.config import CoreConfig
from accounts_core.db.sessions import delete_session
from accounts_core.db.users import UserRow
from accounts_core.settings import LocalUserRpc, Notification, SelectedFile, SettingsForm

BASE_DIR = Path(__file__).resolve().parent
TEMPLATES_DIR = BASE_DIR / "templates"
STATIC_DIR = BASE_DIR / "static"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

router = APIRouter(prefix="/ui", tags=["ui"])

_FLASH_KIND = {"success": "ok", "error": "bad"}


def _flash_from_request(request: Request) -> dict[str, Any] | None:
    msg = request.query_params.get("msg")
    if not msg:
        return None
    kind = request.query_params.get("kind") or ""
    return {"message": msg, "kind": kind}


def _get_config(request: Request) -> CoreConfig:
    config = getattr(request.app.state, "accounts_config", None)
    if config is None:
        raise HTTPException(status_code=500, detail="Config not initialized")
    return config


def _get_http_client(request: Request) -> httpx.AsyncClient:
    client = getattr(request.app.state, "http_client", None)
    if client is None:
        raise HTTPException(status_code=500, detail="HTTP client not initialized")
    return client


def _build_form(request: Request, user: UserRow) -> SettingsForm:
    config = _get_config(request)
    storage = getattr(request.app.state, "storage_manager", None)
    db_path = getattr(request.app.state, "db_path", None)
    if storage is None or db_path is None:
        raise HTTPException(status_code=500, detail="Server not initialized")

    rpc = LocalUserRpc(db_path=db_path, storage=storage, user_id=user.user_id)
    return SettingsForm(
        user,
        rpc=rpc,
        http=_get_http_client(request),
        public_base_url=storage.public_base_url,
        max_image_kb=config.uploads.max_image_kb,
    )


def _render_settings(
    request: Request,
    *,
    user: UserRow,
    form: SettingsForm,
    notifications: list[Notification] | None = None,
    status_code: int = 200,
) -> HTMLResponse:
    flash = _flash_from_request(request)
    if notifications:
        last = notifications[-1]
        flash = {"message": last.message, "kind": _FLASH_KIND[last.kind]}

    return templates.TemplateResponse(
        request,
        "settings.html",
        {
            "title": "Settings",
            "active": "settings",
            "flash": flash,
            "email": user.email,
            "values": form.values,
            "errors": {k: v.message for k, v in form.errors.items()},
        },
        status_code=status_code,
    )


async def _read_upload(file: UploadFile | None) -> SelectedFile | None:
    if file is None or not file.filename:
        return None
    data = await file.read()
    return SelectedFile(
        filename=file.filename,
        content_type=file.content_type or "",
        data=data,
    )


@router.get("/settings", response_model=None)
async def ui_settings(request: Request) -> Response:
    gate = session_gate(request)
    if gate.user is None:
        return RedirectResponse(url=gate.redirect_destination or "/", status_code=302)

    form = _build_form(request, gate.user)
    return _render_settings(request, user=gate.user, form=form)


@router.post("/settings", response_model=None)
async def ui_settings_post(
    request: Request,
    name: str = Form(default=""),
    description: str = Form(default=""),
    file: UploadFile | None = File(default=None),  # noqa: B008
) -> Response:
    gate = session_gate(request)
    if gate.user is None:
        return RedirectResponse(url=gate.redirect_destination or "/", status_code=302)

    user = gate.user
    form = _build_form(request, user)
    form.edit(name=name, description=description)
    form.select_file(await _read_upload(file))

    if not form.validate():
        return _render_settings(request, user=user, form=form, status_code=400)

    saved = await form.submit()
    notifications = form.notifier.drain()
    if not saved:
        return _render_settings(
            request, user=user, form=form, notifications=notifications, status_code=502
        )

    flash = notifications[-1] if notifications else Notification(kind="success", message="")
    query = urlencode({"msg": flash.message, "kind": _FLASH_KIND[flash.kind]})
    return RedirectResponse(url=f"/ui/settings?{query}", status_code=302)


@router.post("/logout")
async def ui_logout(request: Request) -> RedirectResponse:
    token = extract_session_token(request)
    db_path = getattr(request.app.state, "db_path", None)
    if token and db_path is not None:
        delete_session(db_path, session_token=token)

    config = _get_config(request)
    resp = RedirectResponse(
        url=login_redirect_url(request, callback="/ui/settings"), status_code=302
    )
    resp.delete_cookie(config.auth.session_cookie)
    return resp
