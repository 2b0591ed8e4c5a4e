from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

import httpx
from fastapi.testclient import TestClient

from accounts_core.app import create_app
from accounts_core.db.sessions import create_session
from accounts_core.db.users import create_user, get_user
from accounts_core.settings import HttpUserRpc, SelectedFile, SettingsForm

BUCKET = "https://cdn.example.test/accounts"


@dataclass
class _User:
    name: str = "alice"
    description: str = ""
    image: str = "https://img.example.test/alice.png"


def _enable_s3(home: Path) -> None:
    (home / "config").mkdir(parents=True, exist_ok=True)
    (home / "config" / "core.json").write_text(
        json.dumps(
            {
                "storage": {
                    "s3": {
                        "enabled": True,
                        "endpoint_url": "http://127.0.0.1:8333",
                        "access_key": "test-access",
                        "secret_key": "test-secret",
                        "use_ssl": False,
                        "public_base_url": BUCKET,
                    }
                }
            }
        ),
        encoding="utf-8",
    )


def _forward_to(client: TestClient):
    """Route RPC calls made through httpx into the in-process app."""

    def handler(request: httpx.Request) -> httpx.Response:
        r = client.request(
            request.method,
            request.url.path,
            content=request.content,
            headers=dict(request.headers),
        )
        return httpx.Response(r.status_code, content=r.content, headers=r.headers)

    return handler


def test_form_submits_through_json_endpoints(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("ACCOUNTS_HOME", str(tmp_path))
    _enable_s3(tmp_path)

    with TestClient(create_app()) as client:
        db_path = client.app.state.db_path
        user = create_user(db_path, email="alice@example.test", name="alice")
        session = create_session(db_path, user_id=user.user_id, max_age=timedelta(days=1))

        api_client = httpx.AsyncClient(
            transport=httpx.MockTransport(_forward_to(client)),
            base_url="http://testserver",
            headers={"Authorization": f"Bearer {session.session_token}"},
        )
        puts: list[httpx.Request] = []

        def storage(request: httpx.Request) -> httpx.Response:
            puts.append(request)
            return httpx.Response(200)

        storage_client = httpx.AsyncClient(transport=httpx.MockTransport(storage))

        form = SettingsForm(
            _User(),
            rpc=HttpUserRpc(api_client),
            http=storage_client,
            public_base_url=BUCKET,
        )
        form.edit(name="Alice", description="Hello")
        form.select_file(SelectedFile("me.png", "image/png", b"\x89PNG" * 100))

        async def scenario() -> bool:
            async with api_client, storage_client:
                return await form.submit()

        assert asyncio.run(scenario()) is True
        assert [n.message for n in form.notifier.drain()] == ["Account settings saved!"]

        assert len(puts) == 1
        key = puts[0].url.path.removeprefix("/accounts/")

        row = get_user(db_path, user_id=user.user_id)
        assert row is not None
        assert (row.name, row.description) == ("Alice", "Hello")
        assert row.image == f"{BUCKET}/{key}"
        assert row.setup_completed is True
