from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

import httpx

from accounts_core.settings.rpc import UserRpc
from accounts_core.storage import public_url_for_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectedFile:
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


class HandshakeState(str, Enum):
    IDLE = "idle"
    REQUESTING_TICKET = "requesting_ticket"
    UPLOADING = "uploading"
    REWRITING = "rewriting"
    DONE = "done"


class UploadError(Exception):
    pass


class TicketRequestError(UploadError):
    pass


class StorageUploadError(UploadError):
    pass


class UploadHandshake:
    """Ticket -> direct PUT -> public URL, for one staged file.

    Any failure drops the handshake back to IDLE and raises an UploadError.
    """

    def __init__(self, *, rpc: UserRpc, http: httpx.AsyncClient, public_base_url: str) -> None:
        self._rpc = rpc
        self._http = http
        self._public_base_url = public_base_url
        self.state = HandshakeState.IDLE

    def _enter(self, state: HandshakeState) -> None:
        logger.debug("upload handshake %s -> %s", self.state.value, state.value)
        self.state = state

    async def run(self, file: SelectedFile) -> str:
        self._enter(HandshakeState.REQUESTING_TICKET)
        try:
            ticket = await self._rpc.get_presigned_url()
        except Exception as exc:
            self._enter(HandshakeState.IDLE)
            raise TicketRequestError("Could not obtain an upload ticket") from exc

        self._enter(HandshakeState.UPLOADING)
        try:
            r = await self._http.put(
                ticket.url,
                content=file.data,
                headers={"Content-Type": file.content_type},
            )
            r.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            self._enter(HandshakeState.IDLE)
            raise StorageUploadError(f"Upload of {file.filename!r} failed") from exc

        self._enter(HandshakeState.REWRITING)
        url = public_url_for_key(self._public_base_url, ticket.key)

        self._enter(HandshakeState.DONE)
        return url
