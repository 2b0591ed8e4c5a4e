from __future__ import annotations

import hashlib
import secrets
import uuid


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def new_user_id() -> str:
    """Generate a new user ID.

    IDs are SHA-256 hex strings (64 chars) and are generated at creation time.
    """

    return sha256_hex(uuid.uuid4().bytes)


def new_session_token() -> str:
    return secrets.token_urlsafe(32)


def new_object_name() -> str:
    """Random, collision-free leaf name for an uploaded object."""

    return uuid.uuid4().hex
