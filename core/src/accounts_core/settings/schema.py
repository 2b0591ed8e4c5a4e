from __future__ import annotations

from typing import Any, Final

from pydantic import (
    AnyUrl,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
)
from pydantic_core import PydanticCustomError

NAME_MAX_LENGTH: Final[int] = 13

NAME_REQUIRED: Final[str] = "Username is required."
NAME_TOO_LONG: Final[str] = f"Username must be {NAME_MAX_LENGTH} characters or less."
INVALID_URL: Final[str] = "Invalid url"

_url_adapter: TypeAdapter[AnyUrl] = TypeAdapter(AnyUrl)


def check_name(value: str) -> str:
    if len(value) < 1:
        raise PydanticCustomError("name_required", NAME_REQUIRED)
    if len(value) > NAME_MAX_LENGTH:
        raise PydanticCustomError("name_too_long", NAME_TOO_LONG)
    return value


def check_image_url(value: str) -> str:
    try:
        _url_adapter.validate_python(value)
    except ValidationError:
        raise PydanticCustomError("url_invalid", INVALID_URL) from None
    return value


class SettingsInput(BaseModel):
    """Editable account fields as submitted by the settings form."""

    name: str
    description: str = ""
    image: str

    @field_validator("name")
    @classmethod
    def _name(cls, value: str) -> str:
        return check_name(value)

    @field_validator("image")
    @classmethod
    def _image(cls, value: str) -> str:
        return check_image_url(value)


class UserUpdateRequest(SettingsInput):
    """Payload of the `update` RPC."""

    model_config = ConfigDict(populate_by_name=True)

    setup_completed: bool = Field(alias="setupCompleted")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


def field_messages(exc: ValidationError) -> dict[str, str]:
    """Collapse a ValidationError to {field: first message}."""

    out: dict[str, str] = {}
    for err in exc.errors():
        loc = err.get("loc") or ()
        field = str(loc[0]) if loc else "__root__"
        out.setdefault(field, str(err.get("msg") or ""))
    return out
