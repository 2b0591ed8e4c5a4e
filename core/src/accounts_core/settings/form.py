from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Final, Literal, Protocol

import httpx
from pydantic import ValidationError

from accounts_core.settings.notifier import Notifier
from accounts_core.settings.rpc import UserRpc
from accounts_core.settings.schema import SettingsInput, UserUpdateRequest, field_messages
from accounts_core.settings.upload import SelectedFile, UploadError, UploadHandshake

logger = logging.getLogger(__name__)

FIELDS: Final[tuple[str, ...]] = ("name", "description", "image")

ONLY_IMAGES: Final[str] = "Only images are allowed."
MAX_FILE_SIZE: Final[str] = "Maximum file size is 5MB."
UPLOAD_FAILED: Final[str] = "Couldn't upload your file."
SAVED: Final[str] = "Account settings saved!"
SOMETHING_WENT_WRONG: Final[str] = "Something went wrong!"

DEFAULT_MAX_IMAGE_KB: Final[int] = 5120
# Stand-in host while no bucket base is configured; the upload itself then fails.
PENDING_BASE_URL: Final[str] = "https://storage.invalid"


class AccountFields(Protocol):
    name: str
    description: str
    image: str


ErrorSource = Literal["schema", "file", "upload"]


@dataclass(frozen=True)
class FieldError:
    message: str
    source: ErrorSource = "schema"

    @property
    def blocking(self) -> bool:
        # The failed-upload marker highlights the field but leaves retry possible.
        return self.source != "upload"


def check_selected_file(
    file: SelectedFile, *, max_image_kb: int = DEFAULT_MAX_IMAGE_KB
) -> str | None:
    """Return the rejection message for a picked file, or None if it may be staged."""

    if "image" not in (file.content_type or ""):
        return ONLY_IMAGES
    if file.size / 1024 > max_image_kb:
        return MAX_FILE_SIZE
    return None


class SettingsForm:
    """One rendered instance of the account settings form.

    Holds the draft values, per-field errors and the staged image, and runs
    the submit pipeline: validate, optional upload handshake, update call.
    """

    def __init__(
        self,
        user: AccountFields,
        *,
        rpc: UserRpc,
        http: httpx.AsyncClient,
        public_base_url: str,
        notifier: Notifier | None = None,
        max_image_kb: int = DEFAULT_MAX_IMAGE_KB,
    ) -> None:
        self.values: dict[str, str] = {
            "name": user.name or "",
            "description": user.description or "",
            "image": user.image or "",
        }
        self.errors: dict[str, FieldError] = {}
        self.selected_file: SelectedFile | None = None
        self.is_submitting = False
        self.notifier = notifier if notifier is not None else Notifier()

        self._rpc = rpc
        self._http = http
        self._public_base_url = public_base_url
        self._max_image_kb = max_image_kb

    @property
    def has_errors(self) -> bool:
        return any(e.blocking for e in self.errors.values())

    @property
    def can_submit(self) -> bool:
        return not self.is_submitting and not self.has_errors

    def error_message(self, field: str) -> str | None:
        err = self.errors.get(field)
        return err.message if err is not None else None

    def edit(self, **changes: str) -> None:
        """Apply edits to text fields and re-validate the touched ones."""

        for key, value in changes.items():
            if key not in FIELDS:
                raise KeyError(key)
            self.values[key] = value

        messages = self._schema_messages()
        for key in changes:
            current = self.errors.get(key)
            if key in messages:
                self.errors[key] = FieldError(messages[key])
            elif current is not None and current.source == "schema":
                del self.errors[key]

    def select_file(self, file: SelectedFile | None) -> None:
        self.errors.pop("image", None)
        if file is None or not file.size:
            return

        message = check_selected_file(file, max_image_kb=self._max_image_kb)
        if message is not None:
            self.errors["image"] = FieldError(message, source="file")
            return

        self.selected_file = file

    def _schema_messages(self) -> dict[str, str]:
        try:
            self._validated_input()
        except ValidationError as exc:
            return field_messages(exc)
        return {}

    def _validated_input(self) -> SettingsInput:
        values = dict(self.values)
        if self.selected_file is not None:
            # The staged file replaces the image; its URL is only known after upload.
            base = self._public_base_url.rstrip("/") or PENDING_BASE_URL
            values["image"] = f"{base}/pending"
        return SettingsInput.model_validate(values)

    def validate(self) -> bool:
        """Validate every field, replacing the blocking errors. True when clean."""

        messages = self._schema_messages()
        for key in FIELDS:
            current = self.errors.get(key)
            if current is not None and current.source == "file":
                continue
            if key in messages:
                self.errors[key] = FieldError(messages[key])
            elif current is not None and current.source == "schema":
                del self.errors[key]
        return not self.has_errors

    async def submit(self) -> bool:
        """Run one submission. Returns True when the update call succeeded."""

        if self.is_submitting:
            return False
        if not self.validate():
            return False

        self.is_submitting = True
        try:
            return await self._submit()
        finally:
            self.is_submitting = False

    async def _submit(self) -> bool:
        image = self.values["image"]

        if self.selected_file is not None:
            handshake = UploadHandshake(
                rpc=self._rpc, http=self._http, public_base_url=self._public_base_url
            )
            try:
                image = await handshake.run(self.selected_file)
            except UploadError:
                logger.warning("Profile image upload failed", exc_info=True)
                self.errors["image"] = FieldError("", source="upload")
                self.notifier.error(UPLOAD_FAILED)
                return False

        try:
            payload = UserUpdateRequest(
                name=self.values["name"],
                description=self.values["description"],
                image=image,
                setup_completed=True,
            )
            await self._rpc.update(payload)
        except Exception:
            logger.warning("Account settings update failed", exc_info=True)
            self.notifier.error(SOMETHING_WENT_WRONG)
            return False

        self.values["image"] = image
        self.selected_file = None
        self.errors.pop("image", None)
        self.notifier.success(SAVED)
        return True
