from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

NotificationKind = Literal["success", "error"]


@dataclass(frozen=True)
class Notification:
    kind: NotificationKind
    message: str


@dataclass
class Notifier:
    """Collects transient success/failure toasts for the page to show once."""

    items: list[Notification] = field(default_factory=list)

    def success(self, message: str) -> None:
        self.items.append(Notification(kind="success", message=message))

    def error(self, message: str) -> None:
        self.items.append(Notification(kind="error", message=message))

    def drain(self) -> list[Notification]:
        out, self.items = self.items, []
        return out
