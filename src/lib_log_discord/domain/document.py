"""Notification document model sent to the webhook.

Contents
--------
* :class:`RenderedField` - one name/value pair inside a section.
* :class:`Section` - one embed (info, request payload, message).
* :class:`NotificationDocument` - username plus ordered sections.
* :class:`Attachment` / :class:`Delivery` - what the transport posts.

System Role
-----------
Pure data produced by the composer and consumed by the transport. The
serialised shape is ``{"username": ..., "embeds": [...]}``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

MESSAGE_SECTION_TITLE = "MESSAGE"


@dataclass(slots=True, frozen=True)
class RenderedField:
    """Name/value pair rendered inside a section."""

    name: str
    value: str

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "value": self.value}


@dataclass(slots=True, frozen=True)
class Section:
    """One embed of the notification.

    ``None`` optionals are left out of the serialised form; an empty
    description or an empty field list is kept.
    """

    title: str
    color: int
    description: str | None = None
    fields: tuple[RenderedField, ...] | None = None
    timestamp: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return the embed mapping.

        Examples
        --------
        >>> Section('MESSAGE', 1, description='hi').to_dict()
        {'title': 'MESSAGE', 'description': 'hi', 'color': 1}
        """
        data: dict[str, Any] = {"title": self.title}
        if self.description is not None:
            data["description"] = self.description
        if self.fields is not None:
            data["fields"] = [item.to_dict() for item in self.fields]
        data["color"] = self.color
        if self.timestamp is not None:
            data["timestamp"] = self.timestamp
        return data


@dataclass(slots=True, frozen=True)
class NotificationDocument:
    """Webhook body: display name plus ordered sections."""

    username: str
    sections: tuple[Section, ...]

    def to_dict(self) -> dict[str, Any]:
        return {"username": self.username, "embeds": [section.to_dict() for section in self.sections]}

    def to_json(self) -> str:
        """Serialize to compact JSON; non-ASCII text is kept as-is."""

        return json.dumps(self.to_dict(), ensure_ascii=False, separators=(",", ":"))

    def section(self, title: str) -> Section | None:
        """Return the first section titled ``title`` or ``None``."""

        for item in self.sections:
            if item.title == title:
                return item
        return None


@dataclass(slots=True, frozen=True)
class Attachment:
    """File shipped next to the document in multipart mode."""

    filename: str
    content: bytes


@dataclass(slots=True, frozen=True)
class Delivery:
    """Document plus the optional file attachment for one event."""

    document: NotificationDocument
    attachment: Attachment | None = None

    def __post_init__(self) -> None:
        if self.attachment is not None and self.document.section(MESSAGE_SECTION_TITLE) is not None:
            raise ValueError("a delivery carries either a MESSAGE section or an attachment, not both")

    @property
    def as_file(self) -> bool:
        return self.attachment is not None


__all__ = [
    "Attachment",
    "Delivery",
    "MESSAGE_SECTION_TITLE",
    "NotificationDocument",
    "RenderedField",
    "Section",
]
