"""Assemble the notification document for one log event.

The document always holds an info section and a ``REQUEST PAYLOAD`` section.
The message goes inline as a ``MESSAGE`` section while it fits in
:data:`MAX_INLINE_MESSAGE_CHARS`; longer messages are shipped as a
``log.txt`` attachment instead.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone

from lib_log_discord.domain.document import (
    MESSAGE_SECTION_TITLE,
    Attachment,
    Delivery,
    NotificationDocument,
    RenderedField,
    Section,
)
from lib_log_discord.domain.events import LogEvent

from .render_body import fence

MAX_INLINE_MESSAGE_CHARS = 500
ATTACHMENT_FILENAME = "log.txt"
DEFAULT_USERNAME = "lib_log_discord"
REQUEST_SECTION_TITLE = "REQUEST PAYLOAD"


def format_timestamp(ts: datetime) -> str:
    """Format ``ts`` as RFC 3339 in UTC with whole seconds.

    Examples
    --------
    >>> format_timestamp(datetime(2025, 9, 30, 12, 0, 5, 123456, tzinfo=timezone.utc))
    '2025-09-30T12:00:05Z'
    """

    return ts.astimezone(timezone.utc).replace(microsecond=0).strftime("%Y-%m-%dT%H:%M:%SZ")


def compose_delivery(
    event: LogEvent,
    color: int,
    fields: Sequence[RenderedField],
    *,
    username: str = DEFAULT_USERNAME,
) -> Delivery:
    """Build the :class:`Delivery` for ``event``.

    Parameters
    ----------
    event:
        Event being reported.
    color:
        Embed colour from the severity classifier, applied to every section.
    fields:
        Rendered request payload fields; may be empty.
    username:
        Display name of the webhook sender.
    """

    sections = [
        Section(
            title=event.level.name.upper(),
            description=event.error_message,
            timestamp=format_timestamp(event.timestamp),
            color=color,
        ),
        Section(title=REQUEST_SECTION_TITLE, fields=tuple(fields), color=color),
    ]

    attachment: Attachment | None = None
    if len(event.message) <= MAX_INLINE_MESSAGE_CHARS:
        sections.append(Section(title=MESSAGE_SECTION_TITLE, description=fence(event.message), color=color))
    else:
        attachment = Attachment(filename=ATTACHMENT_FILENAME, content=event.message.encode("utf-8", errors="replace"))

    document = NotificationDocument(username=username, sections=tuple(sections))
    return Delivery(document=document, attachment=attachment)


__all__ = [
    "ATTACHMENT_FILENAME",
    "DEFAULT_USERNAME",
    "MAX_INLINE_MESSAGE_CHARS",
    "REQUEST_SECTION_TITLE",
    "compose_delivery",
    "format_timestamp",
]
