"""Render request payloads into the fields of the ``REQUEST PAYLOAD`` section.

Purpose
-------
Turn a request snapshot into human-readable text, choosing the rendering by
content type: JSON passthrough, urlencoded form decode, multipart field and
file summary, or a small raw body.

Contents
--------
* :func:`fence` - wrap text in a code block.
* :func:`render_body` - content-type dispatch over the raw body bytes.
* :func:`iter_multipart_parts` / :func:`summarize_multipart` - multipart
  parsing on top of :mod:`email.parser`.
* :func:`decode_form_urlencoded` - strict ``application/x-www-form-urlencoded``
  decoding.
* :func:`render_request_fields` - build the ordered :class:`RenderedField`
  list for a snapshot.

System Role
-----------
Runs on the delivery worker. Every failure here is recovered locally: a bad
multipart body renders its error text, a bad urlencoded body falls back to
the raw bytes, and an unknown or oversized body is silently left out.
"""

from __future__ import annotations

import json
import re
from collections.abc import Sequence
from dataclasses import dataclass
from email import policy
from email.message import Message
from email.parser import BytesParser
from email.utils import collapse_rfc2231_value
from typing import Any
from urllib.parse import parse_qs

from lib_log_discord.domain.document import RenderedField
from lib_log_discord.domain.request import LiveRequestSnapshot, ManualRequest, RequestSnapshot
from lib_log_discord.errors import MultipartError

JSON_CONTENT_TYPE = "application/json"
MULTIPART_CONTENT_TYPE = "multipart/form-data"
URLENCODED_CONTENT_TYPE = "application/x-www-form-urlencoded"

MAX_MULTIPART_MEMORY = 32 << 20
MAX_RAW_BODY_BYTES = 1024

_FENCE = "```"
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def fence(text: str) -> str:
    """Wrap ``text`` in a code block.

    Examples
    --------
    >>> print(fence('{"a":1}'))
    ```
    {"a":1}
    ```
    """

    return f"{_FENCE}\n{text}\n{_FENCE}"


@dataclass(slots=True, frozen=True)
class MultipartPart:
    """One part of a ``multipart/form-data`` body."""

    name: str
    filename: str | None
    content_type: str
    content: bytes
    charset: str = "utf-8"

    @property
    def is_file(self) -> bool:
        return bool(self.filename)

    def text(self) -> str:
        """Decode the content; an unknown charset falls back to UTF-8."""
        try:
            return self.content.decode(self.charset, errors="replace")
        except LookupError:
            return self.content.decode("utf-8", errors="replace")


def iter_multipart_parts(body: bytes, content_type: str, *, max_memory: int | None = None) -> list[MultipartPart]:
    """Parse ``body`` as ``multipart/form-data`` described by ``content_type``.

    Raises
    ------
    MultipartError
        When the boundary is missing, the body is malformed, or the non-file
        values together exceed ``max_memory`` (default
        :data:`MAX_MULTIPART_MEMORY`). File parts do not count against the
        budget.
    """

    budget = MAX_MULTIPART_MEMORY if max_memory is None else max_memory
    head = f"Content-Type: {content_type}\r\nMIME-Version: 1.0\r\n\r\n".encode("latin-1", errors="replace")
    message = BytesParser(policy=policy.HTTP).parsebytes(head + body)
    if not message.get_boundary():
        raise MultipartError("no multipart boundary param in Content-Type")
    if not message.is_multipart() or message.defects:
        problems = ", ".join(type(defect).__name__ for defect in message.defects) or "malformed body"
        raise MultipartError(f"multipart: {problems}")

    parts: list[MultipartPart] = []
    for part in message.get_payload():
        name = _disposition_param(part, "name")
        if not name:
            continue
        payload = part.get_payload(decode=True)
        parts.append(
            MultipartPart(
                name=name,
                filename=part.get_filename(),
                content_type=part.get_content_type(),
                content=payload if isinstance(payload, bytes) else b"",
                charset=part.get_content_charset() or "utf-8",
            )
        )
    value_bytes = sum(len(part.content) for part in parts if not part.is_file)
    if value_bytes > budget:
        raise MultipartError("multipart: message too large")
    return parts


def _disposition_param(part: Message, param: str) -> str:
    value = part.get_param(param, header="content-disposition")
    if value is None:
        return ""
    return str(collapse_rfc2231_value(value))


def _kilobytes(size: int) -> str:
    return f"{size / 1024:.2f} KB"


def summarize_multipart(parts: Sequence[MultipartPart]) -> dict[str, Any]:
    """Group parts into ``form_fields`` and ``uploaded_files`` summaries.

    Single values stay scalar; repeated keys become lists. Empty groups are
    left out.

    Examples
    --------
    >>> parts = [
    ...     MultipartPart('name', None, 'text/plain', b'ann'),
    ...     MultipartPart('tag', None, 'text/plain', b'a'),
    ...     MultipartPart('tag', None, 'text/plain', b'b'),
    ...     MultipartPart('doc', 'cv.pdf', 'application/pdf', b'x' * 2048),
    ... ]
    >>> summary = summarize_multipart(parts)
    >>> summary['form_fields']
    {'name': 'ann', 'tag': ['a', 'b']}
    >>> summary['uploaded_files']
    {'doc': {'filename': 'cv.pdf', 'size': '2.00 KB'}}
    """

    values: dict[str, list[str]] = {}
    files: dict[str, list[MultipartPart]] = {}
    for part in parts:
        if part.is_file:
            files.setdefault(part.name, []).append(part)
        else:
            values.setdefault(part.name, []).append(part.text())

    form_fields: dict[str, Any] = {key: items[0] if len(items) == 1 else items for key, items in values.items()}

    uploaded: dict[str, Any] = {}
    for key, items in files.items():
        if len(items) == 1:
            uploaded[key] = {"filename": items[0].filename, "size": _kilobytes(len(items[0].content))}
        else:
            uploaded[key] = {
                "filename": [item.filename for item in items],
                "size": [_kilobytes(len(item.content)) for item in items],
            }

    combined: dict[str, Any] = {}
    if form_fields:
        combined["form_fields"] = form_fields
    if uploaded:
        combined["uploaded_files"] = uploaded
    return combined


def decode_form_urlencoded(body: bytes) -> dict[str, list[str]]:
    """Decode an urlencoded body into key to value-list pairs.

    Raises :class:`ValueError` for non UTF-8 input, ``;`` separators, or
    malformed percent escapes.

    Examples
    --------
    >>> decode_form_urlencoded(b'a=1&b=2&a=3')
    {'a': ['1', '3'], 'b': ['2']}
    >>> decode_form_urlencoded(b'a=%zz')
    Traceback (most recent call last):
    ...
    ValueError: invalid URL escape in form body
    """

    text = body.decode("utf-8")
    if ";" in text:
        raise ValueError("invalid semicolon separator in form body")
    if _BAD_ESCAPE.search(text):
        raise ValueError("invalid URL escape in form body")
    return parse_qs(text, keep_blank_values=True)


def _as_json(data: Any) -> str:
    return json.dumps(data, indent=2, sort_keys=True, ensure_ascii=False)


def _raw_text(body: bytes) -> str:
    return body.decode("utf-8", errors="replace")


def render_body(body: bytes, content_type: str) -> str | None:
    """Return the fenced rendering of ``body`` or ``None`` to omit it.

    Examples
    --------
    >>> render_body(b'{"a":1}', 'application/json; charset=utf-8') == fence('{"a":1}')
    True
    >>> render_body(b'', 'text/plain') is None
    True
    >>> render_body(b'x' * 1025, 'application/octet-stream') is None
    True
    """

    content_type = content_type or ""

    if JSON_CONTENT_TYPE in content_type:
        return fence(_raw_text(body))

    if MULTIPART_CONTENT_TYPE in content_type:
        try:
            summary = summarize_multipart(iter_multipart_parts(body, content_type))
        except MultipartError as exc:
            return fence(str(exc))
        except Exception as exc:  # noqa: BLE001
            return fence(f"multipart: {exc}")
        return fence(_as_json(summary))

    if URLENCODED_CONTENT_TYPE in content_type:
        if not body:
            return None
        try:
            form = decode_form_urlencoded(body)
        except ValueError:
            return fence(_raw_text(body))
        return fence(_as_json(form))

    if 0 < len(body) <= MAX_RAW_BODY_BYTES:
        return fence(_raw_text(body))
    return None


def render_request_fields(snapshot: RequestSnapshot | None) -> list[RenderedField]:
    """Build the ``REQUEST PAYLOAD`` fields for ``snapshot``.

    Live snapshots always carry ``Method`` and ``URL`` and a content-type
    aware ``Body``; manual payloads only list their non-empty strings and are
    the only variant with ``Headers``.
    """

    if snapshot is None:
        return []

    if isinstance(snapshot, ManualRequest):
        fields: list[RenderedField] = []
        for name, value in (
            ("Method", snapshot.method),
            ("URL", snapshot.url),
            ("Body", snapshot.body),
            ("Headers", snapshot.headers),
        ):
            if value:
                fields.append(RenderedField(name, fence(value)))
        return fields

    return _render_live(snapshot)


def _render_live(snapshot: LiveRequestSnapshot) -> list[RenderedField]:
    fields = [
        RenderedField("Method", fence(snapshot.method)),
        RenderedField("URL", fence(snapshot.url)),
    ]
    rendered = render_body(snapshot.read_body(), snapshot.header("Content-Type"))
    if rendered is not None:
        fields.append(RenderedField("Body", rendered))
    return fields


__all__ = [
    "JSON_CONTENT_TYPE",
    "MAX_MULTIPART_MEMORY",
    "MAX_RAW_BODY_BYTES",
    "MULTIPART_CONTENT_TYPE",
    "MultipartPart",
    "URLENCODED_CONTENT_TYPE",
    "decode_form_urlencoded",
    "fence",
    "iter_multipart_parts",
    "render_body",
    "render_request_fields",
    "summarize_multipart",
]
