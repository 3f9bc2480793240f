"""HTTP request payloads attached to log events and their snapshots.

Purpose
-------
Model the request that was being served when an error was logged, and take a
point-in-time copy of it before the delivery worker runs.

Contents
--------
* :class:`HttpRequestLike` - protocol for live request objects.
* :class:`LiveRequest` / :class:`ManualRequest` - the two payload shapes
  (:data:`RequestPayload`).
* :class:`LiveRequestSnapshot` - detached copy of a live request.
* :func:`snapshot_request` - the synchronous snapshot step.

System Role
-----------
The snapshot runs on the caller's thread inside ``WebhookHook.fire``. A live
request body is a single-consumption stream: it is drained once, then two
independent streams are rebuilt from the buffered bytes, one handed back to
the caller's request and one kept by the snapshot.
"""

from __future__ import annotations

import io
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any, BinaryIO, Protocol, runtime_checkable

LOGGER = logging.getLogger(__name__)


@runtime_checkable
class HttpRequestLike(Protocol):
    """Request object exposing method, URL, headers, and a body stream.

    ``body`` may be a readable stream, raw bytes, text, or ``None``. When it is
    a stream the snapshot hands the caller a fresh one if the attribute is
    assignable.
    """

    method: str
    url: Any
    headers: Mapping[str, str]
    body: Any


@dataclass(slots=True, frozen=True)
class LiveRequest:
    """Payload variant carrying the live request object."""

    request: HttpRequestLike


@dataclass(slots=True, frozen=True)
class ManualRequest:
    """Payload variant with caller-supplied strings instead of a request."""

    method: str = ""
    url: str = ""
    body: str = ""
    headers: str = ""


RequestPayload = LiveRequest | ManualRequest


@dataclass(slots=True, frozen=True)
class LiveRequestSnapshot:
    """Detached copy of a live request, safe to read from another thread."""

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: BinaryIO | None = None

    def header(self, name: str, default: str = "") -> str:
        """Return the first header matching ``name`` case-insensitively.

        Examples
        --------
        >>> LiveRequestSnapshot('GET', '/', {'content-type': 'text/plain'}).header('Content-Type')
        'text/plain'
        """
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return default

    def read_body(self) -> bytes:
        """Return the buffered body without disturbing the stream position."""
        if self.body is None:
            return b""
        if isinstance(self.body, io.BytesIO):
            return self.body.getvalue()
        data = self.body.read()
        self.body.seek(0)
        return data


RequestSnapshot = LiveRequestSnapshot | ManualRequest


def snapshot_request(payload: RequestPayload) -> RequestSnapshot:
    """Return an independent copy of ``payload``.

    Examples
    --------
    >>> class Req:
    ...     def __init__(self):
    ...         self.method, self.url = 'POST', 'http://svc/items'
    ...         self.headers = {'Content-Type': 'application/json'}
    ...         self.body = io.BytesIO(b'{"a":1}')
    >>> req = Req()
    >>> snap = snapshot_request(LiveRequest(req))
    >>> req.body.read(), snap.read_body()
    (b'{"a":1}', b'{"a":1}')
    >>> snapshot_request(ManualRequest(method='GET')).method
    'GET'
    """

    if isinstance(payload, ManualRequest):
        return replace(payload)
    return _snapshot_live(payload.request)


def _snapshot_live(request: HttpRequestLike) -> LiveRequestSnapshot:
    method = str(getattr(request, "method", "") or "")
    url = str(getattr(request, "url", "") or "")
    headers = {str(key): str(value) for key, value in _header_items(getattr(request, "headers", None))}
    body = getattr(request, "body", None)

    if body is None:
        return LiveRequestSnapshot(method=method, url=url, headers=headers)
    if isinstance(body, (bytes, bytearray, memoryview)):
        return LiveRequestSnapshot(method=method, url=url, headers=headers, body=io.BytesIO(bytes(body)))
    if isinstance(body, str):
        return LiveRequestSnapshot(method=method, url=url, headers=headers, body=io.BytesIO(_encode_text(body)))

    try:
        data = _read_all(body)
    except Exception as exc:  # noqa: BLE001
        LOGGER.debug("Request body could not be read; continuing with an empty body", exc_info=exc)
        data = b""

    try:
        request.body = io.BytesIO(data)
    except Exception as exc:  # noqa: BLE001
        LOGGER.debug("Request body stream could not be replaced on the caller's request", exc_info=exc)
    return LiveRequestSnapshot(method=method, url=url, headers=headers, body=io.BytesIO(data))


def _read_all(stream: Any) -> bytes:
    data = stream.read()
    if data is None:
        return b""
    if isinstance(data, str):
        return _encode_text(data)
    return bytes(data)


def _encode_text(text: str) -> bytes:
    return text.encode("utf-8", errors="replace")


def _header_items(headers: Any) -> list[tuple[Any, Any]]:
    if headers is None:
        return []
    if hasattr(headers, "items"):
        return list(headers.items())
    return list(headers)


__all__ = [
    "HttpRequestLike",
    "LiveRequest",
    "LiveRequestSnapshot",
    "ManualRequest",
    "RequestPayload",
    "RequestSnapshot",
    "snapshot_request",
]
