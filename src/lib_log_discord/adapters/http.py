"""httpx-based webhook transport.

Purpose
-------
Serialize a :class:`~lib_log_discord.domain.document.Delivery` and POST it to
the Discord webhook URL in one attempt.

Contents
--------
* :class:`HttpxWebhookTransport` - concrete :class:`WebhookTransportPort`.

System Role
-----------
Inline deliveries are posted as ``application/json``. Deliveries carrying an
attachment are posted as ``multipart/form-data`` with the document in the
``payload_json`` field and the file in ``files[0]``; httpx generates the
boundary. Timeouts are httpx defaults and there is no retry.
"""

from __future__ import annotations

import httpx

from lib_log_discord.application.ports.transport import DeliveryResult, WebhookTransportPort
from lib_log_discord.domain.document import Delivery
from lib_log_discord.errors import SerializationError, TransportError

PAYLOAD_FIELD = "payload_json"
FILE_FIELD = "files[0]"
ATTACHMENT_CONTENT_TYPE = "text/plain; charset=utf-8"


class HttpxWebhookTransport(WebhookTransportPort):
    """Post deliveries to a webhook with a shared :class:`httpx.Client`.

    Examples
    --------
    >>> from lib_log_discord.domain.document import NotificationDocument
    >>> seen = []
    >>> def handler(request):
    ...     seen.append(request.headers['content-type'])
    ...     return httpx.Response(204)
    >>> client = httpx.Client(transport=httpx.MockTransport(handler))
    >>> transport = HttpxWebhookTransport('https://hooks.example/x', client=client)
    >>> transport.send(Delivery(NotificationDocument('bot', ()))).ok
    True
    >>> seen
    ['application/json']
    """

    def __init__(self, url: str, *, client: httpx.Client | None = None) -> None:
        self._url = url
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client()

    @property
    def url(self) -> str:
        return self._url

    def send(self, delivery: Delivery) -> DeliveryResult:
        """POST ``delivery`` once and report the status."""
        try:
            payload = delivery.document.to_json().encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise SerializationError(f"cannot encode webhook payload: {exc}") from exc

        try:
            if delivery.attachment is None:
                response = self._client.post(
                    self._url,
                    content=payload,
                    headers={"Content-Type": "application/json"},
                )
            else:
                attachment = delivery.attachment
                response = self._client.post(
                    self._url,
                    data={PAYLOAD_FIELD: payload},
                    files={FILE_FIELD: (attachment.filename, attachment.content, ATTACHMENT_CONTENT_TYPE)},
                )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise TransportError(str(exc) or type(exc).__name__) from exc

        response.close()
        return DeliveryResult(ok=response.status_code < 300, status_code=response.status_code)

    def close(self) -> None:
        """Close the underlying client when this transport created it."""
        if self._owns_client:
            self._client.close()


__all__ = ["ATTACHMENT_CONTENT_TYPE", "FILE_FIELD", "HttpxWebhookTransport", "PAYLOAD_FIELD"]
