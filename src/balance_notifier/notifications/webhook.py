"""Webhook delivery — one POST per notification, no retries.

Failures are raised to the caller, which decides whether they matter.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Self

import httpx

from balance_notifier.errors.delivery_errors import DeliveryError, SerializationError
from balance_notifier.errors.notifier_errors import ConfigurationError

if TYPE_CHECKING:
    from types import TracebackType

    from balance_notifier.notifications.events import NotificationPayload

logger = logging.getLogger(__name__)

_HEADERS = {"Content-Type": "application/json"}


def encode_payload(payload: NotificationPayload) -> bytes:
    """Encode *payload* as a JSON request body.

    Raises:
        SerializationError: If the message contains values JSON cannot represent.
    """
    try:
        body = json.dumps(payload.to_message(), ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as exc:
        msg = f"Failed to serialize {payload.kind} payload: {exc}"
        raise SerializationError(msg) from exc
    return body.encode("utf-8")


class WebhookSink:
    """Posts notification payloads to an incoming-webhook URL.

    Usage::

        sink = WebhookSink("https://hooks.slack.com/services/...")
        await sink.connect()
        try:
            body = await sink.send(payload)
        finally:
            await sink.close()
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._url = url
        self._timeout = timeout
        self._client = client

    @property
    def url(self) -> str:
        """Return the webhook URL."""
        return self._url

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    async def connect(self) -> None:
        """Create the underlying HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> Self:
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def send(self, payload: NotificationPayload) -> str:
        """Deliver *payload* and return the response body.

        Raises:
            ConfigurationError: No webhook URL is configured.
            SerializationError: The payload cannot be encoded; nothing is sent.
            DeliveryError: The request failed or the endpoint returned an error status.
        """
        if not self._url:
            msg = "No webhook URL configured"
            raise ConfigurationError(msg)
        body = encode_payload(payload)
        client = self._ensure_connected()
        try:
            resp = await client.post(self._url, content=body, headers=_HEADERS)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            msg = f"Webhook request failed: {exc}"
            raise DeliveryError(msg) from exc
        if resp.status_code >= 400:
            msg = f"Webhook returned {resp.status_code}: {resp.text.strip()}"
            raise DeliveryError(msg, status_code=resp.status_code)
        logger.debug("Webhook %s accepted %s payload", self._url, payload.kind)
        return resp.text

    def _ensure_connected(self) -> httpx.AsyncClient:
        if self._client is None:
            msg = "WebhookSink is not connected — call connect() first"
            raise RuntimeError(msg)
        return self._client
