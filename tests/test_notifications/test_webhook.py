"""Tests for webhook delivery — uses httpx mock transport."""

from __future__ import annotations

import json

import httpx
import pytest

from balance_notifier.chain.models import NetworkProfile
from balance_notifier.errors.delivery_errors import DeliveryError, SerializationError
from balance_notifier.errors.notifier_errors import ConfigurationError
from balance_notifier.notifications.events import NotificationKind, NotificationPayload, watch_started
from balance_notifier.notifications.webhook import WebhookSink, encode_payload

_URL = "https://hooks.example.com/services/T000/B000/XXX"
_ADDR = "15oF4uVJwmo4TdGW7VfQxNLavjCXviqxT9S1MgbjMNHr6Sp5"


def _payload() -> NotificationPayload:
    return watch_started(_ADDR, 2500, NetworkProfile(name="Polkadot", symbol="DOT", decimals=2))


def _unencodable() -> NotificationPayload:
    return NotificationPayload(
        kind=NotificationKind.BALANCE_CHANGED,
        address=object(),  # type: ignore[arg-type]
        amount_human="1",
        network="Polkadot",
        color="#2eb886",
        subscan_link="polkadot.subscan.io/account/x",
    )


def _sink(handler) -> WebhookSink:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return WebhookSink(_URL, client=client)


class TestEncodePayload:
    def test_encodes_message(self) -> None:
        body = json.loads(encode_payload(_payload()))
        assert body["text"] == "Started watching address"
        assert body["attachments"][0]["fields"][1]["value"] == "25 DOT"

    def test_keeps_emoji_unescaped(self) -> None:
        assert "👀".encode() in encode_payload(_payload())

    def test_unencodable_raises(self) -> None:
        with pytest.raises(SerializationError) as exc_info:
            encode_payload(_unencodable())
        assert exc_info.value.code == "serialization-error"

    def test_nan_rejected(self) -> None:
        payload = NotificationPayload(
            kind=NotificationKind.WATCH_STARTED,
            address=_ADDR,
            amount_human=float("nan"),  # type: ignore[arg-type]
            network="Polkadot",
            color="#dddddd",
            subscan_link="",
        )
        with pytest.raises(SerializationError):
            encode_payload(payload)


class TestWebhookSinkLifecycle:
    @pytest.mark.asyncio
    async def test_not_connected_by_default(self) -> None:
        sink = WebhookSink(_URL)
        assert sink.is_connected is False
        assert sink.url == _URL

    @pytest.mark.asyncio
    async def test_context_manager(self) -> None:
        async with WebhookSink(_URL) as sink:
            assert sink.is_connected is True
        assert sink.is_connected is False

    @pytest.mark.asyncio
    async def test_close_idempotent(self) -> None:
        sink = WebhookSink(_URL)
        await sink.close()
        assert sink.is_connected is False

    @pytest.mark.asyncio
    async def test_not_connected_raises(self) -> None:
        sink = WebhookSink(_URL)
        with pytest.raises(RuntimeError, match="not connected"):
            await sink.send(_payload())


class TestWebhookSinkSend:
    @pytest.mark.asyncio
    async def test_posts_json(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, text="ok")

        sink = _sink(handler)
        assert await sink.send(_payload()) == "ok"
        assert len(seen) == 1
        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == _URL
        assert request.headers["content-type"] == "application/json"
        body = json.loads(request.content)
        assert body["username"] == "Balance change notifier"
        assert body["icon_emoji"] == ":eyes:"
        await sink.close()

    @pytest.mark.asyncio
    async def test_error_status_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, text="no_service")

        sink = _sink(handler)
        with pytest.raises(DeliveryError) as exc_info:
            await sink.send(_payload())
        assert exc_info.value.status_code == 404
        assert "no_service" in exc_info.value.message
        await sink.close()

    @pytest.mark.asyncio
    async def test_transport_error_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            msg = "connection refused"
            raise httpx.ConnectError(msg, request=request)

        sink = _sink(handler)
        with pytest.raises(DeliveryError) as exc_info:
            await sink.send(_payload())
        assert exc_info.value.status_code is None
        await sink.close()

    @pytest.mark.asyncio
    async def test_serialization_error_makes_no_request(self) -> None:
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(200)

        sink = _sink(handler)
        with pytest.raises(SerializationError):
            await sink.send(_unencodable())
        assert calls == 0
        await sink.close()

    @pytest.mark.asyncio
    async def test_missing_url(self) -> None:
        sink = WebhookSink("")
        with pytest.raises(ConfigurationError):
            await sink.send(_payload())

    @pytest.mark.asyncio
    async def test_malformed_url_raises_delivery_error(self) -> None:
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(200)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        sink = WebhookSink("https://hooks.example.com:notaport/services/x", client=client)
        with pytest.raises(DeliveryError) as exc_info:
            await sink.send(_payload())
        assert exc_info.value.code == "delivery-error"
        assert exc_info.value.status_code is None
        assert calls == 0
        await sink.close()
