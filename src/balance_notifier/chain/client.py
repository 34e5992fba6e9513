"""Substrate chain client — account query and account subscription.

Wraps the blocking ``substrate-interface`` websocket client:
- ``query_account`` — one-shot ``System.Account`` read
- ``subscribe_account`` — async iterator over ``System.Account`` updates

The subscription callback runs on a worker thread; snapshots are handed to
the event loop through an ``asyncio.Queue``. Mid-stream failures are
retried by reconnecting, up to ``max_reconnect_attempts`` consecutive times.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING, Any

from substrateinterface import SubstrateInterface
from substrateinterface.exceptions import SubstrateRequestException
from websocket import WebSocketException

from balance_notifier.chain.models import AccountSnapshot
from balance_notifier.errors.chain_errors import ChainConnectionError, SubscriptionError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

logger = logging.getLogger(__name__)

TRANSPORT_ERRORS = (OSError, WebSocketException, SubstrateRequestException)

_END = object()


class SubstrateChainClient:
    """Chain access for a single RPC endpoint.

    Usage::

        chain = SubstrateChainClient("wss://rpc.polkadot.io")
        await chain.connect()
        try:
            snapshot = await chain.query_account(address)
            async for update in chain.subscribe_account(address, stop=stop):
                ...
        finally:
            await chain.close()
    """

    def __init__(
        self,
        url: str,
        *,
        reconnect_delay: float = 5.0,
        max_reconnect_attempts: int = 5,
        interface_factory: Callable[..., Any] = SubstrateInterface,
    ) -> None:
        self._url = url
        self._reconnect_delay = reconnect_delay
        self._max_reconnect_attempts = max_reconnect_attempts
        self._factory = interface_factory
        self._interface: Any | None = None

    @property
    def url(self) -> str:
        return self._url

    @property
    def is_connected(self) -> bool:
        """Check if a websocket connection is open."""
        return self._interface is not None

    async def connect(self) -> None:
        """Open the websocket connection to the RPC endpoint.

        Raises:
            ChainConnectionError: If the endpoint cannot be reached.
        """
        if self._interface is not None:
            return
        try:
            self._interface = await asyncio.to_thread(self._factory, url=self._url)
        except TRANSPORT_ERRORS as exc:
            msg = f"Cannot connect to {self._url}: {exc}"
            raise ChainConnectionError(msg) from exc
        logger.info("Connected to %s", self._url)

    async def close(self) -> None:
        """Close the websocket connection."""
        interface, self._interface = self._interface, None
        if interface is not None:
            await asyncio.to_thread(_close_quietly, interface)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def query_account(self, address: str) -> AccountSnapshot:
        """Read the current ``System.Account`` value for *address*.

        Raises:
            ChainConnectionError: If the query fails at the transport level.
        """
        interface = self._ensure_connected()
        try:
            result = await asyncio.to_thread(interface.query, "System", "Account", [address])
        except TRANSPORT_ERRORS as exc:
            msg = f"Account query for {address} failed: {exc}"
            raise ChainConnectionError(msg) from exc
        return AccountSnapshot.from_account_info(result.value)

    async def subscribe_account(
        self, address: str, *, stop: asyncio.Event
    ) -> AsyncIterator[AccountSnapshot]:
        """Yield every ``System.Account`` update for *address* until *stop* is set.

        The first update is the current state at subscription time. Snapshots
        are yielded strictly in delivery order.

        Raises:
            SubscriptionError: After ``max_reconnect_attempts`` consecutive
                failures to keep the subscription alive.
        """
        failures = 0
        while not stop.is_set():
            try:
                await self.connect()
            except ChainConnectionError as exc:
                failures += 1
                self._check_budget(address, failures, exc)
                await self._backoff(address, failures, stop, exc)
                continue

            async with contextlib.aclosing(self._stream(address, stop)) as stream:
                async for item in stream:
                    if isinstance(item, BaseException):
                        if stop.is_set():
                            return
                        failures += 1
                        await self.close()
                        self._check_budget(address, failures, item)
                        await self._backoff(address, failures, stop, item)
                        break
                    failures = 0
                    yield item
                else:
                    # subscription ended because stop was requested
                    return

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _stream(self, address: str, stop: asyncio.Event) -> AsyncIterator[Any]:
        """Run one subscription and yield snapshots, ending with an error if one occurs."""
        interface = self._ensure_connected()
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue[Any] = asyncio.Queue()

        def handler(obj: Any, update_nr: int, subscription_id: str) -> Any:
            if stop.is_set():
                return True
            snapshot = AccountSnapshot.from_account_info(obj.value)
            loop.call_soon_threadsafe(queue.put_nowait, snapshot)
            return None

        def run() -> None:
            try:
                interface.query("System", "Account", [address], subscription_handler=handler)
            except Exception as exc:  # noqa: BLE001
                loop.call_soon_threadsafe(queue.put_nowait, exc)
            else:
                loop.call_soon_threadsafe(queue.put_nowait, _END)

        worker = asyncio.ensure_future(asyncio.to_thread(run))
        stopper = asyncio.create_task(self._close_on_stop(interface, stop))
        try:
            while True:
                item = await queue.get()
                if item is _END:
                    return
                yield item
                if isinstance(item, BaseException):
                    return
        finally:
            stopper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await stopper
            if not worker.done():
                await asyncio.to_thread(_close_quietly, interface)
                self._interface = None
            with contextlib.suppress(Exception):
                await worker

    async def _close_on_stop(self, interface: Any, stop: asyncio.Event) -> None:
        # The worker thread blocks on the socket; closing it unblocks the thread.
        await stop.wait()
        await asyncio.to_thread(_close_quietly, interface)

    def _check_budget(self, address: str, failures: int, exc: BaseException) -> None:
        if failures > self._max_reconnect_attempts:
            msg = f"Subscription for {address} failed {failures} times in a row: {exc}"
            raise SubscriptionError(msg, attempts=failures) from exc

    async def _backoff(
        self, address: str, failures: int, stop: asyncio.Event, exc: BaseException
    ) -> None:
        logger.warning(
            "Subscription for %s interrupted: %s (reconnect %d/%d in %.1fs)",
            address,
            exc,
            failures,
            self._max_reconnect_attempts,
            self._reconnect_delay,
        )
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(stop.wait(), timeout=self._reconnect_delay)

    def _ensure_connected(self) -> Any:
        if self._interface is None:
            msg = "SubstrateChainClient is not connected — call connect() first"
            raise RuntimeError(msg)
        return self._interface


def _close_quietly(interface: Any) -> None:
    with contextlib.suppress(*TRANSPORT_ERRORS):
        interface.close()
