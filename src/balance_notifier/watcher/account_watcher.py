"""Account watcher — baseline, diff and dispatch loop for one address.

State machine::

    UNINITIALIZED --baseline snapshot--> BASELINE --start notice sent--> STREAMING
    STREAMING --stop() or fatal subscription error--> STOPPED

Every update is fully processed (diffed, dispatched, state advanced) before
the next one is read from the subscription.
"""

from __future__ import annotations

import asyncio
import contextlib
import enum
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from balance_notifier.engine.diff import Direction, compute_delta
from balance_notifier.errors.delivery_errors import DeliveryError, SerializationError
from balance_notifier.errors.notifier_errors import ConfigurationError
from balance_notifier.notifications.events import (
    DEFAULT_USERNAME,
    balance_changed,
    display_amount,
    watch_started,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from balance_notifier.chain.models import AccountSnapshot, NetworkProfile
    from balance_notifier.engine.diff import BalanceDelta
    from balance_notifier.notifications.events import NotificationPayload

logger = logging.getLogger(__name__)


class AccountSource(Protocol):
    """Where account snapshots come from."""

    async def query_account(self, address: str) -> AccountSnapshot: ...

    def subscribe_account(
        self, address: str, *, stop: asyncio.Event
    ) -> AsyncIterator[AccountSnapshot]: ...


class NotificationSink(Protocol):
    """Where notifications go."""

    async def send(self, payload: NotificationPayload) -> str: ...


class WatcherState(enum.StrEnum):
    """Lifecycle of an ``AccountWatcher``."""

    UNINITIALIZED = "uninitialized"
    BASELINE = "baseline"
    STREAMING = "streaming"
    STOPPED = "stopped"


@dataclass
class WatchState:
    """Last snapshot seen for a watched address."""

    address: str
    last_snapshot: AccountSnapshot


@dataclass
class WatcherStats:
    """Running counters for operator visibility."""

    updates: int = 0
    notified: int = 0
    ignored: int = 0
    delivery_failures: int = 0


def short_address(address: str) -> str:
    """Abbreviate an address as ``abcd...wxyz`` for log lines."""
    if len(address) <= 8:
        return address
    return f"{address[:4]}...{address[-4:]}"


class AccountWatcher:
    """Watches one address and notifies on every free-balance change.

    Usage::

        watcher = AccountWatcher(address, chain=chain, sink=sink, network=profile)
        task = asyncio.create_task(watcher.run())
        ...
        watcher.stop()
        await task
    """

    def __init__(
        self,
        address: str,
        *,
        chain: AccountSource,
        sink: NotificationSink,
        network: NetworkProfile,
        username: str = DEFAULT_USERNAME,
    ) -> None:
        self._address = address
        self._chain = chain
        self._sink = sink
        self._network = network
        self._username = username
        self._state = WatcherState.UNINITIALIZED
        self._watch: WatchState | None = None
        self._stop = asyncio.Event()
        self.stats = WatcherStats()

    @property
    def address(self) -> str:
        return self._address

    @property
    def state(self) -> WatcherState:
        """Current lifecycle state."""
        return self._state

    @property
    def watch_state(self) -> WatchState | None:
        """The baseline/last snapshot, or None before the baseline exists."""
        return self._watch

    def stop(self) -> None:
        """Ask the watcher to finish after the update in flight."""
        self._stop.set()

    async def run(self) -> None:
        """Establish the baseline, then process updates until stopped.

        Raises:
            ChainConnectionError: The initial account query failed.
            SubscriptionError: The update stream failed beyond recovery.
        """
        if self._state is not WatcherState.UNINITIALIZED:
            msg = f"Watcher for {self._address} already started"
            raise RuntimeError(msg)
        logger.info("👀 Watching %s", self._address)
        try:
            snapshot = await self._chain.query_account(self._address)
            await self.establish_baseline(snapshot)
            self._state = WatcherState.STREAMING
            updates = self._chain.subscribe_account(self._address, stop=self._stop)
            async with contextlib.aclosing(updates) as stream:
                async for current in stream:
                    await self.process_update(current)
                    if self._stop.is_set():
                        break
        finally:
            self._state = WatcherState.STOPPED
            logger.info("Stopped watching %s", self._address)

    async def establish_baseline(self, snapshot: AccountSnapshot) -> None:
        """Record the first snapshot and send the start notification."""
        if self._watch is not None:
            msg = f"Baseline for {self._address} already established"
            raise RuntimeError(msg)
        self._watch = WatchState(address=self._address, last_snapshot=snapshot)
        self._state = WatcherState.BASELINE
        logger.info(
            "👉🏻 %s has a balance of %s, nonce %d",
            short_address(self._address),
            display_amount(snapshot.free, self._network),
            snapshot.nonce,
        )
        payload = watch_started(
            self._address, snapshot.free, self._network, username=self._username
        )
        await self._dispatch(payload)

    async def process_update(self, current: AccountSnapshot) -> BalanceDelta:
        """Diff *current* against the last snapshot and notify on a change.

        The last snapshot advances on every non-zero delta, whether or not
        the notification was delivered.
        """
        if self._watch is None:
            msg = f"No baseline for {self._address}"
            raise RuntimeError(msg)
        self.stats.updates += 1
        delta = compute_delta(self._watch.last_snapshot, current)
        if delta.is_zero:
            self.stats.ignored += 1
            logger.debug("No balance change for %s (nonce %d)", self._address, current.nonce)
            return delta

        amount = display_amount(delta.abs_amount, self._network)
        if delta.direction is Direction.SENT:
            logger.info("💸 Sent %s from %s, nonce %d", amount, self._address, current.nonce)
        else:
            logger.info("🤑 Received %s on %s", amount, self._address)

        payload = balance_changed(self._address, delta, self._network, username=self._username)
        try:
            await self._dispatch(payload)
        finally:
            self._watch.last_snapshot = current
        return delta

    async def _dispatch(self, payload: NotificationPayload) -> bool:
        """Send *payload*; log and swallow delivery-layer failures."""
        try:
            response = await self._sink.send(payload)
        except SerializationError as exc:
            self.stats.delivery_failures += 1
            logger.error(
                "Could not encode %s notification for %s: %s",
                payload.kind,
                self._address,
                exc.message,
            )
            return False
        except (DeliveryError, ConfigurationError) as exc:
            self.stats.delivery_failures += 1
            logger.error(
                "There was an error sending the %s notification for %s: %s",
                payload.kind,
                self._address,
                exc.message,
            )
            return False
        self.stats.notified += 1
        logger.info("Message response for %s: %s", self._address, response)
        return True
