"""Runs one ``AccountWatcher`` per configured address.

Each watcher owns its chain connection and ``WatchState``; the webhook
sink is stateless and shared.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from balance_notifier.chain.client import SubstrateChainClient
from balance_notifier.errors.notifier_errors import NotifierError
from balance_notifier.watcher.account_watcher import AccountWatcher

if TYPE_CHECKING:
    from collections.abc import Callable

    from balance_notifier.config.settings import AppConfig
    from balance_notifier.watcher.account_watcher import NotificationSink

logger = logging.getLogger(__name__)


def chain_client_factory(config: AppConfig) -> Callable[[], SubstrateChainClient]:
    """Return a factory building chain clients from *config*."""

    def factory() -> SubstrateChainClient:
        return SubstrateChainClient(
            config.rpc,
            reconnect_delay=config.reconnect_delay,
            max_reconnect_attempts=config.max_reconnect_attempts,
        )

    return factory


class WatchSupervisor:
    """Starts, runs and stops the watchers for every configured address."""

    def __init__(
        self,
        config: AppConfig,
        *,
        sink: NotificationSink,
        chain_factory: Callable[[], SubstrateChainClient] | None = None,
    ) -> None:
        self._config = config
        self._sink = sink
        self._chain_factory = chain_factory or chain_client_factory(config)
        self._watchers: dict[str, AccountWatcher] = {}
        self._chains: dict[str, SubstrateChainClient] = {}
        for address in config.addresses:
            chain = self._chain_factory()
            self._chains[address] = chain
            self._watchers[address] = AccountWatcher(
                address,
                chain=chain,
                sink=sink,
                network=config.network_profile,
                username=config.bot_username,
            )

    @property
    def watchers(self) -> dict[str, AccountWatcher]:
        """Watchers keyed by address."""
        return dict(self._watchers)

    def stop(self) -> None:
        """Ask every watcher to stop."""
        for watcher in self._watchers.values():
            watcher.stop()

    async def run(self) -> None:
        """Run all watchers until they stop.

        A fatal error in any watcher cancels the others and is re-raised.
        """
        try:
            async with asyncio.TaskGroup() as tg:
                for address, watcher in self._watchers.items():
                    tg.create_task(self._watch(watcher, self._chains[address]), name=address)
        except ExceptionGroup as group:
            errors = [e for e in group.exceptions if isinstance(e, NotifierError)]
            if errors:
                raise errors[0] from group
            raise

    async def _watch(self, watcher: AccountWatcher, chain: SubstrateChainClient) -> None:
        try:
            await chain.connect()
            await watcher.run()
        finally:
            await chain.close()
