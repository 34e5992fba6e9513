"""Application entry point for the balance notifier."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal

from pydantic import ValidationError

from balance_notifier.config.settings import AppConfig
from balance_notifier.errors.notifier_errors import NotifierError
from balance_notifier.notifications.webhook import WebhookSink
from balance_notifier.watcher.supervisor import WatchSupervisor

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
_STOP_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def configure_logging(level: str) -> None:
    """Send log records to stderr at *level*."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # keep per-request noise out of INFO output
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("substrateinterface").setLevel(logging.WARNING)


async def run(config: AppConfig) -> None:
    """Validate *config* and watch every configured address until stopped.

    Raises:
        NotifierError: On configuration, connection or subscription failures
            that make watching impossible.
    """
    for problem in config.validate_for_startup():
        logger.error("%s", problem.message)

    async with WebhookSink(config.slack_webhook_url, timeout=config.webhook_timeout) as sink:
        supervisor = WatchSupervisor(config, sink=sink)
        loop = asyncio.get_running_loop()
        for sig in _STOP_SIGNALS:
            with contextlib.suppress(NotImplementedError):
                loop.add_signal_handler(sig, supervisor.stop)
        try:
            await supervisor.run()
        finally:
            for sig in _STOP_SIGNALS:
                with contextlib.suppress(NotImplementedError):
                    loop.remove_signal_handler(sig)


def main() -> None:
    """Load settings from the environment and start watching."""
    try:
        config = AppConfig()
    except ValidationError as exc:
        configure_logging("INFO")
        logger.error("Invalid configuration: %s", exc)
        raise SystemExit(1) from exc

    configure_logging(config.log_level)
    try:
        asyncio.run(run(config))
    except NotifierError as exc:
        logger.error("%s [%s]", exc.message, exc.code)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
