"""Watchers — per-address balance change detection."""

from balance_notifier.watcher.account_watcher import (
    AccountWatcher,
    WatcherState,
    WatcherStats,
    WatchState,
)
from balance_notifier.watcher.supervisor import WatchSupervisor

__all__ = ["AccountWatcher", "WatchState", "WatchSupervisor", "WatcherState", "WatcherStats"]
