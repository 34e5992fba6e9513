"""Shared test fixtures for the balance-notifier test suite."""

from __future__ import annotations

import pytest

from balance_notifier.chain.models import NetworkProfile
from tests.fakes import WATCH_ADDRESS


@pytest.fixture
def network() -> NetworkProfile:
    """A zero-decimal network without symbol so raw amounts display unchanged."""
    return NetworkProfile(name="Polkadot", symbol="", decimals=0)


@pytest.fixture
def dot_network() -> NetworkProfile:
    return NetworkProfile(name="Polkadot", symbol="DOT", decimals=10)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path):
    """Run from an empty directory with no notifier variables set."""
    for var in (
        "SLACK_WEBHOOK_URL",
        "WATCH_ADDRESS",
        "NETWORK",
        "NETWORK_SUFFIX",
        "NETWORK_DECIMALS",
        "RPC",
        "BOT_USERNAME",
        "WEBHOOK_TIMEOUT",
        "RECONNECT_DELAY",
        "MAX_RECONNECT_ATTEMPTS",
        "REQUIRE_WEBHOOK",
        "LOG_LEVEL",
        "CONFIG_PATH",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


@pytest.fixture
def app_config(clean_env):
    """Provide a test AppConfig with safe defaults."""
    from balance_notifier.config.settings import AppConfig

    return AppConfig(
        slack_webhook_url="https://hooks.example.com/services/T000/B000/XXX",
        watch_address=WATCH_ADDRESS,
        network="Polkadot",
        network_suffix="DOT",
        network_decimals=10,
        rpc="wss://rpc.example.invalid",
        reconnect_delay=0,
    )
