"""Application settings loaded from environment variables and config files.

Configuration is loaded from (highest priority first):
1. Environment variables (``SLACK_WEBHOOK_URL``, ``WATCH_ADDRESS``, ...)
2. A ``.env`` file in the working directory
3. YAML config file (``CONFIG_PATH`` env var)
4. Defaults defined here

The resulting ``AppConfig`` is frozen and handed to each component
explicitly; nothing reads the environment after startup.
"""

from __future__ import annotations

import enum
from pathlib import Path
from typing import Any, Self

import yaml
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from balance_notifier.chain.models import NetworkProfile
from balance_notifier.errors.notifier_errors import ConfigurationError


class LogLevel(enum.StrEnum):
    """Supported log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


def _load_yaml(path: str | Path) -> dict[str, Any]:
    """Load a YAML configuration file and return its contents as a dict.

    Returns an empty dict if the file doesn't exist or is empty.
    """
    p = Path(path)
    if not p.exists():
        return {}
    text = p.read_text(encoding="utf-8")
    data = yaml.safe_load(text)
    return data if isinstance(data, dict) else {}


class AppConfig(BaseSettings):
    """Top-level application configuration.

    Field names match the environment variables of the original deployment
    (case-insensitive, no prefix).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    slack_webhook_url: str = Field(default="", description="Incoming webhook URL")
    watch_address: str = Field(
        default="",
        description="SS58 address to watch; several may be comma separated",
    )
    network: str = Field(default="Polkadot", description="Network display name")
    network_suffix: str = Field(default="DOT", description="Token symbol shown after amounts")
    network_decimals: int = Field(default=10, ge=0)
    rpc: str = Field(default="wss://rpc.polkadot.io", description="Chain websocket RPC")

    bot_username: str = "Balance change notifier"
    webhook_timeout: float = Field(default=10.0, gt=0)
    reconnect_delay: float = Field(default=5.0, ge=0)
    max_reconnect_attempts: int = Field(default=5, ge=0)
    require_webhook: bool = False
    log_level: LogLevel = LogLevel.INFO
    config_path: str = ""

    @model_validator(mode="before")
    @classmethod
    def _merge_yaml(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Merge YAML config file contents under the env var overrides."""
        config_path = values.get("config_path", "")
        if not config_path:
            return values
        yaml_data = _load_yaml(config_path)
        # YAML values serve as defaults; env vars (already in *values*) win.
        for key, val in yaml_data.items():
            if key not in values or values[key] is None:
                values[key] = val
        return values

    @classmethod
    def from_yaml(cls, path: str | Path) -> Self:
        """Construct ``AppConfig`` loading defaults from a YAML file.

        Environment variables still override YAML values.
        """
        return cls(config_path=str(path))

    @property
    def addresses(self) -> list[str]:
        """Distinct watched addresses, in configured order."""
        seen: dict[str, None] = {}
        for part in self.watch_address.split(","):
            addr = part.strip()
            if addr:
                seen.setdefault(addr, None)
        return list(seen)

    @property
    def network_profile(self) -> NetworkProfile:
        return NetworkProfile(
            name=self.network,
            symbol=self.network_suffix,
            decimals=self.network_decimals,
        )

    def validate_for_startup(self) -> list[ConfigurationError]:
        """Check settings needed to start watching.

        Returns non-fatal problems so the caller can log them. Raises
        ``ConfigurationError`` for problems that must abort startup.
        """
        if not self.addresses:
            msg = "WATCH_ADDRESS is not set"
            raise ConfigurationError(msg)
        problems: list[ConfigurationError] = []
        if not self.slack_webhook_url:
            err = ConfigurationError("Please fill in your Webhook URL (SLACK_WEBHOOK_URL)")
            if self.require_webhook:
                raise err
            problems.append(err)
        return problems
