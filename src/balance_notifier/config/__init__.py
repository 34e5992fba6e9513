"""Configuration — immutable settings loaded once at startup."""

from balance_notifier.config.settings import AppConfig, LogLevel

__all__ = ["AppConfig", "LogLevel"]
