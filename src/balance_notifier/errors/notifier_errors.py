"""NotifierError — base exception class for all balance-notifier errors."""

from __future__ import annotations


class NotifierError(Exception):
    """Base error for all balance-notifier operations.

    Attributes:
        message: Human-readable error description.
        code: Machine-readable error code string.
    """

    def __init__(self, message: str, *, code: str = "notifier-error") -> None:
        super().__init__(message)
        self.message = message
        self.code = code


class ConfigurationError(NotifierError):
    """A required setting is missing or invalid."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="configuration-error")
