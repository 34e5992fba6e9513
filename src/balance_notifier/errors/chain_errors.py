"""Chain transport errors."""

from __future__ import annotations

from balance_notifier.errors.notifier_errors import NotifierError


class ChainConnectionError(NotifierError):
    """The chain RPC endpoint could not be reached or queried."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="chain-connection-error")


class SubscriptionError(NotifierError):
    """The account subscription failed and could not be resumed."""

    def __init__(self, message: str, *, attempts: int = 0) -> None:
        super().__init__(message, code="subscription-error")
        self.attempts = attempts
