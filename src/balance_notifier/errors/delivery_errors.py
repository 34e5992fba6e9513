"""Webhook delivery errors."""

from __future__ import annotations

from balance_notifier.errors.notifier_errors import NotifierError


class SerializationError(NotifierError):
    """A notification payload could not be encoded as JSON."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="serialization-error")


class DeliveryError(NotifierError):
    """The webhook POST failed at the transport or HTTP level."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message, code="delivery-error")
        self.status_code = status_code
