"""Error taxonomy for the balance notifier."""

from balance_notifier.errors.chain_errors import ChainConnectionError, SubscriptionError
from balance_notifier.errors.delivery_errors import DeliveryError, SerializationError
from balance_notifier.errors.notifier_errors import ConfigurationError, NotifierError

__all__ = [
    "ChainConnectionError",
    "ConfigurationError",
    "DeliveryError",
    "NotifierError",
    "SerializationError",
    "SubscriptionError",
]
