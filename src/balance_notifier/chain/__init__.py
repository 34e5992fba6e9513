"""Chain access — Substrate account query and subscription."""

from balance_notifier.chain.client import SubstrateChainClient
from balance_notifier.chain.models import AccountSnapshot, NetworkProfile

__all__ = ["AccountSnapshot", "NetworkProfile", "SubstrateChainClient"]
