"""Chain data models — account snapshots and network display profile."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class AccountSnapshot:
    """Observed ``System.Account`` state for an address.

    ``free`` and ``nonce`` always come from the same decoded storage value.
    Balances are plain ints (planck), never floats.
    """

    free: int
    nonce: int
    reserved: int = 0
    frozen: int = 0

    @classmethod
    def from_account_info(cls, value: dict[str, Any]) -> AccountSnapshot:
        """Build a snapshot from a decoded ``AccountInfo`` mapping."""
        data = value.get("data") or {}
        return cls(
            free=int(data.get("free", 0)),
            nonce=int(value.get("nonce", 0)),
            reserved=int(data.get("reserved", 0)),
            # older runtimes expose misc_frozen instead of frozen
            frozen=int(data.get("frozen", data.get("misc_frozen", 0))),
        )


@dataclass(frozen=True)
class NetworkProfile:
    """How balances on a network are labelled and scaled for display."""

    name: str
    symbol: str
    decimals: int

    @property
    def subscan_host(self) -> str:
        return f"{self.name.lower()}.subscan.io"

    def subscan_link(self, address: str) -> str:
        """Return the Subscan account page for *address* (scheme-less)."""
        return f"{self.subscan_host}/account/{address}"
