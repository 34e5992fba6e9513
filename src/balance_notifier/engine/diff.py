"""Balance diff engine — integer deltas between account snapshots.

Deltas are computed on raw integer balances. Scaling to human units is a
presentation step applied afterwards with ``decimal`` arithmetic.
"""

from __future__ import annotations

import decimal
import enum
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from balance_notifier.chain.models import AccountSnapshot


class Direction(enum.StrEnum):
    """Which way funds moved."""

    SENT = "sent"
    RECEIVED = "received"


@dataclass(frozen=True)
class BalanceDelta:
    """Signed change in free balance between two snapshots."""

    amount: int
    direction: Direction
    is_zero: bool

    @property
    def abs_amount(self) -> int:
        return abs(self.amount)


def compute_delta(previous: AccountSnapshot, current: AccountSnapshot) -> BalanceDelta:
    """Return ``current.free - previous.free`` as a ``BalanceDelta``.

    The nonce is ignored: two snapshots with the same free balance always
    yield a zero delta.
    """
    amount = current.free - previous.free
    return BalanceDelta(
        amount=amount,
        direction=Direction.SENT if amount < 0 else Direction.RECEIVED,
        is_zero=amount == 0,
    )


def scale_amount(raw: int, decimals: int) -> Decimal:
    """Convert a raw integer balance to human units (``raw / 10**decimals``).

    Raises:
        ValueError: If *decimals* is negative.
    """
    if decimals < 0:
        msg = f"decimals must be non-negative, got {decimals}"
        raise ValueError(msg)
    digits = len(str(abs(raw)))
    with decimal.localcontext() as ctx:
        ctx.prec = max(digits + decimals, 28)
        return Decimal(raw).scaleb(-decimals)


def format_amount(raw: int, decimals: int) -> str:
    """Format a raw balance as a plain decimal string without trailing zeros.

    ``format_amount(2500, 2) == "25"``, ``format_amount(1, 3) == "0.001"``.
    """
    value = scale_amount(raw, decimals)
    if value == 0:
        return "0"
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text
