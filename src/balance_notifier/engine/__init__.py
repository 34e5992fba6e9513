"""Engine — change detection between account snapshots."""

from balance_notifier.engine.diff import (
    BalanceDelta,
    Direction,
    compute_delta,
    format_amount,
    scale_amount,
)

__all__ = ["BalanceDelta", "Direction", "compute_delta", "format_amount", "scale_amount"]
