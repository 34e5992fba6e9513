"""Notification payloads and their Slack-style wire format.

Two events exist: ``WATCH_STARTED`` for the baseline observation of an
address and ``BALANCE_CHANGED`` for every non-zero free-balance delta.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from balance_notifier.engine.diff import Direction, format_amount

if TYPE_CHECKING:
    from balance_notifier.chain.models import NetworkProfile
    from balance_notifier.engine.diff import BalanceDelta

DEFAULT_USERNAME = "Balance change notifier"

COLOR_NEUTRAL = "#dddddd"
COLOR_SENT = "#d62d20"
COLOR_RECEIVED = "#2eb886"


class NotificationKind(enum.StrEnum):
    """Kinds of notification the watcher emits."""

    WATCH_STARTED = "watch_started"
    BALANCE_CHANGED = "balance_changed"


@dataclass(frozen=True)
class NotificationPayload:
    """A single notification, built fresh per event."""

    kind: NotificationKind
    address: str
    amount_human: str
    network: str
    color: str
    subscan_link: str
    direction: Direction | None = None
    username: str = DEFAULT_USERNAME

    @property
    def text(self) -> str:
        if self.kind is NotificationKind.WATCH_STARTED:
            return "Started watching address"
        return "New balance change"

    @property
    def icon_emoji(self) -> str:
        if self.kind is NotificationKind.WATCH_STARTED:
            return ":eyes:"
        return ":moneybag:"

    def to_message(self) -> dict[str, Any]:
        """Serialize to the webhook message object."""
        if self.kind is NotificationKind.WATCH_STARTED:
            fields = [
                {"title": "👀 Watch address", "value": self.address},
                {"title": "💰 Current balance", "value": self.amount_human, "short": True},
                {"title": "🔗 Subscan", "value": self.subscan_link, "short": True},
            ]
        else:
            title = "💸 Sent" if self.direction is Direction.SENT else "🤑 Received"
            fields = [
                {"title": title, "value": self.amount_human, "short": True},
                {"title": "Network", "value": self.network, "short": True},
                {"title": "Address", "value": self.address},
                {"title": "🔗 Subscan", "value": self.subscan_link},
            ]
        return {
            "username": self.username,
            "text": self.text,
            "icon_emoji": self.icon_emoji,
            "attachments": [{"color": self.color, "fields": fields}],
        }


def display_amount(raw: int, network: NetworkProfile) -> str:
    """Scale *raw* for display and append the network's token symbol."""
    human = format_amount(raw, network.decimals)
    return f"{human} {network.symbol}" if network.symbol else human


def watch_started(
    address: str,
    free: int,
    network: NetworkProfile,
    *,
    username: str = DEFAULT_USERNAME,
) -> NotificationPayload:
    """Build the notification sent once when watching an address begins."""
    return NotificationPayload(
        kind=NotificationKind.WATCH_STARTED,
        address=address,
        amount_human=display_amount(free, network),
        network=network.name,
        color=COLOR_NEUTRAL,
        subscan_link=network.subscan_link(address),
        username=username,
    )


def balance_changed(
    address: str,
    delta: BalanceDelta,
    network: NetworkProfile,
    *,
    username: str = DEFAULT_USERNAME,
) -> NotificationPayload:
    """Build the notification for a non-zero balance delta.

    The displayed amount is always the absolute value; ``direction``
    carries the sign.
    """
    sent = delta.direction is Direction.SENT
    return NotificationPayload(
        kind=NotificationKind.BALANCE_CHANGED,
        address=address,
        amount_human=display_amount(delta.abs_amount, network),
        network=network.name,
        color=COLOR_SENT if sent else COLOR_RECEIVED,
        subscan_link=network.subscan_link(address),
        direction=delta.direction,
        username=username,
    )
