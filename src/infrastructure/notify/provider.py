"""Outbound notification protocol."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol


class DeliveryStatus(StrEnum):
    """Result of handing a message to the delivery service."""

    DELIVERED = "delivered"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class EmailMessage:
    """A rendered email."""

    subject: str
    html: str
    text: str


class INotifier(Protocol):
    """Protocol for notification delivery."""

    async def notify(self, recipient: str, payload: EmailMessage) -> DeliveryStatus:
        """
        Deliver a message.

        Args:
            recipient: The email address to deliver to
            payload: The rendered message

        Returns:
            DeliveryStatus; delivery problems are reported, never raised
        """
        ...
