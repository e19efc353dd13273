"""Notification handler — builds email notifications for new users and products.

This module constructs email messages and hands them to an outbox.
Actual SMTP/SES delivery is left to whatever implements ``EmailOutbox``;
the bundled ``InMemoryOutbox`` only buffers messages.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from decimal import Decimal
from typing import Protocol

from pydantic import BaseModel, ConfigDict

from eventrelay.handlers import HandlerFailure

logger = logging.getLogger(__name__)


class EmailMessage(BaseModel):
    """An email notification ready for delivery."""

    model_config = ConfigDict(frozen=True)

    recipient: str
    sender: str
    subject: str
    body_text: str
    headers: dict[str, str] = {}


class EmailOutbox(Protocol):
    """Delivery collaborator for ``NotificationService``."""

    async def deliver(self, message: EmailMessage) -> None: ...


class InMemoryOutbox:
    """Buffers email messages instead of sending them.

    Parameters
    ----------
    delay:
        Seconds to wait per delivery, standing in for network latency.
    """

    def __init__(self, delay: float = 0.0) -> None:
        self._delay = delay
        self._messages: list[EmailMessage] = []

    async def deliver(self, message: EmailMessage) -> None:
        if self._delay:
            await asyncio.sleep(self._delay)
        self._messages.append(message)

    def flush(self) -> list[EmailMessage]:
        """Return and clear all buffered messages."""
        messages = list(self._messages)
        self._messages.clear()
        return messages

    @property
    def pending_count(self) -> int:
        return len(self._messages)


class LoggingOutbox:
    """Logs each message and keeps nothing; the invocation runtime default."""

    async def deliver(self, message: EmailMessage) -> None:
        logger.info(
            "Outbox: %r from %s to %s",
            message.subject,
            message.sender,
            message.recipient,
        )


class NotificationService:
    """Sends welcome and product notification emails.

    Parameters
    ----------
    outbox:
        Where built messages are delivered.
    sender:
        The From address.
    product_recipient:
        Who receives new-product notifications.
    """

    def __init__(
        self,
        outbox: EmailOutbox,
        *,
        sender: str = "noreply@eventrelay.local",
        product_recipient: str = "catalogue@eventrelay.local",
    ) -> None:
        self._outbox = outbox
        self._sender = sender
        self._product_recipient = product_recipient

    async def send_welcome_email(self, email: str, created_at: datetime) -> None:
        """Send a welcome email to a newly registered user."""
        message = EmailMessage(
            recipient=email,
            sender=self._sender,
            subject="Welcome aboard",
            body_text=(
                f"Hello {email},\n\n"
                f"Your account was created at {created_at.isoformat()}.\n"
            ),
            headers={"X-Eventrelay-Kind": "welcome"},
        )
        await self._deliver("welcome_email", message, {"email": email})
        logger.info(
            "Welcome email sent to %s for user registered at %s",
            email,
            created_at.isoformat(),
        )

    async def send_product_notification(self, name: str, sku: str, price: Decimal) -> None:
        """Announce a newly created product."""
        message = EmailMessage(
            recipient=self._product_recipient,
            sender=self._sender,
            subject=f"New product: {name} ({sku})",
            body_text=f"{name}\nSKU:   {sku}\nPrice: {price}\n",
            headers={"X-Eventrelay-Kind": "product", "X-Eventrelay-Sku": sku},
        )
        await self._deliver("product_email", message, {"sku": sku})
        logger.info(
            "Product notification email sent for %s (SKU: %s, Price: %s)",
            name,
            sku,
            price,
        )

    async def _deliver(self, handler: str, message: EmailMessage, context: dict) -> None:
        try:
            await self._outbox.deliver(message)
        except Exception as exc:
            logger.error("%s failed for %s: %s", handler, context, exc)
            raise HandlerFailure(
                handler,
                f"Email delivery to {message.recipient} failed: {exc}",
                context=context,
                cause=exc,
            ) from exc
