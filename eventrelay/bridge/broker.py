"""Broker transport boundary — the publish side's only outbound dependency.

Bridge boundary
---------------
The publisher depends on ``BrokerTransport``: one async ``publish`` call
taking the UTF-8 message body and its string attributes, returning the
broker-assigned message id.  Real broker clients (SNS, etc.) live outside
this package and only need to satisfy the protocol.

``InMemoryBroker`` is the local backend: a bounded in-memory queue that
assigns UUID message ids and hands queued messages back as
``Notification`` batches.  It is used by the CLI demo and by tests.
"""

from __future__ import annotations

import collections
import logging
import uuid
from typing import Protocol, runtime_checkable

from eventrelay.models.envelopes import Notification

logger = logging.getLogger(__name__)


class TransportError(RuntimeError):
    """Raised when a broker transport operation fails."""


@runtime_checkable
class BrokerTransport(Protocol):
    """Protocol every broker client must implement."""

    async def publish(self, message: str, attributes: dict[str, str]) -> str:
        """Send one message and return the broker-assigned message id.

        Implementations raise on failure; callers do not retry.
        """
        ...


class InMemoryBroker:
    """Bounded in-memory broker.

    Parameters
    ----------
    topic:
        Logical topic name, used in logs only.
    max_queue:
        Maximum number of undelivered messages.  Publishing to a full
        queue raises ``TransportError``.
    """

    def __init__(self, topic: str = "eventrelay-local", *, max_queue: int = 1024) -> None:
        self._topic = topic
        self._max_queue = max_queue
        self._queue: collections.deque[Notification] = collections.deque()
        self.publish_count = 0

    @property
    def topic(self) -> str:
        return self._topic

    @property
    def depth(self) -> int:
        """Number of messages waiting to be drained."""
        return len(self._queue)

    async def publish(self, message: str, attributes: dict[str, str]) -> str:
        self.publish_count += 1
        if len(self._queue) >= self._max_queue:
            raise TransportError(
                f"Broker queue for topic {self._topic!r} is full "
                f"(depth={len(self._queue)})."
            )

        message_id = str(uuid.uuid4())
        self._queue.append(
            Notification(
                delivery_id=message_id,
                message=message,
                attributes=dict(attributes),
            )
        )
        logger.debug(
            "InMemoryBroker: queued message %s on %s (depth=%d).",
            message_id,
            self._topic,
            len(self._queue),
        )
        return message_id

    def drain(self, *, max_messages: int = 100) -> list[Notification]:
        """Remove and return up to *max_messages* queued notifications, oldest first."""
        batch: list[Notification] = []
        while self._queue and len(batch) < max_messages:
            batch.append(self._queue.popleft())
        return batch

    def __repr__(self) -> str:
        return f"InMemoryBroker(topic={self._topic!r}, depth={self.depth})"
