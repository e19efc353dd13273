"""Event publisher — encodes a domain event and hands it to the broker.

One publish call makes exactly one outbound broker call.  There is no
local buffering, batching, or retry; retry policy belongs to the broker
client.
"""

from __future__ import annotations

import logging

from eventrelay.bridge.broker import BrokerTransport
from eventrelay.core.codec import EventCodec
from eventrelay.models.events import DomainEvent

logger = logging.getLogger(__name__)


class PublishError(RuntimeError):
    """Raised when the broker rejects or fails to accept a published event."""

    def __init__(self, event_type: str, cause: BaseException) -> None:
        super().__init__(f"Failed to publish {event_type}: {cause}")
        self.event_type = event_type
        self.cause = cause


class EventPublisher:
    """Publishes domain events to a broker transport.

    Parameters
    ----------
    transport:
        The broker client.  Any object implementing ``BrokerTransport``.
    codec:
        Envelope codec.  A default camelCase codec is used if omitted.
    """

    def __init__(self, transport: BrokerTransport, codec: EventCodec | None = None) -> None:
        self._transport = transport
        self._codec = codec or EventCodec()

    async def publish(self, event: DomainEvent) -> str:
        """Publish *event* and return the broker-assigned message id.

        Raises
        ------
        PublishError
            If the transport call fails.  The original exception is kept
            as ``cause``.
        """
        envelope = self._codec.encode(event)

        try:
            message_id = await self._transport.publish(envelope.message, envelope.attributes)
        except Exception as exc:
            logger.error("Failed to publish %s: %s", envelope.type_tag, exc)
            raise PublishError(envelope.type_tag, exc) from exc

        logger.info(
            "Published %s. MessageId: %s", envelope.type_tag, message_id
        )
        return message_id
