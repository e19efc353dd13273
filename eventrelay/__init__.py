"""eventrelay: typed domain events from publisher to side-effect handlers.

The producer side encodes events into tagged JSON envelopes and publishes
them to a broker.  The consumer side receives broker batches, decodes
each notification back into its event, and fans it out to notification
and audit handlers under a shared deadline, reporting every failure in
the batch.
"""

__version__ = "0.1.0"
__description__ = "Typed domain event publishing and batched notification dispatch"

from eventrelay.core.codec import EventCodec
from eventrelay.core.coordinator import BatchCoordinator, BatchProcessingError
from eventrelay.core.publisher import EventPublisher, PublishError
from eventrelay.routing.router import EventRouter

__all__ = [
    "EventCodec",
    "EventPublisher",
    "PublishError",
    "EventRouter",
    "BatchCoordinator",
    "BatchProcessingError",
    "__version__",
]
