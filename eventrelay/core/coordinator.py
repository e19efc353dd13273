"""Batch coordinator — processes one broker batch under a shared deadline.

Lifecycle of a batch
--------------------
1. **Start** — compute the deadline once from the remaining budget.
2. **Dispatch** — route every notification concurrently, each bounded by
   the shared deadline.
3. **Join** — wait for every dispatch to finish or time out.
4. **Aggregate** — the batch succeeds only when nothing failed; every
   failure is kept, not just the first.
5. **Terminal** — return the result.  Failed notifications are not retried
   here; redelivery of the whole batch belongs to the invoking runtime.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta
from typing import Sequence

from eventrelay.core.deadline import (
    DEFAULT_MINIMUM_FLOOR_SECONDS,
    DEFAULT_SAFETY_MARGIN_SECONDS,
    Deadline,
)
from eventrelay.models.envelopes import Notification
from eventrelay.models.results import (
    BatchResult,
    FailureKind,
    NotificationFailure,
    RouteOutcome,
)
from eventrelay.routing.router import EventRouter

logger = logging.getLogger(__name__)


class BatchProcessingError(RuntimeError):
    """Raised at the batch boundary when one or more notifications failed.

    Carries the full ``BatchResult`` so callers can see every failure.
    """

    def __init__(self, result: BatchResult) -> None:
        super().__init__(result.summary())
        self.result = result

    @property
    def failures(self) -> list[NotificationFailure]:
        return self.result.failures


class BatchCoordinator:
    """Dispatches a batch of notifications through an ``EventRouter``.

    Parameters
    ----------
    router:
        Routes a single notification to its handlers.
    safety_margin:
        Seconds reserved for the runtime at the end of the budget.
    minimum_floor:
        Lower bound on the processing window, whatever the budget.
    """

    def __init__(
        self,
        router: EventRouter,
        *,
        safety_margin: float = DEFAULT_SAFETY_MARGIN_SECONDS,
        minimum_floor: float = DEFAULT_MINIMUM_FLOOR_SECONDS,
    ) -> None:
        self._router = router
        self._safety_margin = safety_margin
        self._minimum_floor = minimum_floor

    async def process_batch(
        self,
        notifications: Sequence[Notification],
        remaining: float | timedelta,
    ) -> BatchResult:
        """Route every notification and aggregate the outcomes."""
        if not notifications:
            logger.info("Received empty batch; nothing to dispatch")
            return BatchResult(processed=0, outcomes=[])

        deadline = Deadline.from_budget(
            remaining,
            safety_margin=self._safety_margin,
            minimum_floor=self._minimum_floor,
        )
        logger.info(
            "Received batch with %d records (deadline in %.1fs)",
            len(notifications),
            deadline.remaining(),
        )

        outcomes = await asyncio.gather(
            *(self._dispatch(n, deadline) for n in notifications)
        )
        result = BatchResult(processed=len(notifications), outcomes=list(outcomes))

        if result.succeeded:
            logger.info(
                "Successfully processed all %d records (%d skipped)",
                result.processed,
                len(result.skipped),
            )
        else:
            logger.error(
                "%d of %d records failed to process",
                len(result.failures),
                result.processed,
            )
        return result

    async def handle(
        self,
        notifications: Sequence[Notification],
        remaining: float | timedelta,
    ) -> str:
        """Process a batch and return a success summary.

        Raises
        ------
        BatchProcessingError
            If any notification failed, carrying every failure.
        """
        result = await self.process_batch(notifications, remaining)
        if not result.succeeded:
            raise BatchProcessingError(result)
        return result.summary()

    async def _dispatch(self, notification: Notification, deadline: Deadline) -> RouteOutcome:
        """Route one notification, converting timeouts and crashes to failures."""
        type_tag = notification.type_tag
        delivery_id = notification.delivery_id
        logger.debug("Processing message %s of type %s", delivery_id, type_tag)

        try:
            return await asyncio.wait_for(
                self._router.route(type_tag, notification.message, delivery_id=delivery_id),
                timeout=deadline.remaining(),
            )
        except asyncio.TimeoutError:
            failure = NotificationFailure(
                delivery_id=delivery_id,
                type_tag=type_tag,
                kind=FailureKind.TIMEOUT,
                message="Processing did not finish before the batch deadline",
            )
        except Exception as exc:
            logger.exception("Unexpected error processing message %s", delivery_id)
            failure = NotificationFailure(
                delivery_id=delivery_id,
                type_tag=type_tag,
                kind=FailureKind.UNEXPECTED,
                message=f"{type(exc).__name__}: {exc}",
            )

        logger.error("Failed to process message %s: %s", delivery_id, failure.message)
        return RouteOutcome.failed(failure)
