"""Dispatch outcomes — per-notification route results and the batch result."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict


class RouteStatus(str, Enum):
    """How the router finished with one notification."""

    SUCCEEDED = "succeeded"
    SKIPPED = "skipped"
    FAILED = "failed"


class FailureKind(str, Enum):
    """Why a notification failed."""

    MALFORMED_PAYLOAD = "malformed_payload"
    HANDLER_FAILURE = "handler_failure"
    TIMEOUT = "timeout"
    UNEXPECTED = "unexpected"


class HandlerError(BaseModel):
    """One side-effect handler's failure."""

    model_config = ConfigDict(frozen=True)

    handler: str
    message: str


class NotificationFailure(BaseModel):
    """A failed notification, with enough context to remediate it.

    ``subject`` holds the identifying field of the decoded event (e.g.
    ``{"userId": 1}``) when decoding got that far.
    """

    model_config = ConfigDict(frozen=True)

    delivery_id: str
    type_tag: str
    kind: FailureKind
    message: str
    subject: dict[str, Any] = {}
    handler_errors: list[HandlerError] = []

    def describe(self) -> str:
        """One-line summary used in logs and aggregated error messages."""
        subject = ", ".join(f"{k}={v}" for k, v in self.subject.items())
        where = f"{self.delivery_id} ({self.type_tag}{'; ' + subject if subject else ''})"
        return f"{where}: {self.kind.value}: {self.message}"


class RouteOutcome(BaseModel):
    """Result of routing one notification."""

    model_config = ConfigDict(frozen=True)

    delivery_id: str
    type_tag: str
    status: RouteStatus
    failure: NotificationFailure | None = None

    @classmethod
    def succeeded(cls, delivery_id: str, type_tag: str) -> RouteOutcome:
        return cls(delivery_id=delivery_id, type_tag=type_tag, status=RouteStatus.SUCCEEDED)

    @classmethod
    def skipped(cls, delivery_id: str, type_tag: str) -> RouteOutcome:
        return cls(delivery_id=delivery_id, type_tag=type_tag, status=RouteStatus.SKIPPED)

    @classmethod
    def failed(cls, failure: NotificationFailure) -> RouteOutcome:
        return cls(
            delivery_id=failure.delivery_id,
            type_tag=failure.type_tag,
            status=RouteStatus.FAILED,
            failure=failure,
        )


class BatchResult(BaseModel):
    """Outcome of one batch invocation.

    The batch succeeds only when no notification failed; there is no
    partial acknowledgement.  ``failures`` lists every failed
    notification, not just the first.
    """

    model_config = ConfigDict(frozen=True)

    processed: int = 0
    outcomes: list[RouteOutcome] = []

    @property
    def failures(self) -> list[NotificationFailure]:
        return [o.failure for o in self.outcomes if o.failure is not None]

    @property
    def skipped(self) -> list[RouteOutcome]:
        return [o for o in self.outcomes if o.status is RouteStatus.SKIPPED]

    @property
    def succeeded(self) -> bool:
        return not self.failures

    def summary(self) -> str:
        if self.succeeded:
            return f"Successfully processed {self.processed} records"
        return (
            f"{len(self.failures)} of {self.processed} records failed: "
            + "; ".join(f.describe() for f in self.failures)
        )
