"""Side-effect handlers invoked for decoded events.

Each event kind fans out to two independent handlers: a notification
(email) and an audit record.  Handlers receive only the decoded fields
they need, never raw JSON, and raise ``HandlerFailure`` when their
collaborator fails.  Sibling handlers share no mutable state so the
router can run them concurrently.
"""

from __future__ import annotations

from typing import Any


class HandlerFailure(RuntimeError):
    """Raised when a side-effect handler cannot complete.

    Attributes
    ----------
    handler:
        Name of the failing handler (e.g. ``"welcome_email"``).
    context:
        The identifying fields the handler was invoked with.
    cause:
        The collaborator exception, if any.
    """

    def __init__(
        self,
        handler: str,
        message: str,
        *,
        context: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.handler = handler
        self.context = dict(context or {})
        self.cause = cause
