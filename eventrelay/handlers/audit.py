"""Audit handler — records every processed event in an audit trail.

Each record is written to an ``AuditTrail`` collaborator and echoed as an
``[AUDIT]`` log line.  Storage is not persistent here; a durable trail
only needs to implement ``append``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field

from eventrelay.handlers import HandlerFailure

logger = logging.getLogger(__name__)


class AuditRecord(BaseModel):
    """One audit trail entry."""

    model_config = ConfigDict(frozen=True)

    action: str  # e.g. "user_created"
    subject: dict[str, Any]
    details: dict[str, Any] = {}
    occurred_at: datetime
    recorded_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


class AuditTrail(Protocol):
    async def append(self, record: AuditRecord) -> None: ...


class InMemoryAuditTrail:
    """Volatile audit trail, suitable for tests and local runs."""

    def __init__(self) -> None:
        self._records: list[AuditRecord] = []

    async def append(self, record: AuditRecord) -> None:
        self._records.append(record)

    @property
    def records(self) -> list[AuditRecord]:
        return list(self._records)


class LoggingAuditTrail:
    """Audit trail that only logs; the ``[AUDIT]`` line is the record."""

    async def append(self, record: AuditRecord) -> None:
        logger.debug("Audit trail: %s %s", record.action, record.subject)


class AuditService:
    """Writes audit records for user and product creation."""

    def __init__(self, trail: AuditTrail) -> None:
        self._trail = trail

    async def record_user_created(self, user_id: int, email: str, created_at: datetime) -> None:
        await self._record(
            AuditRecord(
                action="user_created",
                subject={"userId": user_id},
                details={"email": email},
                occurred_at=created_at,
            ),
        )
        logger.info(
            "[AUDIT] User created - UserId: %s, Email: %s, CreatedAt: %s",
            user_id,
            email,
            created_at.isoformat(),
        )

    async def record_product_created(
        self,
        product_id: int,
        name: str,
        sku: str,
        price: Decimal,
        created_at: datetime,
    ) -> None:
        await self._record(
            AuditRecord(
                action="product_created",
                subject={"productId": product_id},
                details={"name": name, "sku": sku, "price": str(price)},
                occurred_at=created_at,
            ),
        )
        logger.info(
            "[AUDIT] Product created - ProductId: %s, Name: %s, SKU: %s, Price: %s, CreatedAt: %s",
            product_id,
            name,
            sku,
            price,
            created_at.isoformat(),
        )

    async def _record(self, record: AuditRecord) -> None:
        try:
            await self._trail.append(record)
        except Exception as exc:
            logger.error(
                "[AUDIT] Failed to record %s for %s: %s",
                record.action,
                record.subject,
                exc,
            )
            raise HandlerFailure(
                "audit",
                f"Audit write for {record.action} failed: {exc}",
                context=record.subject,
                cause=exc,
            ) from exc
