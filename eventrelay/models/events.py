"""Domain events published to the broker.

The set of variants is closed: every event class is listed in
``EVENT_TYPE_MAP`` under its type tag (the class name).  Events are frozen
Pydantic models whose wire names are lowerCamelCase aliases of the Python
field names (``user_id`` -> ``userId``).
"""

from __future__ import annotations

import re
from datetime import datetime
from decimal import Decimal
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, StrictInt, StrictStr, field_validator
from pydantic.alias_generators import to_camel


_ISO_DATETIME = re.compile(
    r"\d{4}-\d{2}-\d{2}[Tt]\d{2}:\d{2}(:\d{2}(\.\d+)?)?([Zz]|[+-]\d{2}:?\d{2})?"
)


def _require_iso_datetime(text: str) -> str:
    """Accept only a full ISO-8601 date-time (date, ``T``, time, optional offset)."""
    if not _ISO_DATETIME.fullmatch(text):
        raise ValueError(f"createdAt must be an ISO-8601 date-time, got {text!r}")
    return text


class DomainEvent(BaseModel):
    """Base class for every event published to an external broker.

    Subclasses set ``subject_field`` to the field that identifies the
    entity the event is about, so failures can be reported without
    re-reading the payload.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    subject_field: ClassVar[str] = ""

    @classmethod
    def type_tag(cls) -> str:
        """The broker-facing type name of this event variant."""
        return cls.__name__

    @property
    def subject(self) -> dict[str, Any]:
        """Identifying field of this event, keyed by its wire name."""
        if not self.subject_field:
            return {}
        return {to_camel(self.subject_field): getattr(self, self.subject_field)}

    @field_validator("created_at", mode="before", check_fields=False)
    @classmethod
    def _require_timestamp_string(cls, value: Any) -> Any:
        # Lax parsing would read numbers and digit strings as unix time,
        # and a bare date as midnight.
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            return _require_iso_datetime(value)
        raise ValueError("createdAt must be an ISO-8601 timestamp string")


class UserCreatedEvent(DomainEvent):
    """Raised when a new user is persisted."""

    subject_field: ClassVar[str] = "user_id"

    user_id: StrictInt
    email: StrictStr
    created_at: datetime


class ProductCreatedEvent(DomainEvent):
    """Raised when a new product is persisted."""

    subject_field: ClassVar[str] = "product_id"

    product_id: StrictInt
    name: StrictStr
    sku: StrictStr
    supplier: StrictStr
    price: Decimal
    created_at: datetime


# Registry for deserialization by type tag
EVENT_TYPE_MAP: dict[str, type[DomainEvent]] = {
    cls.type_tag(): cls for cls in (UserCreatedEvent, ProductCreatedEvent)
}
