"""Transport envelopes — the outbound envelope and the inbound notification.

``Envelope`` is what the codec produces for the publisher: canonical JSON
payload bytes plus the type tag.  ``Notification`` is one unit of inbound
broker delivery handed to the batch coordinator.  Both are frozen.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

EVENT_TYPE_ATTRIBUTE = "eventType"
UNKNOWN_EVENT_TYPE = "Unknown"


class Envelope(BaseModel):
    """A serialized event plus the tag naming its variant."""

    model_config = ConfigDict(frozen=True)

    type_tag: str
    payload: bytes

    @property
    def message(self) -> str:
        """The payload as the UTF-8 string sent over the wire."""
        return self.payload.decode("utf-8")

    @property
    def attributes(self) -> dict[str, str]:
        """Broker message attributes that accompany this envelope."""
        return {EVENT_TYPE_ATTRIBUTE: self.type_tag}


class Notification(BaseModel):
    """A single broker delivery presented to the dispatch pipeline."""

    model_config = ConfigDict(frozen=True)

    delivery_id: str
    message: str
    attributes: dict[str, str] = {}

    @property
    def type_tag(self) -> str:
        """The ``eventType`` attribute, or ``"Unknown"`` when absent."""
        return self.attributes.get(EVENT_TYPE_ATTRIBUTE) or UNKNOWN_EVENT_TYPE

    # ------------------------------------------------------------------
    # SNS record shape
    # ------------------------------------------------------------------

    @classmethod
    def from_sns_record(cls, record: dict[str, Any]) -> Notification:
        """Build a notification from one ``Records[]`` entry of an SNS event.

        Only string-valued message attributes are kept; each attribute is
        an object of the form ``{"Type": "String", "Value": "..."}``.
        """
        sns = record.get("Sns") or {}
        attributes: dict[str, str] = {}
        for name, attr in (sns.get("MessageAttributes") or {}).items():
            if isinstance(attr, dict) and isinstance(attr.get("Value"), str):
                attributes[name] = attr["Value"]
        return cls(
            delivery_id=str(sns.get("MessageId", "")),
            message=sns.get("Message") or "",
            attributes=attributes,
        )

    def to_sns_record(self) -> dict[str, Any]:
        """Render this notification in the SNS ``Records[]`` entry shape."""
        return {
            "EventSource": "aws:sns",
            "Sns": {
                "MessageId": self.delivery_id,
                "Message": self.message,
                "MessageAttributes": {
                    name: {"Type": "String", "Value": value}
                    for name, value in self.attributes.items()
                },
            },
        }


def parse_sns_event(event: dict[str, Any]) -> list[Notification]:
    """Convert a raw SNS-triggered invocation payload into notifications.

    Record order is preserved.  A payload without ``Records`` is an empty
    batch.
    """
    records = event.get("Records") or []
    if not isinstance(records, list):
        raise ValueError(
            f"SNS event Records must be a list, got {type(records).__name__}"
        )
    return [Notification.from_sns_record(record) for record in records]
