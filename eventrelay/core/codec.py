"""Event envelope codec — typed events to canonical JSON envelopes and back.

Encoding dumps the event by its wire aliases into compact, key-sorted JSON
and tags it with the variant name.  Decoding looks the tag up in the
event registry and validates the payload against that variant; it fails
closed, so a missing or mistyped field is an error and never a
zero-filled default.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, ValidationError

from eventrelay.models.envelopes import Envelope
from eventrelay.models.events import EVENT_TYPE_MAP, DomainEvent


class DecodeError(ValueError):
    """Raised when an envelope cannot be turned back into an event."""

    def __init__(self, type_tag: str, message: str) -> None:
        super().__init__(message)
        self.type_tag = type_tag


class UnknownEventType(DecodeError):
    """No event variant is registered under the type tag."""

    def __init__(self, type_tag: str) -> None:
        super().__init__(type_tag, f"Unknown event type: {type_tag!r}")


class MalformedPayload(DecodeError):
    """The payload does not parse into the tagged variant."""


class NamingConvention(str, Enum):
    """Wire naming for event fields."""

    CAMEL = "camel"  # userId, createdAt
    SNAKE = "snake"  # user_id, created_at


class CodecConfig(BaseModel):
    """Explicit codec settings, passed to each ``EventCodec``."""

    model_config = ConfigDict(frozen=True)

    naming: NamingConvention = NamingConvention.CAMEL
    verify_on_encode: bool = True
    forbid_extra_fields: bool = False


def canonical_json_bytes(obj: Any) -> bytes:
    """Produce canonical JSON bytes — deterministic, sorted, compact."""
    return json.dumps(
        obj, sort_keys=True, separators=(",", ":"), ensure_ascii=True
    ).encode("utf-8")


class EventCodec:
    """Encodes and decodes domain events.

    Parameters
    ----------
    config:
        Naming and strictness settings.  Defaults to camelCase with
        round-trip verification on encode.
    registry:
        Type tag to event class mapping.  Defaults to ``EVENT_TYPE_MAP``.
    """

    def __init__(
        self,
        config: CodecConfig | None = None,
        registry: Mapping[str, type[DomainEvent]] | None = None,
    ) -> None:
        self._config = config or CodecConfig()
        self._registry = dict(registry if registry is not None else EVENT_TYPE_MAP)

    @property
    def config(self) -> CodecConfig:
        return self._config

    def is_registered(self, type_tag: str) -> bool:
        return type_tag in self._registry

    # ------------------------------------------------------------------
    # Encode
    # ------------------------------------------------------------------

    def encode(self, event: DomainEvent) -> Envelope:
        """Serialize *event* into an envelope tagged with its variant name."""
        type_tag = type(event).type_tag()
        if type_tag not in self._registry:
            raise UnknownEventType(type_tag)

        by_alias = self._config.naming is NamingConvention.CAMEL
        fields = event.model_dump(mode="json", by_alias=by_alias)
        envelope = Envelope(type_tag=type_tag, payload=canonical_json_bytes(fields))

        if self._config.verify_on_encode:
            decoded = self.decode(envelope.type_tag, envelope.payload)
            if decoded != event:
                raise MalformedPayload(
                    type_tag, f"{type_tag} payload does not round-trip"
                )
        return envelope

    # ------------------------------------------------------------------
    # Decode
    # ------------------------------------------------------------------

    def decode(self, type_tag: str, payload: bytes | str) -> DomainEvent:
        """Deserialize *payload* as the event variant named by *type_tag*.

        Raises
        ------
        UnknownEventType
            If no variant is registered under *type_tag*.
        MalformedPayload
            If the payload is not a JSON object holding every required
            field of the variant with the right type.
        """
        model_cls = self._registry.get(type_tag)
        if model_cls is None:
            raise UnknownEventType(type_tag)

        if isinstance(payload, bytes):
            try:
                payload = payload.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise MalformedPayload(type_tag, f"Payload is not UTF-8: {exc}") from exc

        try:
            data = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise MalformedPayload(type_tag, f"Invalid JSON: {exc}") from exc

        if not isinstance(data, dict):
            raise MalformedPayload(
                type_tag,
                f"{type_tag} payload must be a JSON object, got {type(data).__name__}",
            )

        accepted = self._accepted_names(model_cls)
        foreign = sorted(set(data) & (self._all_names(model_cls) - accepted))
        if foreign:
            raise MalformedPayload(
                type_tag,
                f"{type_tag} payload uses field names outside the "
                f"{self._config.naming.value} convention: {foreign}",
            )

        if self._config.forbid_extra_fields:
            extra = sorted(set(data) - accepted)
            if extra:
                raise MalformedPayload(
                    type_tag, f"{type_tag} payload has unexpected fields: {extra}"
                )

        try:
            return model_cls.model_validate(data)
        except ValidationError as exc:
            raise MalformedPayload(
                type_tag, f"{type_tag} payload validation failed: {exc}"
            ) from exc

    def _accepted_names(self, model_cls: type[DomainEvent]) -> set[str]:
        if self._config.naming is NamingConvention.CAMEL:
            return {info.alias or name for name, info in model_cls.model_fields.items()}
        return set(model_cls.model_fields)

    @staticmethod
    def _all_names(model_cls: type[DomainEvent]) -> set[str]:
        names = set(model_cls.model_fields)
        names.update(info.alias for info in model_cls.model_fields.values() if info.alias)
        return names
