"""Tests for EventCodec — encoding, fail-closed decoding, codec settings."""

from __future__ import annotations

import json
from decimal import Decimal

import pytest

from eventrelay.core.codec import (
    CodecConfig,
    DecodeError,
    EventCodec,
    MalformedPayload,
    NamingConvention,
    UnknownEventType,
)
from eventrelay.models.events import EVENT_TYPE_MAP, DomainEvent, UserCreatedEvent


class TestEncode:
    def test_type_tag_is_variant_name(self, codec, make_user_event, make_product_event):
        assert codec.encode(make_user_event()).type_tag == "UserCreatedEvent"
        assert codec.encode(make_product_event()).type_tag == "ProductCreatedEvent"

    def test_payload_uses_lower_camel_case(self, codec, make_product_event):
        payload = json.loads(codec.encode(make_product_event()).payload)
        assert set(payload) == {
            "productId", "name", "sku", "supplier", "price", "createdAt",
        }

    def test_payload_is_compact(self, codec, make_user_event):
        raw = codec.encode(make_user_event()).payload
        assert b" " not in raw
        assert b"\n" not in raw

    def test_payload_is_deterministic(self, codec, make_user_event):
        assert codec.encode(make_user_event()).payload == codec.encode(make_user_event()).payload

    def test_attributes_carry_event_type(self, codec, make_user_event):
        envelope = codec.encode(make_user_event())
        assert envelope.attributes == {"eventType": "UserCreatedEvent"}

    def test_unregistered_event_rejected(self):
        class OrderShippedEvent(DomainEvent):
            order_id: int

        codec = EventCodec(registry=EVENT_TYPE_MAP)
        with pytest.raises(UnknownEventType):
            codec.encode(OrderShippedEvent(order_id=3))


class TestRoundTrip:
    def test_user_created_round_trips(self, codec, make_user_event):
        event = make_user_event(user_id=1, email="a@b.com")
        envelope = codec.encode(event)
        assert codec.decode(envelope.type_tag, envelope.payload) == event

    def test_product_created_round_trips(self, codec, make_product_event):
        event = make_product_event(price=Decimal("1234.50"))
        envelope = codec.encode(event)
        decoded = codec.decode(envelope.type_tag, envelope.payload)
        assert decoded == event
        assert decoded.price == Decimal("1234.50")

    def test_decode_accepts_str_payload(self, codec, make_user_event):
        envelope = codec.encode(make_user_event())
        assert codec.decode(envelope.type_tag, envelope.message) == make_user_event()


class TestDecodeFailsClosed:
    def _payload(self, **fields) -> str:
        base = {"userId": 1, "email": "a@b.com", "createdAt": "2026-03-14T09:26:53Z"}
        base.update(fields)
        return json.dumps({k: v for k, v in base.items() if v is not ...})

    def test_unknown_type_tag(self, codec):
        with pytest.raises(UnknownEventType, match="UnknownKind"):
            codec.decode("UnknownKind", "{}")

    @pytest.mark.parametrize("missing", ["userId", "email", "createdAt"])
    def test_missing_required_field(self, codec, missing):
        with pytest.raises(MalformedPayload, match="validation failed"):
            codec.decode("UserCreatedEvent", self._payload(**{missing: ...}))

    def test_string_user_id_is_not_coerced(self, codec):
        with pytest.raises(MalformedPayload):
            codec.decode("UserCreatedEvent", self._payload(userId="1"))

    def test_null_email_is_not_defaulted(self, codec):
        with pytest.raises(MalformedPayload):
            codec.decode("UserCreatedEvent", self._payload(email=None))

    def test_numeric_timestamp_rejected(self, codec):
        with pytest.raises(MalformedPayload):
            codec.decode("UserCreatedEvent", self._payload(createdAt=1700000000))

    def test_unparseable_timestamp_rejected(self, codec):
        with pytest.raises(MalformedPayload):
            codec.decode("UserCreatedEvent", self._payload(createdAt="yesterday"))

    def test_invalid_json(self, codec):
        with pytest.raises(MalformedPayload, match="Invalid JSON"):
            codec.decode("UserCreatedEvent", b"not json {{{")

    def test_json_array_rejected(self, codec):
        with pytest.raises(MalformedPayload, match="must be a JSON object"):
            codec.decode("UserCreatedEvent", "[1, 2, 3]")

    def test_non_utf8_bytes_rejected(self, codec):
        with pytest.raises(MalformedPayload, match="not UTF-8"):
            codec.decode("UserCreatedEvent", b"\xff\xfe")

    def test_decode_errors_share_base(self):
        assert issubclass(UnknownEventType, DecodeError)
        assert issubclass(MalformedPayload, DecodeError)
        assert issubclass(DecodeError, ValueError)

    def test_error_carries_type_tag(self, codec):
        with pytest.raises(MalformedPayload) as excinfo:
            codec.decode("UserCreatedEvent", "{}")
        assert excinfo.value.type_tag == "UserCreatedEvent"


class TestCodecConfig:
    def test_extra_fields_ignored_by_default(self, codec):
        payload = json.dumps({
            "userId": 1, "email": "a@b.com",
            "createdAt": "2026-03-14T09:26:53Z", "source": "api",
        })
        assert isinstance(codec.decode("UserCreatedEvent", payload), UserCreatedEvent)

    def test_forbid_extra_fields(self):
        codec = EventCodec(CodecConfig(forbid_extra_fields=True))
        payload = json.dumps({
            "userId": 1, "email": "a@b.com",
            "createdAt": "2026-03-14T09:26:53Z", "source": "api",
        })
        with pytest.raises(MalformedPayload, match="unexpected fields"):
            codec.decode("UserCreatedEvent", payload)

    def test_snake_case_naming(self, make_user_event):
        codec = EventCodec(CodecConfig(naming=NamingConvention.SNAKE))
        envelope = codec.encode(make_user_event())
        assert set(json.loads(envelope.payload)) == {"user_id", "email", "created_at"}
        assert codec.decode(envelope.type_tag, envelope.payload) == make_user_event()

    def test_config_is_frozen(self):
        config = CodecConfig()
        with pytest.raises(Exception):
            config.verify_on_encode = False
