"""Tests for incident payload building and signing."""

import base64
import hashlib
import hmac
import json
from datetime import datetime, timezone

from throttle_relay.models.alarm import AlarmContext
from throttle_relay.notifier.payload import (
    build_incident_payload,
    make_incident_id,
    serialize_payload,
)
from throttle_relay.notifier.signer import rfc3339_now, sign, verify_signature


def make_context(**overrides):
    values = dict(
        alarm_name="demo-devops-agent-dynamodb-write-throttle",
        reason="Threshold Crossed",
        timestamp="2024-01-01T00:00:00Z",
        region="us-east-1",
        account_id="123456789012",
        alarm_arn="arn:aws:cloudwatch:us-east-1:123456789012:alarm:demo",
    )
    values.update(overrides)
    return AlarmContext(**values)


class TestIncidentPayload:
    """Test cases for build_incident_payload."""

    def test_build(self):
        payload = build_incident_payload(
            make_context(),
            affected_resources=["arn:aws:dynamodb:us-east-1:123456789012:table/demo"],
            now_ms=1700000000000,
        )

        assert payload.event_type == "incident"
        assert payload.action == "created"
        assert payload.priority == "HIGH"
        assert "demo-devops-agent-dynamodb-write-throttle" in payload.title
        assert payload.description == "Threshold Crossed"
        assert payload.service == "DemoDevOpsAgent"
        assert payload.timestamp == "2024-01-01T00:00:00Z"
        assert payload.incident_id == "demo-devops-agent-dynamodb-write-throttle-1700000000000"
        assert payload.affected_resources == ["arn:aws:dynamodb:us-east-1:123456789012:table/demo"]

    def test_empty_affected_resources(self):
        payload = build_incident_payload(make_context())
        assert payload.affected_resources == []
        assert payload.to_dict()["data"]["metadata"]["affectedResources"] == []

    def test_incident_id_collapses_whitespace(self):
        assert make_incident_id("High  write\tthrottle", now_ms=5) == "High-write-throttle-5"

    def test_to_dict_shape(self):
        data = build_incident_payload(make_context(), service_name="svc", environment="staging").to_dict()

        assert list(data.keys()) == [
            "eventType", "incidentId", "action", "priority", "title",
            "description", "service", "timestamp", "data",
        ]
        metadata = data["data"]["metadata"]
        assert metadata["environment"] == "staging"
        assert metadata["accountId"] == "123456789012"
        assert metadata["alarmName"] == "demo-devops-agent-dynamodb-write-throttle"

    def test_serialize_compact_utf8(self):
        payload = build_incident_payload(make_context(reason="Überlast"), now_ms=1)
        body = serialize_payload(payload)

        assert body.startswith(b'{"eventType":"incident","incidentId":')
        assert "Überlast".encode("utf-8") in body
        assert json.loads(body) == payload.to_dict()


class TestSigner:
    """Test cases for sign / verify_signature."""

    def test_deterministic(self):
        body = b'{"a":1}'
        assert sign("s3cr3t", body, "2024-01-01T00:00:00.000Z") == sign(b"s3cr3t", body, "2024-01-01T00:00:00.000Z")

    def test_body_change_changes_signature(self):
        ts = "2024-01-01T00:00:00.000Z"
        assert sign("s3cr3t", b'{"a":1}', ts) != sign("s3cr3t", b'{"a":2}', ts)

    def test_timestamp_change_changes_signature(self):
        body = b'{"a":1}'
        assert sign("s3cr3t", body, "2024-01-01T00:00:00.000Z") != sign("s3cr3t", body, "2024-01-01T00:00:00.001Z")

    def test_known_vector(self):
        expected = base64.b64encode(
            hmac.new(b"key", b"ts:body", hashlib.sha256).digest()
        ).decode()
        assert sign("key", b"body", "ts") == expected

    def test_verify(self):
        sig = sign("s3cr3t", b"body", "ts")
        assert verify_signature("s3cr3t", b"body", "ts", sig)
        assert not verify_signature("other", b"body", "ts", sig)
        assert not verify_signature("s3cr3t", b"body", "ts2", sig)

    def test_rfc3339_now(self):
        now = datetime(2024, 1, 1, 12, 30, 45, 123456, tzinfo=timezone.utc)
        assert rfc3339_now(now) == "2024-01-01T12:30:45.123Z"
