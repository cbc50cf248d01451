"""Tests for AlarmNotification and the alarm normalizer."""

import json
from pathlib import Path

import pytest

from throttle_relay.models.alarm import AlarmNotification, AlarmState
from throttle_relay.notifier.normalizer import normalize


class TestAlarmNotification:
    """Test cases for AlarmNotification model."""

    def test_from_event(self, alarm_event):
        """Test creating a notification from an alarm event."""
        notification = AlarmNotification.from_event(alarm_event)

        assert notification.alarm_name == "demo-devops-agent-dynamodb-write-throttle"
        assert notification.state == AlarmState.ALARM
        assert notification.reason == "Threshold Crossed"
        assert notification.state_timestamp == "2024-01-01T00:00:00Z"
        assert notification.region == "us-east-1"
        assert notification.account_id == "123456789012"
        assert notification.alarm_arn.endswith(":alarm:demo-devops-agent-dynamodb-write-throttle")

    def test_from_empty_event(self):
        notification = AlarmNotification.from_event({})

        assert notification.alarm_name is None
        assert notification.state == AlarmState.UNKNOWN
        assert notification.reason is None

    def test_unrecognized_state(self):
        notification = AlarmNotification.from_event({"alarmData": {"state": {"value": "PENDING"}}})
        assert notification.state == AlarmState.UNKNOWN

    def test_bare_state_string(self):
        notification = AlarmNotification.from_event({"alarmData": {"alarmName": "a", "state": "ALARM"}})

        assert notification.state == AlarmState.ALARM
        assert notification.alarm_name == "a"

    @pytest.mark.parametrize("alarm_data", ["oops", 42, ["a"], True])
    def test_non_object_alarm_data(self, alarm_data):
        notification = AlarmNotification.from_event({"alarmData": alarm_data, "region": "eu-west-1"})

        assert notification.state == AlarmState.UNKNOWN
        assert notification.alarm_name is None
        assert notification.region == "eu-west-1"

    @pytest.mark.parametrize("event", [None, "oops", [], 5])
    def test_non_object_event(self, event):
        assert AlarmNotification.from_event(event) == AlarmNotification()

    def test_non_string_fields(self):
        notification = AlarmNotification.from_event({
            "accountId": 123456789012,
            "alarmArn": {"arn": "x"},
            "alarmData": {
                "alarmName": 123,
                "state": {"value": 1, "reason": None, "timestamp": False},
            },
        })

        assert notification.alarm_name == "123"
        assert notification.account_id == "123456789012"
        assert notification.alarm_arn is None
        assert notification.reason is None
        assert notification.state_timestamp is None
        assert notification.state == AlarmState.UNKNOWN

    def test_from_sample_fixture(self):
        """Test parsing the sample alarm fixture."""
        fixture_path = Path(__file__).parent / "fixtures" / "sample_alarm.json"

        with open(fixture_path) as f:
            event = json.load(f)

        notification = AlarmNotification.from_event(event)

        assert notification.state == AlarmState.ALARM
        assert notification.alarm_name == "demo-devops-agent-dynamodb-write-throttle"


class TestNormalize:
    """Test cases for the normalizer."""

    def test_alarm_state_proceeds(self, alarm_event):
        ctx = normalize(AlarmNotification.from_event(alarm_event))

        assert ctx is not None
        assert ctx.alarm_name == "demo-devops-agent-dynamodb-write-throttle"
        assert ctx.reason == "Threshold Crossed"
        assert ctx.timestamp == "2024-01-01T00:00:00Z"

    @pytest.mark.parametrize("state", [AlarmState.OK, AlarmState.INSUFFICIENT_DATA, AlarmState.UNKNOWN])
    def test_non_alarm_states_skip(self, state):
        assert normalize(AlarmNotification(alarm_name="a", state=state)) is None

    def test_defaults(self):
        ctx = normalize(AlarmNotification(state=AlarmState.ALARM))

        assert ctx.alarm_name == "Unknown Alarm"
        assert ctx.reason == "No reason provided"
        assert ctx.region == "us-east-1"
        assert ctx.account_id == "unknown"
        assert ctx.alarm_arn == ""
        assert ctx.timestamp.endswith("Z")

    def test_malformed_fields_defaulted(self):
        raw = AlarmNotification.from_event({"alarmData": {"alarmName": ["x"], "state": {"value": "alarm", "reason": {}}}})
        ctx = normalize(raw)

        assert ctx.alarm_name == "Unknown Alarm"
        assert ctx.reason == "No reason provided"
