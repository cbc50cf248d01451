"""Alarm notification models for monitoring-system alarm state changes."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class AlarmState(str, Enum):
    """Alarm state values."""
    ALARM = "ALARM"
    OK = "OK"
    INSUFFICIENT_DATA = "INSUFFICIENT_DATA"
    UNKNOWN = "UNKNOWN"


def _as_dict(value: Any) -> Dict[str, Any]:
    """Malformed (non-object) blocks are treated as absent."""
    return value if isinstance(value, dict) else {}


def _as_text(value: Any) -> Optional[str]:
    """Strings pass through, numbers are stringified, anything else is absent."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str) and value:
        return value
    return None


@dataclass(frozen=True)
class AlarmNotification:
    """
    Alarm state-change notification as delivered by the monitoring system.

    Fields that were absent from the event stay None; defaults are
    applied by the normalizer, not here.
    """
    alarm_name: Optional[str] = None
    state: AlarmState = AlarmState.UNKNOWN
    reason: Optional[str] = None
    state_timestamp: Optional[str] = None
    region: Optional[str] = None
    account_id: Optional[str] = None
    alarm_arn: Optional[str] = None

    @classmethod
    def from_event(cls, event: Any) -> "AlarmNotification":
        """
        Create an AlarmNotification from an alarm state-change event.

        Expected format:
        {
            "source": "aws.cloudwatch",
            "alarmArn": "arn:aws:cloudwatch:...:alarm:name",
            "accountId": "123456789012",
            "time": "2024-01-01T00:00:00Z",
            "region": "us-east-1",
            "alarmData": {
                "alarmName": "...",
                "state": {"value": "ALARM", "reason": "...", "timestamp": "..."},
                "previousState": {...},
                "configuration": {...}
            }
        }
        """
        event = _as_dict(event)
        alarm_data = _as_dict(event.get("alarmData"))
        raw_state = alarm_data.get("state")
        if isinstance(raw_state, str):
            # Bare state string, e.g. {"state": "ALARM"}
            raw_state = {"value": raw_state}
        state_data = _as_dict(raw_state)

        state = AlarmState.UNKNOWN
        state_value = _as_text(state_data.get("value"))
        if state_value:
            try:
                state = AlarmState(state_value.upper())
            except ValueError:
                pass  # Unrecognized states never fire

        return cls(
            alarm_name=_as_text(alarm_data.get("alarmName")),
            state=state,
            reason=_as_text(state_data.get("reason")),
            state_timestamp=_as_text(state_data.get("timestamp")),
            region=_as_text(event.get("region")),
            account_id=_as_text(event.get("accountId")),
            alarm_arn=_as_text(event.get("alarmArn")),
        )


@dataclass(frozen=True)
class AlarmContext:
    """Normalized, fully-defaulted data of an alarm that is firing."""
    alarm_name: str
    reason: str
    timestamp: str
    region: str
    account_id: str
    alarm_arn: str
