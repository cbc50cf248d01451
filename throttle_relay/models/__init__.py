"""Data models module - write attempts, alarm notifications, incident payloads."""

from throttle_relay.models.write import (
    OutcomeStatus,
    WriteAttempt,
    WriteOutcome,
    WriteBatchResult,
)
from throttle_relay.models.alarm import AlarmNotification, AlarmContext, AlarmState
from throttle_relay.models.incident import IncidentPayload, IncidentMetadata

__all__ = [
    # Writer models
    "OutcomeStatus",
    "WriteAttempt",
    "WriteOutcome",
    "WriteBatchResult",
    # Alarm models
    "AlarmNotification",
    "AlarmContext",
    "AlarmState",
    # Incident models
    "IncidentPayload",
    "IncidentMetadata",
]
