"""Incident payload model sent to the external incident agent."""

from dataclasses import dataclass, field
from typing import Dict, List


@dataclass(frozen=True)
class IncidentMetadata:
    """Service metadata block attached to an incident."""
    region: str
    environment: str
    alarm_name: str
    alarm_arn: str
    account_id: str
    affected_resources: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "region": self.region,
            "environment": self.environment,
            "affectedResources": list(self.affected_resources),
            "alarmName": self.alarm_name,
            "alarmArn": self.alarm_arn,
            "accountId": self.account_id,
        }


@dataclass(frozen=True)
class IncidentPayload:
    """
    Canonical incident record for one alarm firing.

    The incident_id is derived from the alarm name and the build time in
    milliseconds, so two builds within the same millisecond collide.
    """
    incident_id: str
    title: str
    description: str
    service: str
    timestamp: str
    metadata: IncidentMetadata
    event_type: str = "incident"
    action: str = "created"
    priority: str = "HIGH"

    @property
    def affected_resources(self) -> List[str]:
        return list(self.metadata.affected_resources)

    def to_dict(self) -> Dict:
        """Convert to the wire representation (key order is significant)."""
        return {
            "eventType": self.event_type,
            "incidentId": self.incident_id,
            "action": self.action,
            "priority": self.priority,
            "title": self.title,
            "description": self.description,
            "service": self.service,
            "timestamp": self.timestamp,
            "data": {
                "metadata": self.metadata.to_dict(),
            },
        }
