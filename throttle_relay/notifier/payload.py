"""Incident payload construction."""

import json
import re
import time
from typing import Optional, Sequence

from throttle_relay.models.alarm import AlarmContext
from throttle_relay.models.incident import IncidentMetadata, IncidentPayload


_WHITESPACE = re.compile(r"\s+")


def make_incident_id(alarm_name: str, now_ms: Optional[int] = None) -> str:
    """Alarm name with whitespace runs collapsed to '-', plus a millisecond stamp."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{_WHITESPACE.sub('-', alarm_name)}-{now_ms}"


def build_incident_payload(
    ctx: AlarmContext,
    affected_resources: Sequence[str] = (),
    service_name: str = "DemoDevOpsAgent",
    environment: str = "production",
    now_ms: Optional[int] = None,
) -> IncidentPayload:
    """Map a firing alarm onto the canonical incident record."""
    return IncidentPayload(
        incident_id=make_incident_id(ctx.alarm_name, now_ms),
        title=f"[CloudWatch Alarm] {ctx.alarm_name}",
        description=ctx.reason,
        service=service_name,
        timestamp=ctx.timestamp,
        metadata=IncidentMetadata(
            region=ctx.region,
            environment=environment,
            alarm_name=ctx.alarm_name,
            alarm_arn=ctx.alarm_arn,
            account_id=ctx.account_id,
            affected_resources=list(affected_resources),
        ),
    )


def serialize_payload(payload: IncidentPayload) -> bytes:
    """Compact JSON encoding; these bytes are both signed and sent."""
    return json.dumps(
        payload.to_dict(),
        separators=(",", ":"),
        ensure_ascii=False,
    ).encode("utf-8")
