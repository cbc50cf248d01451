"""Webhook router for receiving alarm state-change notifications."""

from typing import Any, List, Optional

import structlog
from fastapi import APIRouter, Body, HTTPException, Request
from pydantic import BaseModel, Field

from throttle_relay.models.alarm import AlarmNotification
from throttle_relay.notifier.sender import DeliveryError


logger = structlog.get_logger()

router = APIRouter()


class AlarmWebhookResponse(BaseModel):
    """Standard alarm webhook response (camelCase, like the incident payload)."""
    status: str
    message: str
    incidentIds: List[str] = Field(default_factory=list)
    statusCode: Optional[int] = None


@router.post("/alarm", response_model=AlarmWebhookResponse)
async def receive_alarm(request: Request, payload: Any = Body(default=None)):
    """
    Receive an alarm state change and relay it as a signed incident.

    The body is taken as-is: malformed or missing alarm fields are
    defaulted by the normalizer rather than rejected. The dispatch runs
    inline so delivery failures reach the caller.
    """
    dispatcher = getattr(request.app.state, "dispatcher", None)
    if dispatcher is None:
        raise HTTPException(status_code=503, detail="Alarm dispatcher not initialized")

    notification = AlarmNotification.from_event(payload)

    try:
        result = await dispatcher.dispatch(notification)
    except DeliveryError as e:
        logger.error(
            "Failed to deliver incident",
            status=e.status_code,
            error=str(e),
        )
        raise HTTPException(status_code=502, detail=str(e))

    if result is None:
        return AlarmWebhookResponse(
            status="skipped",
            message=f"Alarm state {notification.state.value} does not raise an incident",
        )

    if result.dry_run:
        return AlarmWebhookResponse(
            status="dry_run",
            message="Webhook disabled, payload logged only",
            incidentIds=[result.incident_id],
        )

    return AlarmWebhookResponse(
        status="delivered",
        message="Incident delivered",
        incidentIds=[result.incident_id],
        statusCode=result.status_code,
    )
