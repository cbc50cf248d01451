"""Alarm dispatch pipeline: normalize, build, sign and send."""

from typing import Optional, Sequence

import structlog

from throttle_relay.config import WebhookConfig
from throttle_relay.models.alarm import AlarmNotification
from throttle_relay.notifier.normalizer import normalize
from throttle_relay.notifier.payload import build_incident_payload
from throttle_relay.notifier.sender import DeliveryResult, Transport, WebhookSender, build_sender


logger = structlog.get_logger()


class AlarmDispatcher:
    """Turns one alarm notification into at most one incident delivery."""

    def __init__(
        self,
        sender: WebhookSender,
        service_name: str = "DemoDevOpsAgent",
        environment: str = "production",
        affected_resources: Sequence[str] = (),
    ):
        self._sender = sender
        self._service_name = service_name
        self._environment = environment
        self._affected_resources = list(affected_resources)

    @classmethod
    def from_config(
        cls,
        config: WebhookConfig,
        transport: Optional[Transport] = None,
    ) -> "AlarmDispatcher":
        return cls(
            sender=build_sender(config, transport=transport),
            service_name=config.service_name,
            environment=config.environment,
            affected_resources=config.affected_resources,
        )

    async def dispatch(self, notification: AlarmNotification) -> Optional[DeliveryResult]:
        """
        Process one notification.

        Returns None when the alarm is not firing. DeliveryError from the
        sender propagates to the caller.
        """
        ctx = normalize(notification)
        if ctx is None:
            return None

        payload = build_incident_payload(
            ctx,
            affected_resources=self._affected_resources,
            service_name=self._service_name,
            environment=self._environment,
        )

        result = await self._sender.send(payload)

        if not result.dry_run:
            logger.info(
                "Webhook sent successfully",
                incident_id=payload.incident_id,
                status=result.status_code,
            )
        return result
