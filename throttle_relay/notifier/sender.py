"""Webhook senders: dry-run logger and signed HTTPS delivery."""

import asyncio
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Optional

import aiohttp
import structlog

from throttle_relay.config import WebhookConfig
from throttle_relay.models.incident import IncidentPayload
from throttle_relay.notifier.payload import serialize_payload
from throttle_relay.notifier.signer import rfc3339_now, sign


logger = structlog.get_logger()

TIMESTAMP_HEADER = "x-amzn-event-timestamp"
SIGNATURE_HEADER = "x-amzn-event-signature"


class WebhookConfigError(ValueError):
    """Raised when delivery is enabled without a destination or secret."""


class DeliveryError(Exception):
    """Exception raised when the webhook destination rejects or is unreachable."""

    def __init__(
        self,
        status_code: Optional[int] = None,
        response_body: str = "",
        error: Optional[str] = None,
    ):
        self.status_code = status_code
        self.response_body = response_body
        self.error = error
        if status_code is not None:
            message = f"Webhook failed with status {status_code}: {response_body}"
        else:
            message = f"Webhook request error: {error}"
        super().__init__(message)


@dataclass
class TransportResponse:
    """Status and body returned by a transport."""
    status: int
    body: str = ""


@dataclass
class DeliveryResult:
    """Outcome of a successful send (or a dry run)."""
    dry_run: bool
    body: bytes
    incident_id: str = ""
    status_code: Optional[int] = None
    response_body: str = ""


Transport = Callable[[str, bytes, Dict[str, str]], Awaitable[TransportResponse]]


async def aiohttp_transport(url: str, body: bytes, headers: Dict[str, str]) -> TransportResponse:
    """POST the body with aiohttp using the library's default timeout."""
    async with aiohttp.ClientSession() as session:
        async with session.post(url, data=body, headers=headers) as response:
            text = await response.text()
            return TransportResponse(status=response.status, body=text)


class WebhookSender(ABC):
    """Delivers incident payloads."""

    @abstractmethod
    async def send(self, payload: IncidentPayload) -> DeliveryResult:
        """Send one payload. Raises DeliveryError on failure."""


class DryRunSender(WebhookSender):
    """Logs the payload that would have been sent; performs no network I/O."""

    async def send(self, payload: IncidentPayload) -> DeliveryResult:
        body = serialize_payload(payload)
        logger.info(
            "Webhook is DISABLED, would have sent payload",
            incident_id=payload.incident_id,
            payload=json.dumps(payload.to_dict(), indent=2, ensure_ascii=False),
        )
        return DeliveryResult(dry_run=True, body=body, incident_id=payload.incident_id)


class HttpWebhookSender(WebhookSender):
    """
    Signs and POSTs payloads to the configured destination.

    The configuration is validated on construction so a missing url or
    secret fails before any request is attempted. Single attempt, no retry.
    """

    def __init__(self, config: WebhookConfig, transport: Optional[Transport] = None):
        if not config.url:
            logger.error("Webhook url is not configured")
            raise WebhookConfigError("Webhook url is required when the webhook is enabled")
        if not config.secret:
            logger.error("Webhook secret is not configured")
            raise WebhookConfigError("Webhook secret is required when the webhook is enabled")

        self._config = config
        self._transport = transport or aiohttp_transport

    def build_headers(self, body: bytes, timestamp: str) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Content-Length": str(len(body)),
            TIMESTAMP_HEADER: timestamp,
            SIGNATURE_HEADER: sign(self._config.secret, body, timestamp),
        }

    async def send(self, payload: IncidentPayload) -> DeliveryResult:
        body = serialize_payload(payload)
        headers = self.build_headers(body, rfc3339_now())

        logger.info(
            "Sending webhook payload",
            incident_id=payload.incident_id,
            url=self._config.url,
            body_length=len(body),
        )

        try:
            response = await self._transport(self._config.url, body, headers)
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            logger.error("Webhook request error", incident_id=payload.incident_id, error=str(e))
            raise DeliveryError(error=str(e) or type(e).__name__) from e

        logger.info(
            "Webhook response",
            incident_id=payload.incident_id,
            status=response.status,
            body=response.body,
        )

        if not 200 <= response.status < 300:
            raise DeliveryError(status_code=response.status, response_body=response.body)

        return DeliveryResult(
            dry_run=False,
            body=body,
            incident_id=payload.incident_id,
            status_code=response.status,
            response_body=response.body,
        )


def build_sender(config: WebhookConfig, transport: Optional[Transport] = None) -> WebhookSender:
    """Pick the sender variant once, from the enabled flag."""
    if not config.enabled:
        return DryRunSender()
    return HttpWebhookSender(config, transport=transport)


async def send(
    config: WebhookConfig,
    payload: IncidentPayload,
    transport: Optional[Transport] = None,
) -> DeliveryResult:
    """Validate, sign and deliver a single payload."""
    return await build_sender(config, transport=transport).send(payload)
