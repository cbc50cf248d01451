"""Alarm-to-incident notifier: normalizer, payload builder, signer and senders."""

from throttle_relay.notifier.dispatcher import AlarmDispatcher
from throttle_relay.notifier.normalizer import normalize
from throttle_relay.notifier.payload import build_incident_payload, serialize_payload
from throttle_relay.notifier.sender import (
    DeliveryError,
    DeliveryResult,
    DryRunSender,
    HttpWebhookSender,
    WebhookConfigError,
    WebhookSender,
    build_sender,
    send,
)
from throttle_relay.notifier.signer import sign, verify_signature

__all__ = [
    "AlarmDispatcher",
    "DeliveryError",
    "DeliveryResult",
    "DryRunSender",
    "HttpWebhookSender",
    "WebhookConfigError",
    "WebhookSender",
    "build_incident_payload",
    "build_sender",
    "normalize",
    "send",
    "serialize_payload",
    "sign",
    "verify_signature",
]
