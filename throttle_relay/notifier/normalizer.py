"""Alarm event normalization."""

from typing import Optional

import structlog

from throttle_relay.models.alarm import AlarmContext, AlarmNotification, AlarmState
from throttle_relay.notifier.signer import rfc3339_now


logger = structlog.get_logger()

DEFAULT_ALARM_NAME = "Unknown Alarm"
DEFAULT_REASON = "No reason provided"
DEFAULT_ACCOUNT_ID = "unknown"
DEFAULT_REGION = "us-east-1"


def normalize(raw: AlarmNotification) -> Optional[AlarmContext]:
    """
    Apply defaults to an alarm notification.

    Returns None (skip) for any state other than ALARM. Missing fields are
    never errors.
    """
    alarm_name = raw.alarm_name or DEFAULT_ALARM_NAME
    reason = raw.reason or DEFAULT_REASON

    logger.info(
        "Received alarm notification",
        alarm_name=alarm_name,
        state=raw.state.value,
        reason=reason,
    )

    if raw.state != AlarmState.ALARM:
        logger.info("Skipping non-ALARM state", alarm_name=alarm_name, state=raw.state.value)
        return None

    return AlarmContext(
        alarm_name=alarm_name,
        reason=reason,
        timestamp=raw.state_timestamp or rfc3339_now(),
        region=raw.region or DEFAULT_REGION,
        account_id=raw.account_id or DEFAULT_ACCOUNT_ID,
        alarm_arn=raw.alarm_arn or "",
    )
