"""Function entry points for scheduled writer and alarm notifier invocations.

Each handler builds its collaborators from the process settings and runs
one invocation. Raising is the failure signal: the writer raises when the
batch was throttled, the notifier when configuration or delivery fails.
"""

import asyncio
from typing import Any, Dict, Optional

import structlog

from throttle_relay.config import Settings, get_settings
from throttle_relay.models.alarm import AlarmNotification
from throttle_relay.notifier.dispatcher import AlarmDispatcher
from throttle_relay.notifier.sender import Transport
from throttle_relay.store.client import DynamoDBStoreClient, StoreClient
from throttle_relay.writer.driver import WriteDriver


logger = structlog.get_logger()


async def run_writer(
    settings: Settings,
    count: Optional[int] = None,
    store: Optional[StoreClient] = None,
) -> Dict[str, Any]:
    """Run one batch against `store`, or a DynamoDB client built from settings."""
    if store is not None:
        result = await WriteDriver(store, settings.writer).run_batch(count)
        return result.to_dict()

    max_connections = count or settings.writer.write_count
    async with DynamoDBStoreClient(settings.store, max_connections=max_connections) as dynamo:
        result = await WriteDriver(dynamo, settings.writer).run_batch(count)
    return result.to_dict()


async def run_notifier(
    settings: Settings,
    event: Dict[str, Any],
    transport: Optional[Transport] = None,
) -> Optional[Dict[str, Any]]:
    """Dispatch one alarm event. Returns None when the alarm is not firing."""
    dispatcher = AlarmDispatcher.from_config(settings.webhook, transport=transport)
    result = await dispatcher.dispatch(AlarmNotification.from_event(event))
    if result is None:
        return None
    return {
        "incidentId": result.incident_id,
        "dryRun": result.dry_run,
        "statusCode": result.status_code,
    }


def writer_handler(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
    """Scheduled writer invocation."""
    return asyncio.run(run_writer(get_settings()))


def notifier_handler(event: Dict[str, Any], context: Any = None) -> Optional[Dict[str, Any]]:
    """Alarm action invocation."""
    return asyncio.run(run_notifier(get_settings(), event))
