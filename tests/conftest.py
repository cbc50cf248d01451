"""Shared stubs for the store and the webhook transport."""

import asyncio
from typing import Callable, Dict, List, Optional

import pytest

from throttle_relay.models.write import WriteAttempt
from throttle_relay.notifier.sender import TransportResponse
from throttle_relay.store.client import StoreClient, StoreError


class StubStore(StoreClient):
    """Store whose behaviour per attempt is decided by `behaviour(attempt)`."""

    def __init__(self, behaviour: Optional[Callable[[WriteAttempt], None]] = None):
        self._behaviour = behaviour
        self.attempts: List[WriteAttempt] = []
        self.in_flight = 0
        self.peak_in_flight = 0

    async def put(self, attempt: WriteAttempt) -> None:
        self.attempts.append(attempt)
        self.in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0.01)
            if self._behaviour:
                self._behaviour(attempt)
        finally:
            self.in_flight -= 1


class StubTransport:
    """Records every request and answers with a canned response."""

    def __init__(self, status: int = 200, body: str = "ok", error: Optional[Exception] = None):
        self.status = status
        self.body = body
        self.error = error
        self.calls: List[Dict] = []

    async def __call__(self, url: str, body: bytes, headers: Dict[str, str]) -> TransportResponse:
        self.calls.append({"url": url, "body": body, "headers": headers})
        if self.error:
            raise self.error
        return TransportResponse(status=self.status, body=self.body)


def raise_store_error(kind, code: str = "SomeError", message: str = "rejected"):
    def behaviour(attempt: WriteAttempt) -> None:
        raise StoreError(kind, code, message)
    return behaviour


@pytest.fixture
def stub_store():
    return StubStore()


@pytest.fixture
def transport():
    return StubTransport()


@pytest.fixture
def alarm_event():
    return {
        "source": "aws.cloudwatch",
        "alarmArn": "arn:aws:cloudwatch:us-east-1:123456789012:alarm:demo-devops-agent-dynamodb-write-throttle",
        "accountId": "123456789012",
        "time": "2024-01-01T00:00:00Z",
        "region": "us-east-1",
        "alarmData": {
            "alarmName": "demo-devops-agent-dynamodb-write-throttle",
            "state": {
                "value": "ALARM",
                "reason": "Threshold Crossed",
                "timestamp": "2024-01-01T00:00:00Z",
            },
        },
    }
