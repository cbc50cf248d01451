"""Key-value store client used by the write driver."""

from abc import ABC, abstractmethod
from contextlib import AsyncExitStack
from enum import Enum
from typing import Optional

import structlog
from aiobotocore.config import AioConfig
from aiobotocore.session import get_session
from botocore.exceptions import BotoCoreError, ClientError

from throttle_relay.config import StoreConfig
from throttle_relay.models.write import WriteAttempt


logger = structlog.get_logger()


class StoreErrorKind(str, Enum):
    """Closed set of store failure kinds the driver classifies on."""
    CAPACITY_EXCEEDED = "capacity_exceeded"
    THROTTLED_REQUEST = "throttled_request"
    RESOURCE_NOT_FOUND = "resource_not_found"
    VALIDATION = "validation"
    ACCESS_DENIED = "access_denied"
    TRANSPORT = "transport"
    UNKNOWN = "unknown"


# DynamoDB error codes -> error kind
DYNAMODB_ERROR_KINDS = {
    "ProvisionedThroughputExceededException": StoreErrorKind.CAPACITY_EXCEEDED,
    "ThrottlingException": StoreErrorKind.THROTTLED_REQUEST,
    "RequestLimitExceeded": StoreErrorKind.THROTTLED_REQUEST,
    "ResourceNotFoundException": StoreErrorKind.RESOURCE_NOT_FOUND,
    "ValidationException": StoreErrorKind.VALIDATION,
    "AccessDeniedException": StoreErrorKind.ACCESS_DENIED,
    "UnrecognizedClientException": StoreErrorKind.ACCESS_DENIED,
}


class StoreError(Exception):
    """Exception raised when a put is rejected by the store."""

    def __init__(self, kind: StoreErrorKind, code: str, message: str):
        self.kind = kind
        self.code = code
        self.message = message
        super().__init__(f"{code}: {message}")


class StoreClient(ABC):
    """Store adapter contract: put succeeds or raises StoreError."""

    # Most puts the client can have in flight at once; None means unbounded
    max_concurrency: Optional[int] = None

    @abstractmethod
    async def put(self, attempt: WriteAttempt) -> None:
        """Write one item. Raises StoreError on any rejection."""


def classify_client_error(error: ClientError) -> StoreError:
    """Map a botocore ClientError onto a StoreError."""
    details = error.response.get("Error", {})
    code = details.get("Code", "Unknown")
    message = details.get("Message", str(error))
    kind = DYNAMODB_ERROR_KINDS.get(code, StoreErrorKind.UNKNOWN)
    return StoreError(kind, code, message)


class DynamoDBStoreClient(StoreClient):
    """
    DynamoDB adapter built on aiobotocore.

    Retries are disabled so every put is a single attempt, and the
    connection pool is sized to the batch so a whole batch can be in
    flight at once. Use as an async context manager.
    """

    def __init__(self, config: StoreConfig, max_connections: int = 50):
        self._config = config
        self._max_connections = max(1, max_connections)
        self._exit_stack: Optional[AsyncExitStack] = None
        self._client = None

    @property
    def max_concurrency(self) -> int:
        return self._max_connections

    @property
    def table_name(self) -> str:
        return self._config.table_name

    async def __aenter__(self) -> "DynamoDBStoreClient":
        session = get_session()
        aio_config = AioConfig(
            retries={"total_max_attempts": 1, "mode": "standard"},
            max_pool_connections=self._max_connections,
        )
        self._exit_stack = AsyncExitStack()
        self._client = await self._exit_stack.enter_async_context(
            session.create_client(
                "dynamodb",
                region_name=self._config.region,
                endpoint_url=self._config.endpoint_url,
                config=aio_config,
            )
        )
        logger.debug(
            "Created DynamoDB client",
            table=self._config.table_name,
            region=self._config.region,
            max_connections=self._max_connections,
        )
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if self._exit_stack is not None:
            await self._exit_stack.aclose()
        self._exit_stack = None
        self._client = None

    async def put(self, attempt: WriteAttempt) -> None:
        if self._client is None:
            raise RuntimeError("DynamoDBStoreClient used outside of 'async with'")

        item = {
            "pk": {"S": attempt.batch_id},
            "sk": {"S": attempt.key},
            "data": {"S": attempt.payload.decode("utf-8")},
            "timestamp": {"S": attempt.created_at},
            "batchId": {"S": attempt.batch_id},
            "itemIndex": {"N": str(attempt.index)},
        }

        try:
            await self._client.put_item(TableName=self._config.table_name, Item=item)
        except ClientError as e:
            raise classify_client_error(e) from e
        except BotoCoreError as e:
            raise StoreError(StoreErrorKind.TRANSPORT, type(e).__name__, str(e)) from e
