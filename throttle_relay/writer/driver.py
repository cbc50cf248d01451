"""Write-and-classify driver that bursts puts against a capacity-limited store."""

import asyncio
import time
import uuid
from datetime import datetime, timezone
from typing import List, Optional

import structlog

from throttle_relay.config import WriterConfig
from throttle_relay.models.write import WriteAttempt, WriteBatchResult, WriteOutcome
from throttle_relay.store.client import StoreClient, StoreError, StoreErrorKind


logger = structlog.get_logger()


class InvalidBatchSizeError(ValueError):
    """Raised when a batch is requested with a non-positive count."""


class ThrottlingDetectedError(Exception):
    """Raised after a batch in which at least one put was throttled."""

    def __init__(self, result: WriteBatchResult):
        self.result = result
        super().__init__(
            f"Throttling occurred: {result.throttled}/{result.attempted} requests were throttled"
        )


def new_batch_id() -> str:
    return f"batch-{int(time.time() * 1000)}"


def _random_suffix() -> str:
    return uuid.uuid4().hex[:12]


def build_attempts(batch_id: str, count: int, data_size: int = 900) -> List[WriteAttempt]:
    """Create `count` attempts whose keys are unique within the batch."""
    payload = b"x" * data_size
    created_at = datetime.now(timezone.utc).isoformat()
    return [
        WriteAttempt(
            batch_id=batch_id,
            index=i,
            key=f"item-{i:04d}-{_random_suffix()}",
            payload=payload,
            created_at=created_at,
        )
        for i in range(count)
    ]


class WriteDriver:
    """
    Fires a batch of independent puts at the store and classifies each result.

    All attempts are in flight at once (no concurrency cap) so the store's
    provisioned capacity is exceeded within the shortest possible window.
    """

    def __init__(self, store: StoreClient, config: Optional[WriterConfig] = None):
        self._store = store
        self._config = config or WriterConfig()

    @property
    def store(self) -> StoreClient:
        return self._store

    @property
    def config(self) -> WriterConfig:
        return self._config

    async def _attempt(self, attempt: WriteAttempt) -> WriteOutcome:
        try:
            await self._store.put(attempt)
        except StoreError as e:
            if e.kind == StoreErrorKind.CAPACITY_EXCEEDED:
                logger.error(
                    "Write throttled",
                    index=attempt.index,
                    code=e.code,
                    message=e.message,
                )
                return WriteOutcome.throttled(attempt.index, e.message)

            logger.error(
                "Write failed",
                index=attempt.index,
                kind=e.kind.value,
                code=e.code,
                message=e.message,
            )
            return WriteOutcome.failed(attempt.index, e.kind.value, e.code, e.message)
        except Exception as e:
            logger.error(
                "Write failed",
                index=attempt.index,
                kind=StoreErrorKind.UNKNOWN.value,
                code=type(e).__name__,
                message=str(e),
            )
            return WriteOutcome.failed(
                attempt.index, StoreErrorKind.UNKNOWN.value, type(e).__name__, str(e)
            )

        return WriteOutcome.success(attempt.index)

    async def run_batch(self, count: Optional[int] = None) -> WriteBatchResult:
        """
        Run one batch and return the tally.

        Raises InvalidBatchSizeError before dispatch when count <= 0, and
        ThrottlingDetectedError after every attempt has completed if any
        of them was throttled. Other failures are only tallied.
        """
        if count is None:
            count = self._config.write_count
        if count <= 0:
            raise InvalidBatchSizeError(f"Batch size must be positive, got {count}")

        batch_id = new_batch_id()
        attempts = build_attempts(batch_id, count, self._config.item_data_size)

        logger.info(
            "Starting write batch",
            batch_id=batch_id,
            count=count,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )

        outcomes = await asyncio.gather(*(self._attempt(a) for a in attempts))
        result = WriteBatchResult.from_outcomes(batch_id, outcomes)

        logger.info(
            "Write batch complete",
            batch_id=batch_id,
            attempted=result.attempted,
            succeeded=result.succeeded,
            throttled=result.throttled,
            failed=result.failed,
        )

        if result.throttled > 0:
            error = ThrottlingDetectedError(result)
            logger.error(str(error), batch_id=batch_id)
            raise error

        return result
