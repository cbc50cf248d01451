"""Write attempt and outcome models for the write-and-classify driver."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Optional


class OutcomeStatus(str, Enum):
    """Classification of a single write attempt."""
    SUCCESS = "success"
    THROTTLED = "throttled"
    FAILED = "failed"


@dataclass(frozen=True)
class WriteAttempt:
    """A single put issued by the driver. Owned by the attempt's task."""
    batch_id: str
    index: int
    key: str
    payload: bytes
    created_at: str


@dataclass(frozen=True)
class WriteOutcome:
    """
    Result of one write attempt.

    Exactly one of the three variants: SUCCESS, THROTTLED (with reason)
    or FAILED (with the store's error kind/code and message).
    """
    index: int
    status: OutcomeStatus
    reason: str = ""
    error_kind: Optional[str] = None
    error_code: Optional[str] = None

    @classmethod
    def success(cls, index: int) -> "WriteOutcome":
        return cls(index=index, status=OutcomeStatus.SUCCESS)

    @classmethod
    def throttled(cls, index: int, reason: str) -> "WriteOutcome":
        return cls(index=index, status=OutcomeStatus.THROTTLED, reason=reason)

    @classmethod
    def failed(cls, index: int, kind: str, code: str, message: str) -> "WriteOutcome":
        return cls(
            index=index,
            status=OutcomeStatus.FAILED,
            reason=message,
            error_kind=kind,
            error_code=code,
        )


@dataclass(frozen=True)
class WriteBatchResult:
    """Aggregated tally of a batch. attempted == succeeded + throttled + failed."""
    batch_id: str
    attempted: int
    succeeded: int
    throttled: int
    failed: int

    @classmethod
    def from_outcomes(cls, batch_id: str, outcomes: Iterable[WriteOutcome]) -> "WriteBatchResult":
        counts = {status: 0 for status in OutcomeStatus}
        for outcome in outcomes:
            counts[outcome.status] += 1
        return cls(
            batch_id=batch_id,
            attempted=sum(counts.values()),
            succeeded=counts[OutcomeStatus.SUCCESS],
            throttled=counts[OutcomeStatus.THROTTLED],
            failed=counts[OutcomeStatus.FAILED],
        )

    def to_dict(self) -> Dict:
        return {
            "batchId": self.batch_id,
            "attempted": self.attempted,
            "succeeded": self.succeeded,
            "throttled": self.throttled,
            "failed": self.failed,
        }
