"""Write-and-classify driver and its schedule."""

from throttle_relay.writer.driver import (
    InvalidBatchSizeError,
    ThrottlingDetectedError,
    WriteDriver,
    build_attempts,
)
from throttle_relay.writer.scheduler import WriteScheduler

__all__ = [
    "InvalidBatchSizeError",
    "ThrottlingDetectedError",
    "WriteDriver",
    "WriteScheduler",
    "build_attempts",
]
