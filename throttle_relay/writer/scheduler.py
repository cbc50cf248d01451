"""Periodic trigger for the write driver."""

import asyncio
from typing import Optional

import structlog

from throttle_relay.models.write import WriteBatchResult
from throttle_relay.writer.driver import ThrottlingDetectedError, WriteDriver


logger = structlog.get_logger()


class WriteScheduler:
    """Runs a write batch every `interval_seconds` until stopped."""

    def __init__(self, driver: WriteDriver, interval_seconds: int = 60):
        self._driver = driver
        self._interval = interval_seconds
        self._running = False
        self._task: Optional[asyncio.Task] = None
        self.runs = 0
        self.throttled_runs = 0
        self.last_result: Optional[WriteBatchResult] = None

    @property
    def running(self) -> bool:
        return self._running

    async def start(self):
        """Start the schedule loop."""
        logger.info("Starting write scheduler", interval_seconds=self._interval)
        self._running = True
        self._task = asyncio.create_task(self._schedule_loop())

    async def stop(self):
        """Stop the schedule loop."""
        logger.info("Stopping write scheduler")
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass

    async def run_once(self) -> Optional[WriteBatchResult]:
        """Run one scheduled batch; a throttled batch is logged, not raised."""
        self.runs += 1
        try:
            self.last_result = await self._driver.run_batch()
        except ThrottlingDetectedError as e:
            self.throttled_runs += 1
            self.last_result = e.result
            logger.error(
                "Scheduled batch throttled",
                throttled=e.result.throttled,
                attempted=e.result.attempted,
            )
        return self.last_result

    async def _schedule_loop(self):
        """Background loop firing a batch on every tick."""
        logger.info("Write scheduler loop started")

        while self._running:
            try:
                await self.run_once()
            except Exception as e:
                logger.error("Scheduled batch failed", error=str(e))

            await asyncio.sleep(self._interval)
