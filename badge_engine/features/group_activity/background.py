"""
Background group detection runner.

Runs group detection periodically inside the application process.
"""

import asyncio
import logging
from typing import Optional

from badge_engine.config import settings
from .service import GroupActivityService

logger = logging.getLogger(__name__)


class BackgroundGroupDetectionRunner:
    """
    Background task runner for group detection.

    Call `start()` to begin periodic detection.
    Call `stop()` to gracefully stop.

    Usage:
        runner = BackgroundGroupDetectionRunner()
        await runner.start(db_factory)
        # ... later ...
        await runner.stop()
    """

    def __init__(self, interval_seconds: Optional[int] = None):
        self._running = False
        self._task: Optional[asyncio.Task] = None
        self._db_factory = None
        self.interval_seconds = interval_seconds or settings.group_detection_interval_seconds

    @property
    def running(self) -> bool:
        return self._running

    async def start(self, db_factory):
        """Start background detection loop."""
        if self._running:
            return

        self._running = True
        self._db_factory = db_factory
        self._task = asyncio.create_task(self._run_loop())
        logger.info(f"Background group detection started (every {self.interval_seconds}s)")

    async def stop(self):
        """Stop background detection loop."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Background group detection stopped")

    async def _run_loop(self):
        """Main detection loop."""
        while self._running:
            try:
                await self.run_once()
            except Exception as e:
                logger.error(f"Group detection error: {e}")

            # Wait before next run
            await asyncio.sleep(self.interval_seconds)

    async def run_once(self):
        """Run one detection over the configured lookback window."""
        async with self._db_factory() as db:
            service = GroupActivityService(db)
            return await service.detect_and_award(settings.group_lookback_hours)


# Global runner instance
background_group_detection = BackgroundGroupDetectionRunner()
