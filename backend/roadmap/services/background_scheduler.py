"""
Background scheduler service for periodic jobs.

Recomputes progress of every open milestone on a fixed interval.
Uses APScheduler for in-process scheduling without external dependencies.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from roadmap.core.config import get_settings
from roadmap.core.logger import logger
from roadmap.services.progress_tracking_service import ProgressTrackingService
from roadmap.utils.datetime_utils import now_utc

PROGRESS_RECOMPUTE_JOB_ID = "milestone_progress_recompute"


class BackgroundScheduler:
    """
    Background scheduler for periodic jobs.

    Features:
    - Milestone progress recompute every PROGRESS_RECOMPUTE_INTERVAL_MINUTES
    - Error isolation per milestone (handled by the progress service)
    """

    def __init__(self, progress_service: ProgressTrackingService):
        self._progress_service = progress_service
        self._scheduler: Optional[AsyncIOScheduler] = None
        self._last_run: Optional[datetime] = None

    @property
    def is_running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    @property
    def last_run(self) -> Optional[datetime]:
        return self._last_run

    async def start(self):
        """Start the scheduler."""
        settings = get_settings()

        # Only run scheduler in non-test environments
        if settings.ENVIRONMENT == "test":
            logger.info("Background scheduler disabled in test environment")
            return

        self._scheduler = AsyncIOScheduler()
        self._scheduler.add_job(
            self.run_progress_recompute,
            IntervalTrigger(minutes=settings.PROGRESS_RECOMPUTE_INTERVAL_MINUTES),
            id=PROGRESS_RECOMPUTE_JOB_ID,
            name="Milestone Progress Recompute",
            replace_existing=True,
        )
        self._scheduler.start()
        logger.info(
            "Background scheduler started:\n"
            f"  - Milestone progress recompute: every "
            f"{settings.PROGRESS_RECOMPUTE_INTERVAL_MINUTES} minutes"
        )

    async def stop(self):
        """Stop the scheduler."""
        if self._scheduler:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
            logger.info("Background scheduler stopped")

    async def run_progress_recompute(self) -> dict[str, int]:
        """Recompute every open milestone once."""
        logger.info("Starting milestone progress recompute...")
        try:
            results = await self._progress_service.recompute_open_milestones()
        except Exception as e:
            logger.error(f"Milestone progress recompute failed: {e}")
            return {"updated": 0, "failed": 0}

        self._last_run = now_utc()
        return results


# Global scheduler instance
_scheduler: Optional[BackgroundScheduler] = None


async def get_background_scheduler() -> BackgroundScheduler:
    """Get the global background scheduler instance."""
    global _scheduler
    if _scheduler is None:
        from roadmap.deps import get_progress_tracking_service

        _scheduler = BackgroundScheduler(progress_service=get_progress_tracking_service())
    return _scheduler


async def start_background_scheduler():
    """Start the global background scheduler."""
    scheduler = await get_background_scheduler()
    await scheduler.start()


async def stop_background_scheduler():
    """Stop the global background scheduler."""
    global _scheduler
    if _scheduler:
        await _scheduler.stop()
        _scheduler = None
