"""Daily trigger for the agent run (APScheduler cron job)."""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from src.core.config import ScheduleConfig

logger = logging.getLogger(__name__)

DAILY_JOB_ID = "daily_notice_run"


def build_scheduler(
    job: Callable[[], Awaitable[Any]],
    schedule: ScheduleConfig,
) -> AsyncIOScheduler:
    """Return an unstarted scheduler with one daily cron job.

    ``max_instances=1`` keeps a slow run from overlapping the next trigger.
    """
    scheduler = AsyncIOScheduler(timezone=schedule.timezone) if schedule.timezone else AsyncIOScheduler()
    scheduler.add_job(
        job,
        "cron",
        hour=schedule.hour,
        minute=schedule.minute,
        id=DAILY_JOB_ID,
        name="Daily notice drafting run",
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )
    logger.info("Daily agent scheduled for %02d:%02d", schedule.hour, schedule.minute)
    return scheduler
