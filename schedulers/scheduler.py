# schedulers/scheduler.py
import logging
from datetime import datetime
from typing import Callable

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

logger = logging.getLogger(__name__)


class RefreshScheduler:
    """Periodic Home refresh driven by APScheduler.

    With ``run_immediately`` the first refresh fires as soon as the scheduler
    starts instead of one interval later. Overlapping refreshes are skipped.
    """

    JOB_ID = "home_refresh"

    def __init__(self, interval_minutes: int, job_func: Callable, run_immediately: bool = False):
        self._interval = interval_minutes
        self._scheduler = BackgroundScheduler()
        extra = {"next_run_time": datetime.now()} if run_immediately else {}
        self._scheduler.add_job(
            job_func,
            trigger=IntervalTrigger(minutes=interval_minutes),
            id=self.JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            **extra,
        )

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def start(self):
        logger.info("Refreshing every %d minutes", self._interval)
        self._scheduler.start()

    def stop(self):
        if self.running:
            self._scheduler.shutdown(wait=False)
            logger.info("Refresh scheduler stopped")
