"""APScheduler wrapper firing scrape cycles on a fixed interval."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from ..config import ScheduleConfig
from ..logging_conf import get_logger

SCRAPE_JOB_ID = "patches::scrape"


class APSchedulerAdapter:
    """Manage the background scrape job."""

    def __init__(self, scheduler: BackgroundScheduler | None = None) -> None:
        self.scheduler = scheduler or BackgroundScheduler()
        self.logger = get_logger("scheduler")
        self.started = False

    def start(self) -> None:
        if not self.started:
            self.scheduler.start()
            self.started = True
            self.logger.info("apscheduler_started")

    def shutdown(self, wait: bool = True) -> None:
        """Stop the timer; with ``wait`` an in-flight cycle finishes first."""

        if self.started:
            self.scheduler.shutdown(wait=wait)
            self.started = False
            self.logger.info("apscheduler_stopped")

    def schedule_scrape(self, schedule: ScheduleConfig, callback: Callable[[], Any]) -> None:
        trigger = self._build_trigger(schedule)
        kwargs: dict[str, Any] = {}
        if schedule.run_on_start:
            kwargs["next_run_time"] = datetime.now(trigger.timezone)
        self.scheduler.add_job(
            callback,
            trigger=trigger,
            id=SCRAPE_JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            **kwargs,
        )
        self.logger.info("job_scheduled", job=SCRAPE_JOB_ID, schedule=schedule.model_dump())

    @staticmethod
    def _build_trigger(schedule: ScheduleConfig) -> IntervalTrigger:
        return IntervalTrigger(seconds=float(schedule.interval_seconds))


__all__ = ["APSchedulerAdapter", "SCRAPE_JOB_ID"]
