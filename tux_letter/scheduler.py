"""
Daily trigger for the digest pipeline.

A run that is still in progress when the next trigger fires makes that
trigger a no-op; triggers are never queued.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger

from .config import ScheduleConfig
from .utils.logging import log_event


logger = logging.getLogger(__name__)

JOB_ID = "daily_digest"


class DailyScheduler:
    """Runs ``job`` once a day at the configured local time.

    Attributes:
        cfg: Trigger time and timezone
        job: Zero-argument callable executing one run
        scheduler: Underlying APScheduler instance
    """

    def __init__(self, cfg: ScheduleConfig, job: Callable[[], Any]):
        self.cfg = cfg
        self.job = job
        self.scheduler = BlockingScheduler(timezone=cfg.timezone)
        self._busy = threading.Lock()
        self.scheduler.add_job(
            self._trigger,
            CronTrigger(hour=cfg.hour, minute=cfg.minute, timezone=cfg.timezone),
            id=JOB_ID,
            max_instances=1,
            coalesce=True,
        )

    @property
    def busy(self) -> bool:
        return self._busy.locked()

    def _trigger(self) -> bool:
        if not self._busy.acquire(blocking=False):
            log_event(
                logger,
                "Run already in progress, skipping trigger",
                level=logging.WARNING,
                event="schedule_skipped",
            )
            return False
        try:
            log_event(logger, "Scheduled run starting", event="schedule_run_start")
            self.job()
        except Exception as exc:  # noqa: BLE001
            log_event(
                logger,
                "Scheduled run failed",
                level=logging.ERROR,
                exc_info=True,
                event="schedule_run_failed",
                error=f"{type(exc).__name__}: {exc}",
            )
            return False
        finally:
            self._busy.release()
        log_event(logger, "Scheduled run finished", event="schedule_run_complete")
        return True

    def run_now(self) -> bool:
        """Run the job immediately; returns False if a run is already going."""
        return self._trigger()

    def start(self) -> None:
        log_event(
            logger,
            "Scheduler started",
            event="schedule_start",
            hour=self.cfg.hour,
            minute=self.cfg.minute,
            timezone=self.cfg.timezone,
        )
        self.scheduler.start()

    def stop(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
        log_event(logger, "Scheduler stopped", event="schedule_stop")

    def status(self) -> dict[str, Any]:
        job = self.scheduler.get_job(JOB_ID)
        next_run = getattr(job, "next_run_time", None) if job else None
        return {
            "running": self.scheduler.running,
            "busy": self.busy,
            "schedule": f"{self.cfg.hour:02d}:{self.cfg.minute:02d} {self.cfg.timezone}",
            "next_run": next_run.isoformat() if next_run else None,
        }
