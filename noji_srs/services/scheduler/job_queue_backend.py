"""
RuntimeScheduler on top of python-telegram-bot's JobQueue.

Cron jobs go through ``run_custom`` with an APScheduler cron trigger, so
the JobQueue (started with the bot Application) owns the timing.
"""

import logging
from typing import Dict, List

from telegram.ext import Application

from .base import RuntimeScheduler, ScheduledJob

logger = logging.getLogger(__name__)


class JobQueueBackend(RuntimeScheduler):
    """Schedules jobs on an Application's JobQueue and tracks them by name."""

    def __init__(self, application: Application) -> None:
        self._application = application
        self._jobs: Dict[str, ScheduledJob] = {}

    @property
    def _job_queue(self):
        job_queue = self._application.job_queue
        if job_queue is None:
            raise RuntimeError(
                "JobQueue not available on this Application "
                "(install python-telegram-bot[job-queue])"
            )
        return job_queue

    def schedule(self, job: ScheduledJob) -> None:
        if not job.enabled:
            logger.info("Job '%s' is disabled, not scheduling", job.name)
            return
        if job.name in self._jobs:
            self.cancel(job.name)

        self._job_queue.run_custom(
            job.callback,
            job_kwargs=job.schedule.trigger_kwargs(),
            name=job.name,
            data=job.data,
        )
        self._jobs[job.name] = job
        logger.info("Scheduled job '%s' (%s)", job.name, job.schedule.describe())

    def cancel(self, name: str) -> bool:
        if self._jobs.pop(name, None) is None:
            return False

        ptb_jobs = self._job_queue.get_jobs_by_name(name)
        for ptb_job in ptb_jobs:
            ptb_job.schedule_removal()
        logger.info("Cancelled job '%s' (%d queued run(s))", name, len(ptb_jobs))
        return bool(ptb_jobs)

    def list_jobs(self) -> List[str]:
        return list(self._jobs)

    async def stop(self) -> None:
        for name in self.list_jobs():
            self.cancel(name)
        logger.info("All scheduled jobs cancelled")
