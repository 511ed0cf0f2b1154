"""
Job scheduling for the card tick.

- CronSpec / ScheduledJob describe what runs and when
- JobQueueBackend runs them on python-telegram-bot's JobQueue
"""

from .base import CronSpec, RuntimeScheduler, ScheduledJob
from .job_queue_backend import JobQueueBackend

__all__ = [
    "CronSpec",
    "RuntimeScheduler",
    "ScheduledJob",
    "JobQueueBackend",
]
