"""
Scheduler types and the backend interface.

A ScheduledJob pairs an async callback with a CronSpec: APScheduler cron
fields evaluated in a named timezone. RuntimeScheduler is what the
lifespan holds on to so it can cancel jobs at shutdown.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Coroutine, Dict, List, Optional


@dataclass(frozen=True)
class CronSpec:
    """Cron fields in APScheduler syntax (``"9-17"``, ``"mon,tue"``, ``"*"``)."""

    minute: str = "*"
    hour: str = "*"
    day_of_week: str = "*"
    timezone: Optional[str] = None

    def __post_init__(self) -> None:
        for field_name in ("minute", "hour", "day_of_week"):
            if not getattr(self, field_name).strip():
                raise ValueError(f"cron field '{field_name}' must not be empty")

    def trigger_kwargs(self) -> Dict[str, str]:
        kwargs = {
            "trigger": "cron",
            "minute": self.minute,
            "hour": self.hour,
            "day_of_week": self.day_of_week,
        }
        if self.timezone:
            kwargs["timezone"] = self.timezone
        return kwargs

    def describe(self) -> str:
        return (
            f"minute={self.minute} hour={self.hour} "
            f"day_of_week={self.day_of_week} tz={self.timezone or 'local'}"
        )


@dataclass
class ScheduledJob:
    """A named callback and when to run it. ``data`` reaches ``context.job.data``."""

    name: str
    callback: Callable[..., Coroutine[Any, Any, None]]
    schedule: CronSpec
    data: Any = None
    enabled: bool = True


class RuntimeScheduler(ABC):
    """In-process job scheduler."""

    @abstractmethod
    def schedule(self, job: ScheduledJob) -> None:
        """Register a job for execution."""

    @abstractmethod
    def cancel(self, name: str) -> bool:
        """Cancel a scheduled job by name. Returns True if found."""

    @abstractmethod
    def list_jobs(self) -> List[str]:
        """Return names of all registered jobs."""

    @abstractmethod
    async def stop(self) -> None:
        """Cancel all jobs."""
