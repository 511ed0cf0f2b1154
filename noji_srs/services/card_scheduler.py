"""
Card Scheduler - decides on every tick whether to send a card.

Each tick:
1. fetches cards (cache or network) before any gating
2. forces delivery when the last successful send is older than MAX_GAP
3. otherwise requires the working-hours window and a random draw
4. sends one random card and records the delivery time

A failed tick is logged and swallowed; it never records a delivery, so the
gap override keeps pressing on the following ticks.
"""

import logging
import random
from datetime import datetime
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from telegram.ext import Application, ContextTypes

from ..core.config import Settings, get_settings
from ..domain.models import DeliveryState
from ..utils.formatting import format_card_message
from ..utils.logging import get_logger
from .card_service import CardService
from .delivery_service import TelegramDelivery
from .scheduler import CronSpec, JobQueueBackend, ScheduledJob

logger = logging.getLogger(__name__)
delivery_log = get_logger("card_delivery")

JOB_NAME = "send_random_card"

_CRON_WEEKDAYS = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")


class CardScheduler:
    """Per-tick delivery decision engine."""

    def __init__(
        self,
        cards: CardService,
        delivery: TelegramDelivery,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
        rng: Optional[random.Random] = None,
        state: Optional[DeliveryState] = None,
    ) -> None:
        self.cards = cards
        self.delivery = delivery
        self.settings = settings or get_settings()
        self._tz = ZoneInfo(self.settings.timezone)
        self._clock = clock or (lambda: datetime.now(self._tz))
        self._rng = rng or random.Random()
        self.state = state or DeliveryState()

    def is_within_window(self, now: datetime) -> bool:
        """True if ``now`` falls on a working weekday inside working hours."""
        return now.isoweekday() in self.settings.weekdays and (
            self.settings.work_hour_start <= now.hour < self.settings.work_hour_end
        )

    async def tick(self, force: bool = False) -> bool:
        """Run one delivery decision. Returns True if a card was sent."""
        try:
            return await self._tick(force)
        except Exception as e:
            logger.error("Error in card tick: %s: %s", type(e).__name__, e, exc_info=True)
            return False

    async def _tick(self, force: bool) -> bool:
        now = self._clock().astimezone(self._tz)
        logger.info(
            "Card tick triggered (force=%s, weekday=%d, hour=%d)",
            force,
            now.isoweekday(),
            now.hour,
        )

        if force:
            self.cards.clear_cache()

        cards = await self.cards.get_today_cards()

        forced = force
        hours_since = self.state.hours_since_last_delivery(now)
        if hours_since is not None and hours_since >= self.settings.max_gap_hours:
            logger.info(
                "No card for %.2fh (max gap %.2fh), forcing delivery",
                hours_since,
                self.settings.max_gap_hours,
            )
            forced = True

        if not forced:
            if not self.is_within_window(now):
                logger.debug("Skipped: outside delivery window")
                return False

            draw = self._rng.random()
            if draw >= self.settings.send_probability:
                logger.debug(
                    "Skipped: random draw %.3f >= probability %.3f",
                    draw,
                    self.settings.send_probability,
                )
                return False

        if not cards:
            logger.warning("No cards available")
            return False

        card = self.cards.get_random_card(cards)
        await self.delivery.send(format_card_message(card))

        self.state.last_delivered_at = now
        logger.info("Card sent successfully: %s", card.word)
        delivery_log.info(
            "card_delivered",
            word=card.word,
            forced=forced,
            cards_available=len(cards),
            hours_since_previous=hours_since,
        )
        return True


async def _card_tick_callback(context: ContextTypes.DEFAULT_TYPE) -> None:
    """Job queue callback: run one scheduler tick."""
    scheduler: CardScheduler = context.job.data
    await scheduler.tick()


def build_cron_schedule(settings: Settings) -> CronSpec:
    """Every minute of the working window, in the configured timezone."""
    days = ",".join(_CRON_WEEKDAYS[d - 1] for d in settings.weekdays)
    return CronSpec(
        minute="*",
        hour=f"{settings.work_hour_start}-{settings.work_hour_end - 1}",
        day_of_week=days,
        timezone=settings.timezone,
    )


def setup_card_scheduler(application: Application, scheduler: CardScheduler):
    """Register the card tick as a cron job on the application's job queue.

    Returns the JobQueueBackend, or None if scheduling is disabled.
    """
    settings = scheduler.settings
    if not settings.scheduler_enabled:
        logger.info("Card scheduler disabled (SCHEDULER_ENABLED=false)")
        return None

    if not application.job_queue:
        logger.warning("Job queue not available, card scheduler disabled")
        return None

    backend = JobQueueBackend(application)
    job = ScheduledJob(
        name=JOB_NAME,
        callback=_card_tick_callback,
        schedule=build_cron_schedule(settings),
        data=scheduler,
    )
    backend.schedule(job)

    logger.info(
        "Card scheduler configured: weekdays=%s hours=%d-%d probability=%.2f max_gap=%.0fm",
        settings.work_weekdays,
        settings.work_hour_start,
        settings.work_hour_end,
        settings.send_probability,
        settings.max_gap_minutes,
    )
    return backend
