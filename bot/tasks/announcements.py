# ╔════════════════════════════════════════════════════════════════════════════╗
# ║                       BOT TASKS ANNOUNCEMENT MODULE                      ║
# ║    Polls the calendar feed and posts open / warning / close messages     ║
# ║    exactly once per event instance and rule.                             ║
# ╚════════════════════════════════════════════════════════════════════════════╝

"""
Calendar announcement scheduler.

Each poll re-evaluates every (event, rule) pair from scratch using only the
current time and the fired keys in BotState. A key is marked before its
message is sent and stays marked when the send fails (see DeliveryGuarantee).

On an empty state the first pass is a boot sync: everything already due is
marked without sending, so downtime never turns into a burst of stale
announcements.
"""
import asyncio
from datetime import datetime
from typing import Dict, Optional

from discord.ext import tasks

from utils.logging import logger
from utils.timezone_utils import to_utc, utcnow
from bot.events import (
    DEFAULT_RULES,
    CalendarFetchError,
    RuleSet,
    due_triggers,
    get_event_type,
    render_message,
)
from .health import TaskLock, update_task_health

ANNOUNCEMENT_TASK = "announcements"


class AnnouncementScheduler:
    """Evaluates the trigger rule table against the calendar feed."""

    def __init__(self, state, source, sink, rules: Optional[Dict[str, RuleSet]] = None,
                 ping_text: str = ""):
        self.state = state
        self.source = source
        self.sink = sink
        self.rules = rules if rules is not None else DEFAULT_RULES
        self.ping_text = ping_text
        self.synced = False

    def destination(self) -> Optional[int]:
        return self.state.get_config("announcement_channel_id")

    async def fetch_events(self):
        # requests is blocking; keep the event loop free while the feed downloads
        return await asyncio.to_thread(self.source.fetch)

    # --- run_check ---
    # One evaluation pass.
    # Args:
    #     now: evaluation time (defaults to the current UTC time)
    #     suppress: mark due keys without sending (boot sync)
    # Returns: number of keys newly marked, or None when the poll was abandoned.
    async def run_check(self, now: Optional[datetime] = None, suppress: bool = False) -> Optional[int]:
        now = to_utc(now) if now else utcnow()

        channel_id = self.destination()
        if channel_id is None and not suppress:
            logger.warning("No announcement channel configured; skipping announcement check")
            return 0

        try:
            events = await self.fetch_events()
        except CalendarFetchError as e:
            logger.error(f"Calendar fetch failed, skipping this poll: {e}")
            return None

        ping = self.state.ping_text(self.ping_text)
        marked = 0
        for event in events:
            event_type = get_event_type(event)
            if not event_type:
                continue
            rule_set = self.rules.get(event_type)
            if rule_set is None:
                logger.debug(f"No rules for event type '{event_type}' (uid {event.uid})")
                continue

            for key, rule in due_triggers(event, rule_set, now):
                if self.state.has(key):
                    continue
                self.state.mark(key)
                marked += 1
                if suppress:
                    logger.info(f"Boot sync: marked {key} without sending")
                    continue
                if await self.sink.send(channel_id, render_message(rule, event, ping)):
                    logger.info(f"📣 Sent '{rule.suffix}' announcement for {event.uid} ({key})")
                else:
                    logger.warning(f"Announcement {key} was not delivered and will not be retried")
        return marked

    # --- boot_sync ---
    # Runs the suppressed pass once when the state holds no fired keys.
    # Returns: True when boot sync is complete or was not needed.
    async def boot_sync(self, now: Optional[datetime] = None) -> bool:
        if self.synced:
            return True
        if not self.state.is_fresh:
            self.synced = True
            return True
        logger.info("🔄 No announcement history found, running boot sync")
        result = await self.run_check(now=now, suppress=True)
        self.synced = result is not None
        if self.synced:
            logger.info(f"Boot sync complete, {result} past triggers marked as fired")
        return self.synced

    # --- tick ---
    # One guarded loop iteration: boot sync if needed, then a normal pass.
    # An iteration that overlaps a still-running one is skipped.
    async def tick(self, now: Optional[datetime] = None) -> Optional[int]:
        async with TaskLock(ANNOUNCEMENT_TASK) as acquired:
            if not acquired:
                return None
            if not await self.boot_sync(now):
                update_task_health(ANNOUNCEMENT_TASK, False)
                return None
            result = await self.run_check(now=now)
            update_task_health(ANNOUNCEMENT_TASK, result is not None)
            return result
        return None


# --- create_announcement_loop ---
# Wraps the scheduler in a discord.ext.tasks loop.
# The first iteration runs as soon as the loop starts.
def create_announcement_loop(scheduler: AnnouncementScheduler, minutes: int) -> tasks.Loop:
    @tasks.loop(minutes=minutes)
    async def announcement_loop():
        await scheduler.tick()

    return announcement_loop
