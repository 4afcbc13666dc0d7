# ╔════════════════════════════════════════════════════════════════════════════╗
# ║                    BOT TASKS REMINDER MODULE                         ║
# ║    Stores one-shot reminders and fires each one at most once when its    ║
# ║    time arrives, pruning fired entries afterwards.                       ║
# ╚════════════════════════════════════════════════════════════════════════════╝

"""
One-shot reminder scheduler.

Reminders are created by the interactive picker and live in the
`scheduled` list of BotState. A due reminder is marked fired and flushed
before it is sent, then every fired reminder is pruned. The first pass
after startup is suppressed, so reminders that came due while the bot was
down are dropped instead of arriving late.
"""
from datetime import datetime
from typing import List, Optional
from uuid import uuid4

from discord.ext import tasks

from config.state import ScheduledReminder
from utils.logging import logger
from utils.timezone_utils import to_utc, utcnow
from .health import TaskLock, update_task_health

REMINDER_TASK = "reminders"


class ReminderScheduler:
    def __init__(self, state, sink):
        self.state = state
        self.sink = sink
        self.synced = False

    def schedule(self, channel_id: int, fire_at: datetime, message: str,
                 now: Optional[datetime] = None) -> Optional[ScheduledReminder]:
        """Persist a new reminder. Times at or before `now` are ignored (returns None)."""
        now = to_utc(now) if now else utcnow()
        fire_at = to_utc(fire_at)
        if fire_at <= now:
            logger.debug(f"Ignoring reminder for {fire_at.isoformat()}, already in the past")
            return None
        reminder = ScheduledReminder(
            id=f"rem_{uuid4().hex[:12]}",
            channel_id=int(channel_id),
            fire_at=fire_at.isoformat(),
            message=message,
        )
        self.state.add_reminder(reminder)
        logger.info(f"⏰ Scheduled reminder {reminder.id} for {reminder.fire_at} in channel {channel_id}")
        return reminder

    def pending(self) -> List[ScheduledReminder]:
        """Active reminders ordered by fire time."""
        return sorted(self.state.active_reminders(), key=lambda r: r.fire_at)

    async def process_due(self, now: Optional[datetime] = None, suppress: bool = False) -> int:
        """
        Fire every reminder whose time has come, then prune fired reminders.

        Returns: number of reminders that came due in this pass.
        """
        now = to_utc(now) if now else utcnow()
        due = 0
        for reminder in list(self.state.active_reminders()):
            fire_at = reminder.fire_at_time
            if fire_at is None:
                logger.warning(f"Reminder {reminder.id} has an unreadable fire time, discarding it")
                reminder.fired = True
                self.state.flush()
                continue
            if fire_at > now:
                continue

            due += 1
            reminder.fired = True
            self.state.flush()
            if suppress:
                logger.info(f"Dropping reminder {reminder.id} that came due while offline")
                continue
            if await self.sink.send(reminder.channel_id, reminder.message):
                logger.info(f"🔔 Sent reminder {reminder.id}")
            else:
                logger.warning(f"Reminder {reminder.id} was not delivered and will not be retried")

        self.state.prune_fired()
        return due

    async def tick(self, now: Optional[datetime] = None) -> Optional[int]:
        async with TaskLock(REMINDER_TASK) as acquired:
            if not acquired:
                return None
            suppress = not self.synced
            result = await self.process_due(now=now, suppress=suppress)
            self.synced = True
            update_task_health(REMINDER_TASK, True)
            return 0 if suppress else result
        return None


def create_reminder_loop(scheduler: ReminderScheduler, seconds: int) -> tasks.Loop:
    @tasks.loop(seconds=seconds)
    async def reminder_loop():
        await scheduler.tick()

    return reminder_loop
