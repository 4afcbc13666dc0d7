"""
services.py: The process-scoped objects shared by commands, views and tasks.
"""
from dataclasses import dataclass
from typing import Optional

from config.state import BotState
from bot.tasks import AnnouncementScheduler, ReminderScheduler


@dataclass
class BotServices:
    state: BotState
    source: object
    announcements: AnnouncementScheduler
    reminders: ReminderScheduler
    ping_fallback: str = ""

    @property
    def ping(self) -> str:
        return self.state.ping_text(self.ping_fallback)

    def reminder_destination(self, fallback_channel_id: Optional[int] = None) -> Optional[int]:
        """Reminder channel, else the announcement channel, else `fallback_channel_id`."""
        return (
            self.state.get_config("reminder_channel_id")
            or self.state.get_config("announcement_channel_id")
            or fallback_channel_id
        )
