# ╔════════════════════════════════════════════════════════════════════════════╗
# ║                       DISCORD UI VIEWS                                   ║
# ║ Select menus for the event → date → hour reminder picker                 ║
# ╚════════════════════════════════════════════════════════════════════════════╝
from datetime import date
from typing import List

import discord
from discord.ui import View, Select

from utils.logging import logger
from utils.timezone_utils import format_utc
from bot.events import (
    MAX_OPTIONS,
    OutsideEventWindow,
    date_options,
    hour_options,
    schedule_event_reminders,
)

PICKER_TIMEOUT = 300

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ BASE PICKER VIEW                                                          ║
# ╚════════════════════════════════════════════════════════════════════════════╝

# --- PickerView ---
# Shared base: only the member who opened the picker may use it.
class PickerView(View):
    def __init__(self, services, author_id: int, channel_id: int):
        super().__init__(timeout=PICKER_TIMEOUT)
        self.services = services
        self.author_id = author_id
        self.channel_id = channel_id

    async def interaction_check(self, interaction: discord.Interaction) -> bool:
        if interaction.user.id == self.author_id:
            return True
        await interaction.response.send_message("⚠️ This picker belongs to someone else.", ephemeral=True)
        return False

    def add_select(self, placeholder: str, options: List[discord.SelectOption]):
        select = Select(placeholder=placeholder, min_values=1, max_values=1, options=options[:MAX_OPTIONS])
        select.callback = self.select_callback
        self.add_item(select)

    async def select_callback(self, interaction: discord.Interaction):
        raise NotImplementedError

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ STEP 1: EVENT                                                             ║
# ╚════════════════════════════════════════════════════════════════════════════╝

class EventPickerView(PickerView):
    """Dropdown of upcoming calendar events."""
    def __init__(self, services, author_id, channel_id, events):
        super().__init__(services, author_id, channel_id)
        self.events = list(events)[:MAX_OPTIONS]
        self.add_select("Select an event...", [
            discord.SelectOption(
                label=(event.summary or "Unnamed Event")[:100],
                value=str(index),
                description=f"{format_utc(event.start)} to {format_utc(event.end)}"[:100],
            )
            for index, event in enumerate(self.events)
        ])

    async def select_callback(self, interaction: discord.Interaction):
        event = self.events[int(interaction.data["values"][0])]
        days = date_options(event.start, event.end)
        if not days:
            await interaction.response.edit_message(content="❌ That event has no selectable dates.", view=None)
            return
        view = DatePickerView(self.services, self.author_id, self.channel_id, event, days)
        await interaction.response.edit_message(
            content=f"📅 **{event.summary or 'Event'}**: pick a date (UTC).",
            view=view,
        )

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ STEP 2: DATE                                                              ║
# ╚════════════════════════════════════════════════════════════════════════════╝

class DatePickerView(PickerView):
    """Dropdown of the UTC days inside the event window."""
    def __init__(self, services, author_id, channel_id, event, days: List[date]):
        super().__init__(services, author_id, channel_id)
        self.event = event
        self.add_select("Select a date...", [
            discord.SelectOption(label=day.strftime("%a %d %b %Y"), value=day.isoformat())
            for day in days
        ])

    async def select_callback(self, interaction: discord.Interaction):
        day = date.fromisoformat(interaction.data["values"][0])
        hours = hour_options(day, self.event.start, self.event.end)
        if not hours:
            await interaction.response.edit_message(content="❌ No hours of that day fall inside the event.", view=None)
            return
        view = HourPickerView(self.services, self.author_id, self.channel_id, self.event, day, hours)
        await interaction.response.edit_message(
            content=f"🕐 **{self.event.summary or 'Event'}** on {day.isoformat()}: pick an hour (UTC).",
            view=view,
        )

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ STEP 3: HOUR                                                              ║
# ╚════════════════════════════════════════════════════════════════════════════╝

class HourPickerView(PickerView):
    """Dropdown of hours; choosing one schedules the reminders."""
    def __init__(self, services, author_id, channel_id, event, day: date, hours: List[int]):
        super().__init__(services, author_id, channel_id)
        self.event = event
        self.day = day
        self.add_select("Select an hour...", [
            discord.SelectOption(label=f"{hour:02d}:00 UTC", value=str(hour))
            for hour in hours
        ])

    async def select_callback(self, interaction: discord.Interaction):
        hour = int(interaction.data["values"][0])
        try:
            created = schedule_event_reminders(
                self.services.reminders,
                self.channel_id,
                self.event,
                self.day,
                hour,
                ping=self.services.ping,
            )
        except OutsideEventWindow as e:
            await interaction.response.edit_message(content=f"❌ {e}.", view=None)
            return

        if not created:
            content = "⚠️ Both reminder times have already passed; nothing was scheduled."
        else:
            times = ", ".join(format_utc(r.fire_at_time) for r in created)
            content = f"✅ Scheduled {len(created)} reminder(s) in <#{self.channel_id}>: {times}"
        logger.info(f"User {interaction.user} picked {self.day.isoformat()} {hour:02d}:00 for {self.event.uid}")
        await interaction.response.edit_message(content=content, view=None)
