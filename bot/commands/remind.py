# ╔════════════════════════════════════════════════════════════════════════════╗
# ║                  CALENDAR ANNOUNCER REMIND COMMAND                       ║
# ║    Opens the event → date → hour picker for one-off reminder pings        ║
# ╚════════════════════════════════════════════════════════════════════════════╝

import asyncio
from datetime import datetime
from typing import List, Optional

from discord.ext import commands

from utils.logging import logger
from utils.timezone_utils import to_utc, utcnow
from bot.events import MAX_OPTIONS, CalendarFetchError
from bot.views import EventPickerView
from .access import require_access

# --- upcoming_events ---
# Events that have not ended yet, earliest first, capped to one menu page.
def upcoming_events(events, now: Optional[datetime] = None) -> List:
    now = to_utc(now) if now else utcnow()
    current = [event for event in events if to_utc(event.end) > now]
    current.sort(key=lambda event: (event.start, event.uid))
    return current[:MAX_OPTIONS]

# --- handle_remind_command ---
# Fetches the calendar and shows the event picker to the invoking member.
async def handle_remind_command(ctx, services):
    if not await require_access(ctx, services.state):
        return
    try:
        events = await asyncio.to_thread(services.source.fetch)
    except CalendarFetchError as e:
        logger.error(f"Calendar fetch failed for remind command: {e}")
        await ctx.send("⚠️ Could not load the calendar right now. Please try again later.")
        return

    choices = upcoming_events(events)
    if not choices:
        await ctx.send("📭 There are no upcoming events to set a reminder for.")
        return

    channel_id = services.reminder_destination(ctx.channel.id)
    view = EventPickerView(services, ctx.author.id, channel_id, choices)
    await ctx.send("🗓️ Pick the event you want a reminder for:", view=view)

# --- register ---
def register(bot: commands.Bot, services):
    @bot.command(name="remind", help="Schedule reminder pings before a chosen hour of an event")
    async def remind_command(ctx):
        await handle_remind_command(ctx, services)

    logger.info("✅ Remind command registered")
