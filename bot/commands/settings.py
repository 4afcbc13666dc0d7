# ╔════════════════════════════════════════════════════════════════════════════╗
# ║                 CALENDAR ANNOUNCER SETTINGS COMMANDS                     ║
# ║    Channel / role configuration, configuration display, manual check      ║
# ╚════════════════════════════════════════════════════════════════════════════╝

from typing import Optional

import discord
from discord.ext import commands

from utils.logging import logger
from utils.timezone_utils import format_utc
from bot.tasks import ANNOUNCEMENT_TASK, REMINDER_TASK, get_task_status, is_task_running
from .access import require_access


def _channel_text(channel_id) -> str:
    return f"<#{channel_id}>" if channel_id else "not set"


def _role_text(role_id) -> str:
    return f"<@&{role_id}>" if role_id else "not set"

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ COMMAND HANDLERS                                                          ║
# ╚════════════════════════════════════════════════════════════════════════════╝

# --- handle_set_channel ---
# Sets the announcement channel (defaults to the channel the command was used in).
async def handle_set_channel(ctx, services, channel=None):
    if not await require_access(ctx, services.state):
        return
    target = channel or ctx.channel
    services.state.set_config("announcement_channel_id", target.id)
    await ctx.send(f"✅ Announcements will be posted in {target.mention}.")

# --- handle_set_reminder_channel ---
# Sets the channel reminders are posted to. Without it they follow the
# announcement channel.
async def handle_set_reminder_channel(ctx, services, channel=None):
    if not await require_access(ctx, services.state):
        return
    target = channel or ctx.channel
    services.state.set_config("reminder_channel_id", target.id)
    await ctx.send(f"✅ Reminders will be posted in {target.mention}.")

# --- handle_set_ping ---
# Sets the role mentioned by announcements and reminders.
# No role clears it and falls back to the PING_TEXT default.
async def handle_set_ping(ctx, services, role=None):
    if not await require_access(ctx, services.state):
        return
    if role is None:
        services.state.set_config("ping_role_id", None)
        await ctx.send(f"✅ Ping role cleared. Messages will mention `{services.ping_fallback or 'nobody'}`.")
        return
    services.state.set_config("ping_role_id", role.id)
    await ctx.send(f"✅ Messages will mention {role.mention}.")

# --- handle_set_access_role ---
# Restricts configuration commands to holders of `role`.
# No role restores the administrator-only default.
async def handle_set_access_role(ctx, services, role=None):
    if not await require_access(ctx, services.state):
        return
    if role is None:
        services.state.set_config("access_role_id", None)
        await ctx.send("✅ Access role cleared. Only administrators can configure the bot.")
        return
    services.state.set_config("access_role_id", role.id)
    await ctx.send(f"✅ Only members with {role.mention} can configure the bot now.")

# --- format_config ---
# Builds the text shown by the config command.
def format_config(services) -> str:
    state = services.state
    lines = [
        "**⚙️ Current configuration**",
        f"Announcement channel: {_channel_text(state.get_config('announcement_channel_id'))}",
        f"Reminder channel: {_channel_text(state.get_config('reminder_channel_id'))}",
        f"Ping role: {_role_text(state.get_config('ping_role_id'))} (fallback `{services.ping_fallback or 'none'}`)",
        f"Access role: {_role_text(state.get_config('access_role_id'))}",
        f"Fired announcements tracked: {len(state.fired)}",
        f"Pending reminders: {len(services.reminders.pending())}",
    ]
    for task_name in (ANNOUNCEMENT_TASK, REMINDER_TASK):
        status = get_task_status(task_name)
        last = status["last_success"]
        last_text = last.strftime("%Y-%m-%d %H:%M:%S") if last else "never"
        lines.append(f"Task `{task_name}`: last success {last_text}, errors {status['error_count']}")
    if not state.last_flush_ok:
        lines.append("⚠️ The state file could not be written; changes are only kept in memory.")
    return "\n".join(lines)

async def handle_show_config(ctx, services):
    if not await require_access(ctx, services.state):
        return
    await ctx.send(format_config(services), allowed_mentions=discord.AllowedMentions.none())

# --- handle_check_now ---
# Runs one announcement pass immediately.
async def handle_check_now(ctx, services):
    if not await require_access(ctx, services.state):
        return
    if services.announcements.destination() is None:
        await ctx.send("⚠️ No announcement channel is set. Use `setchannel` in the channel announcements should go to.")
        return
    if is_task_running(ANNOUNCEMENT_TASK):
        await ctx.send("⏳ A calendar check is already running. Try again in a moment.")
        return
    result = await services.announcements.tick()
    if result is None:
        await ctx.send("⚠️ The check was skipped or the calendar could not be fetched. See the logs.")
    elif result == 0:
        await ctx.send("✅ Calendar checked, nothing new to announce.")
    else:
        await ctx.send(f"✅ Calendar checked, {result} announcement(s) triggered.")

# --- format_pending ---
def format_pending(services) -> str:
    pending = services.reminders.pending()
    if not pending:
        return "No reminders scheduled."
    lines = ["**⏰ Scheduled reminders**"]
    for reminder in pending:
        when = reminder.fire_at_time
        lines.append(f"• {format_utc(when) if when else reminder.fire_at} in <#{reminder.channel_id}>")
    return "\n".join(lines)

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ COMMAND REGISTRATION                                                      ║
# ╚════════════════════════════════════════════════════════════════════════════╝

# --- register ---
# Registers the configuration text commands on the bot.
def register(bot: commands.Bot, services):
    @bot.command(name="setchannel", help="Set the announcement channel")
    async def setchannel_command(ctx, channel: Optional[discord.TextChannel] = None):
        await handle_set_channel(ctx, services, channel)

    @bot.command(name="setreminderchannel", help="Set the reminder channel")
    async def setreminderchannel_command(ctx, channel: Optional[discord.TextChannel] = None):
        await handle_set_reminder_channel(ctx, services, channel)

    @bot.command(name="setping", help="Set the role mentioned by announcements (omit to clear)")
    async def setping_command(ctx, role: Optional[discord.Role] = None):
        await handle_set_ping(ctx, services, role)

    @bot.command(name="setaccessrole", help="Restrict configuration to a role (omit to clear)")
    async def setaccessrole_command(ctx, role: Optional[discord.Role] = None):
        await handle_set_access_role(ctx, services, role)

    @bot.command(name="config", help="Show the current configuration")
    async def config_command(ctx):
        await handle_show_config(ctx, services)

    @bot.command(name="checknow", help="Check the calendar for announcements right now")
    async def checknow_command(ctx):
        await handle_check_now(ctx, services)

    @bot.command(name="reminders", help="List scheduled reminders")
    async def reminders_command(ctx):
        if not await require_access(ctx, services.state):
            return
        await ctx.send(format_pending(services), allowed_mentions=discord.AllowedMentions.none())

    logger.info("✅ Settings commands registered")
