# ╔════════════════════════════════════════════════════════════════════════════╗
# ║                 CALENDAR ANNOUNCER COMMANDS PACKAGE INIT                 ║
# ║    Exports command handlers and the registration entry point             ║
# ╚════════════════════════════════════════════════════════════════════════════╝

"""
Initializes the bot.commands package.

Re-exports the handler functions of each command module and provides
`register_commands`, which attaches every text command to the bot.
"""
from .access import DENIED_MESSAGE, is_authorized, require_access
from .settings import (
    format_config,
    format_pending,
    handle_check_now,
    handle_set_access_role,
    handle_set_channel,
    handle_set_ping,
    handle_set_reminder_channel,
    handle_show_config,
)
from .remind import handle_remind_command, upcoming_events
from . import remind, settings

# --- register_commands ---
# Registers every command module on the bot.
def register_commands(bot, services):
    settings.register(bot, services)
    remind.register(bot, services)


__all__ = [
    'DENIED_MESSAGE', 'is_authorized', 'require_access',
    'format_config', 'format_pending', 'handle_check_now', 'handle_set_access_role',
    'handle_set_channel', 'handle_set_ping', 'handle_set_reminder_channel', 'handle_show_config',
    'handle_remind_command', 'upcoming_events',
    'register_commands',
]
