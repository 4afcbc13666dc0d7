# ╔════════════════════════════════════════════════════════════════════════════╗
# ║                     CALENDAR ANNOUNCER CORE MODULE                       ║
# ║    Handles bot setup, command registration, and event lifecycle logic    ║
# ╚════════════════════════════════════════════════════════════════════════════╝

import discord
from discord.ext import commands

from utils.logging import logger
from utils.environ import (
    ACCESS_ROLE_ID,
    CHANNEL_ID,
    CHECK_EVERY_MINUTES,
    COMMAND_PREFIX,
    DISCORD_BOT_TOKEN,
    FETCH_TIMEOUT_SECONDS,
    ICS_URL,
    PING_TEXT,
    REMINDER_CHECK_SECONDS,
    RULES_FILE,
    STATE_FILE,
)
from config.state import BotState, JsonFileBackend
from bot.events import IcsCalendarSource, load_rules
from bot.tasks import (
    AnnouncementScheduler,
    DiscordSink,
    ReminderScheduler,
    create_announcement_loop,
    create_reminder_loop,
    start_all_tasks,
)
from bot.commands import register_commands
from bot.services import BotServices

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ SERVICE WIRING                                                            ║
# ╚════════════════════════════════════════════════════════════════════════════╝

# --- build_services ---
# Loads persisted state, the rule table and the calendar source, and creates
# both schedulers around a Discord-backed notification sink.
# Raises RuleConfigError when RULES_FILE is set but unusable.
def build_services(bot: discord.Client) -> BotServices:
    state = BotState(
        JsonFileBackend(STATE_FILE),
        defaults={
            "announcement_channel_id": CHANNEL_ID,
            "access_role_id": ACCESS_ROLE_ID,
        },
    ).load()
    rules = load_rules(RULES_FILE)
    source = IcsCalendarSource(ICS_URL, timeout=FETCH_TIMEOUT_SECONDS)
    sink = DiscordSink(bot)
    return BotServices(
        state=state,
        source=source,
        announcements=AnnouncementScheduler(state, source, sink, rules=rules, ping_text=PING_TEXT),
        reminders=ReminderScheduler(state, sink),
        ping_fallback=PING_TEXT,
    )

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ BOT INTENTS & INITIALIZATION                                              ║
# ╚════════════════════════════════════════════════════════════════════════════╝

# --- create_bot ---
# Builds the commands.Bot, registers text commands and lifecycle events.
# Background loops start from on_ready, once the gateway connection is up.
def create_bot() -> commands.Bot:
    intents = discord.Intents.default()
    intents.message_content = True
    bot = commands.Bot(command_prefix=COMMAND_PREFIX, intents=intents)
    bot.is_initialized = False

    services = build_services(bot)
    bot.services = services
    register_commands(bot, services)

    announcement_loop = create_announcement_loop(services.announcements, CHECK_EVERY_MINUTES)
    reminder_loop = create_reminder_loop(services.reminders, REMINDER_CHECK_SECONDS)

    # --- on_ready ---
    # Starts the loops on the first connection; reconnects only log.
    @bot.event
    async def on_ready():
        logger.info(f"Logged in as {bot.user}")
        if bot.is_initialized:
            logger.info("Bot reconnected, skipping initialization")
            return
        start_all_tasks(announcement_loop, reminder_loop)
        bot.is_initialized = True
        logger.info(
            f"Bot initialization completed (announcements every {CHECK_EVERY_MINUTES} min, "
            f"reminders every {REMINDER_CHECK_SECONDS} s, prefix '{COMMAND_PREFIX}')"
        )

    @bot.event
    async def on_disconnect():
        logger.warning("Bot disconnected from Discord. Waiting for reconnection...")

    # --- on_command_error ---
    # User errors get a short reply; anything else is logged.
    @bot.event
    async def on_command_error(ctx, error):
        if isinstance(error, commands.CommandNotFound):
            return
        if isinstance(error, (commands.BadArgument, commands.MissingRequiredArgument)):
            await ctx.send(f"⚠️ {error}")
            return
        logger.error(f"Error in command '{ctx.command}': {error}", exc_info=error)
        await ctx.send("⚠️ An error occurred. Please try again later.")

    return bot

# --- main ---
# Runs the bot until the connection is closed.
async def main():
    bot = create_bot()
    async with bot:
        await bot.start(DISCORD_BOT_TOKEN)
