# ╔════════════════════════════════════════════════════════════════════════════╗
# ║                      BOT TASKS UTILITIES MODULE                            ║
# ║       Notification sink used by both schedulers to post messages           ║
# ║       into Discord channels.                                               ║
# ╚════════════════════════════════════════════════════════════════════════════╝

"""
Task utility functions shared across task modules.
"""
from enum import Enum

import discord
from discord.errors import Forbidden, HTTPException, NotFound

from utils.logging import logger

# Discord rejects messages longer than this
MAX_MESSAGE_LENGTH = 2000

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ DELIVERY CONTRACT                                                         ║
# ╚════════════════════════════════════════════════════════════════════════════╝

class DeliveryGuarantee(Enum):
    """
    Delivery contract shared by the announcement and reminder loops.

    A trigger is recorded as fired before its message is sent, and stays
    recorded when the send fails. A crash or a transport error can therefore
    lose a message, but can never produce a duplicate. Turning this into
    at-least-once delivery would reintroduce duplicate announcements after
    restarts.
    """
    AT_MOST_ONCE = "at-most-once per key"
    BEST_EFFORT = "best-effort on transient failure"
    NO_RETRY = "no automatic retry"


DELIVERY_GUARANTEES = tuple(DeliveryGuarantee)

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ MESSAGE SENDING                                                           ║
# ╚════════════════════════════════════════════════════════════════════════════╝

class DiscordSink:
    """Notification sink posting plain messages to Discord text channels."""

    def __init__(self, bot: discord.Client):
        self.bot = bot

    # --- send ---
    # Resolves the channel from the client cache (falling back to an API fetch)
    # and posts `text`. Never raises; failures are logged.
    # Returns: True if Discord accepted the message.
    async def send(self, channel_id: int, text: str) -> bool:
        try:
            channel = self.bot.get_channel(channel_id)
            if channel is None:
                channel = await self.bot.fetch_channel(channel_id)
            if not isinstance(channel, discord.abc.Messageable):
                logger.error(f"Channel {channel_id} is not a text channel")
                return False
            await channel.send(
                text[:MAX_MESSAGE_LENGTH],
                allowed_mentions=discord.AllowedMentions(everyone=True, roles=True),
            )
            return True
        except NotFound:
            logger.error(f"Channel {channel_id} not found")
        except Forbidden:
            logger.error(f"Permission error sending message to channel {channel_id}. Check bot permissions.")
        except HTTPException as e:
            logger.error(f"HTTP error sending message to channel {channel_id}: {e}")
        except Exception as e:
            logger.exception(f"Error sending message to channel {channel_id}: {e}")
        return False
