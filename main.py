#!/usr/bin/env python3
"""
Calendar Announcer - Main Entry Point

A Discord bot that polls an ICS calendar feed and posts time-gated
announcements and one-off reminder pings for a community channel.
"""

import sys
import signal
import asyncio
from utils.logging import logger
from utils.environ import validate_environment

def signal_handler(signum, frame):
    """Handle shutdown signals gracefully."""
    logger.info(f"Received signal {signum}, initiating shutdown...")
    sys.exit(0)

def main():
    """Main application entry point."""
    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    logger.info("=" * 60)
    logger.info("📣 Calendar Announcer Starting")
    logger.info("=" * 60)

    missing = validate_environment()
    if missing:
        logger.error(f"❌ Missing required environment variables: {', '.join(missing)}")
        sys.exit(1)

    try:
        from bot.core import main as bot_main
        asyncio.run(bot_main())
    except KeyboardInterrupt:
        logger.info("Bot stopped by user")
    except Exception as e:
        logger.exception(f"Fatal error starting bot: {e}")
        sys.exit(1)
    finally:
        logger.info("📣 Calendar Announcer Shutdown Complete")

if __name__ == "__main__":
    main()
