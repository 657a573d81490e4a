"""
Time Zone Clock Bot - Main Entry Point

A Discord bot that keeps one voice channel per time zone renamed to show
the current local time in every configured server.
"""
import logging
import sys

from bot.client import ClockBot
from bot.errors import ClockBotError
from config import Config

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger("clock-bot")


def main():
    """Main entry point for the bot."""
    try:
        config = Config.load()
        logging.getLogger().setLevel(getattr(logging, config.log_level, logging.INFO))

        bot = ClockBot(config)
        bot.run()
    except ClockBotError as e:
        logger.error(str(e))
        sys.exit(e.exit_code)
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        raise


if __name__ == "__main__":
    main()
