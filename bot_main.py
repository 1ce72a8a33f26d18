"""Main entry point for the RTM bot.

Loads configuration, connects with the token from the environment,
registers the demo features and listens until the socket closes.
"""
import logging

import trio

from config import ConfigManager, read_token
from core.dispatcher import open_bot
from features.basics import register_features


logger = logging.getLogger(__name__)


async def main() -> None:
    """Connect and run the bot until the connection closes."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    config_mgr = ConfigManager.from_env()
    config_mgr.load()
    logging.getLogger().setLevel(config_mgr.log_level)
    logger.info("Starting rtm-bot")

    token = read_token()
    bot_cfg = config_mgr.bot

    async with open_bot(
        token,
        prefix=bot_cfg["prefix"],
        api_url=bot_cfg["api_url"],
        origin=bot_cfg["origin"],
    ) as bot:
        logger.info("Bot authenticated as user_id=%s (prefix=%r)", bot.id, bot.prefix)
        register_features(bot)
        await bot.listen()


def run() -> None:
    trio.run(main)


if __name__ == "__main__":
    run()
