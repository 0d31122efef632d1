"""Provider of notification bots for worker tasks."""

from aiogram import Bot
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode
from loguru import logger

from app.config.settings import settings


def create_bot() -> Bot | None:
    """
    Create a notification bot bound to the caller's event loop.

    Worker threads run separate event loops, so every task creates its
    own bot and closes its session when done.

    Returns:
        Bot, or None when no Telegram token is configured
    """
    if not settings.telegram_bot_token:
        return None

    try:
        return Bot(
            token=settings.telegram_bot_token,
            default=DefaultBotProperties(parse_mode=ParseMode.HTML),
        )
    except Exception as e:
        logger.error(f"[Notification] Failed to create bot instance: {e}")
        return None


async def close_bot(bot: Bot | None) -> None:
    """Close the HTTP session of a bot created by create_bot."""
    if bot is not None:
        await bot.session.close()
