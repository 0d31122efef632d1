"""
Core notification service.

Delivers plain text messages to users' Telegram chats. Delivery is
fire-and-forget: failures are logged and never reach the caller.
"""

import asyncio

from aiogram import Bot
from loguru import logger

from app.config.constants import TELEGRAM_TIMEOUT
from app.models.user import User


class NotificationService:
    """
    Core notification service.

    Without a bot (no token configured) every message is only logged.
    """

    def __init__(self, bot: Bot | None = None) -> None:
        """
        Initialize notification service.

        Args:
            bot: Telegram bot used for delivery
        """
        self.bot = bot

    async def send_message(self, user: User, message: str) -> bool:
        """
        Send text message to a user.

        Args:
            user: Recipient user
            message: Message text

        Returns:
            True if delivered
        """
        if self.bot is None:
            logger.debug(f"[Notification] No bot configured, skipping user {user.id}")
            return False

        if not user.telegram_id:
            logger.debug(f"[Notification] User {user.id} has no Telegram chat")
            return False

        try:
            await asyncio.wait_for(
                self.bot.send_message(chat_id=user.telegram_id, text=message),
                timeout=TELEGRAM_TIMEOUT,
            )
            return True
        except TimeoutError:
            logger.warning(f"[Notification] Timeout notifying user {user.id}")
            return False
        except Exception as e:
            logger.error(f"[Notification] Failed to notify user {user.id}: {e}")
            return False
