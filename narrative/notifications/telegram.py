"""Telegram bot client for briefings and alerts."""

from __future__ import annotations

import logging
import os
from typing import Iterable, Optional

from telegram import Bot

from narrative.notifications.alerts import Alert, format_alert
from narrative.notifications.briefing import format_daily_briefing
from narrative.types import NarrativeScore

logger = logging.getLogger(__name__)


class TelegramClient:
    """Telegram bot client for sending narrative notifications.

    Uses the python-telegram-bot library.
    """

    def __init__(self, bot_token: Optional[str] = None, default_chat_id: Optional[str] = None):
        """Initialize Telegram client.

        Args:
            bot_token: Telegram bot token. If not provided, reads from TELEGRAM_BOT_TOKEN env var.
            default_chat_id: Default chat ID to send messages to. If not provided, reads from TELEGRAM_CHAT_ID env var.
        """
        self.bot_token = bot_token or os.environ.get("TELEGRAM_BOT_TOKEN")
        self.default_chat_id = default_chat_id or os.environ.get("TELEGRAM_CHAT_ID")

        if not self.bot_token:
            logger.warning("TELEGRAM_BOT_TOKEN not configured")

    @property
    def configured(self) -> bool:
        return bool(self.bot_token and self.default_chat_id)

    async def send_message(
        self, text: str, chat_id: Optional[str] = None, parse_mode: str = "HTML"
    ) -> bool:
        """Send a message via Telegram bot.

        Args:
            text: Message text to send
            chat_id: Chat ID to send to. If not provided, uses default_chat_id
            parse_mode: Parse mode for message formatting ("HTML" or "Markdown")

        Returns:
            True if message sent successfully, False otherwise
        """
        if not self.bot_token:
            logger.error("Cannot send Telegram message: bot token not configured")
            return False

        target_chat_id = chat_id or self.default_chat_id
        if not target_chat_id:
            logger.error("Cannot send Telegram message: chat ID not provided")
            return False

        try:
            bot = Bot(token=self.bot_token)
            await bot.send_message(
                chat_id=target_chat_id,
                text=text,
                parse_mode=parse_mode,
                disable_web_page_preview=True,
            )
            logger.info(f"Telegram message sent to chat {target_chat_id}")
            return True
        except Exception as exc:
            logger.error(f"Failed to send Telegram message: {exc}")
            return False

    async def send_briefing(
        self, score: NarrativeScore, previous: Optional[NarrativeScore] = None
    ) -> bool:
        return await self.send_message(format_daily_briefing(score, previous))

    async def send_alerts(self, alerts: Iterable[Alert]) -> list[tuple[Alert, bool]]:
        """Send each alert in order; returns (alert, delivered) pairs."""
        results: list[tuple[Alert, bool]] = []
        for alert in alerts:
            results.append((alert, await self.send_message(format_alert(alert))))
        return results
