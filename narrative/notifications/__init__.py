"""Briefing, alert and Telegram delivery for narrative scores."""

from narrative.notifications.alerts import Alert, AlertKind, detect_alerts, format_alert
from narrative.notifications.briefing import escape_html, format_daily_briefing
from narrative.notifications.telegram import TelegramClient

__all__ = [
    "Alert",
    "AlertKind",
    "TelegramClient",
    "detect_alerts",
    "escape_html",
    "format_alert",
    "format_daily_briefing",
]
