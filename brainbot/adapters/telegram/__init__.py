"""Telegram adapters — Bot API client and webhook payload schema."""

from brainbot.adapters.telegram.client import TelegramClient, markdown_to_html
from brainbot.adapters.telegram.schema import TgUpdate

__all__ = [
    "TelegramClient",
    "TgUpdate",
    "markdown_to_html",
]
