"""Telegram Bot API client using aiohttp — implements ChatPort."""

import html
import re
import sys
from typing import Any, Dict, List, Optional

import aiohttp

from brainbot.config import CONFIG
from brainbot.domain.models import ButtonRows

TELEGRAM_API_BASE = "https://api.telegram.org"

# Stay under the platform's 4096-char hard limit
MAX_MESSAGE_CHARS = 4000

ALLOWED_UPDATES = ["message", "callback_query", "inline_query"]

# Substring of the API error when parse_mode markup is malformed
PARSE_ERROR = "can't parse entities"


def _log(msg: str):
    print(msg, file=sys.stderr)


def truncate_message(text: str, limit: int = MAX_MESSAGE_CHARS) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


def to_inline_keyboard(buttons: ButtonRows) -> Dict[str, Any]:
    return {
        "inline_keyboard": [
            [{"text": b.text, "callback_data": b.token} for b in row]
            for row in buttons
        ],
    }


_CODE_BLOCK_RE = re.compile(r"```(?:\w+)?\n?(.*?)```", re.DOTALL)
_INLINE_CODE_RE = re.compile(r"`([^`\n]+)`")
_LINK_RE = re.compile(r"\[([^\]]+)\]\((https?://[^)\s]+)\)")
_HEADING_RE = re.compile(r"^#{1,6}[ \t]+(.+)$", re.MULTILINE)
_BOLD_RE = re.compile(r"\*\*(.+?)\*\*|(?<!\w)\*(?!\s)(.+?)(?<!\s)\*(?!\w)")
_ITALIC_RE = re.compile(r"(?<!\w)_(?!\s)(.+?)(?<!\s)_(?!\w)")
_BULLET_RE = re.compile(r"^[ \t]*[-*][ \t]+", re.MULTILINE)


def markdown_to_html(markdown: str) -> str:
    """Convert the Markdown subset agents write into Telegram HTML.

    Code is pulled out first so nothing inside it is reformatted.
    """
    stash: List[str] = []

    def _keep(fragment: str) -> str:
        stash.append(fragment)
        return f"\x00{len(stash) - 1}\x00"

    text = _CODE_BLOCK_RE.sub(
        lambda m: _keep(f"<pre>{html.escape(m.group(1).rstrip())}</pre>"), markdown,
    )
    text = _INLINE_CODE_RE.sub(lambda m: _keep(f"<code>{html.escape(m.group(1))}</code>"), text)
    text = html.escape(text, quote=False)
    text = _LINK_RE.sub(lambda m: f'<a href="{m.group(2)}">{m.group(1)}</a>', text)
    text = _HEADING_RE.sub(lambda m: f"<b>{m.group(1).strip()}</b>", text)
    text = _BULLET_RE.sub("• ", text)
    text = _BOLD_RE.sub(lambda m: f"<b>{m.group(1) or m.group(2)}</b>", text)
    text = _ITALIC_RE.sub(lambda m: f"<i>{m.group(1)}</i>", text)
    return re.sub(r"\x00(\d+)\x00", lambda m: stash[int(m.group(1))], text)


class TelegramClient:
    """Async Telegram Bot API client. Non-ok responses raise RuntimeError."""

    def __init__(self, bot_token: Optional[str] = None):
        self._token = bot_token if bot_token is not None else CONFIG["telegram_bot_token"]

    @property
    def is_configured(self) -> bool:
        return bool(self._token)

    def _url(self, method: str) -> str:
        return f"{TELEGRAM_API_BASE}/bot{self._token}/{method}"

    def file_url(self, file_path: str) -> str:
        return f"{TELEGRAM_API_BASE}/file/bot{self._token}/{file_path}"

    async def _call(self, method: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        async with aiohttp.ClientSession() as session:
            async with session.post(self._url(method), json=payload or {}) as resp:
                data = await resp.json()
        if not data.get("ok"):
            description = data.get("description", str(data))
            _log(f"[telegram] {method} failed: {description}")
            raise RuntimeError(description)
        return data

    # -- ChatPort --

    async def send_message(
        self,
        chat_id: int,
        text: str,
        markdown: bool = False,
        buttons: Optional[ButtonRows] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "chat_id": chat_id,
            "text": truncate_message(text),
            "disable_web_page_preview": True,
        }
        if buttons:
            payload["reply_markup"] = to_inline_keyboard(buttons)
        if not markdown:
            return await self._call("sendMessage", payload)

        try:
            return await self._call("sendMessage", {**payload, "parse_mode": "Markdown"})
        except RuntimeError as e:
            # Entry titles are user text; a stray _ or * breaks legacy Markdown
            if PARSE_ERROR not in str(e):
                raise
            _log(f"[telegram] resending to {chat_id} as plain text")
            return await self._call("sendMessage", payload)

    async def send_formatted(self, chat_id: int, markdown: str) -> Dict[str, Any]:
        """Send agent-written Markdown as HTML, plain text if Telegram rejects it."""
        try:
            return await self._call("sendMessage", {
                "chat_id": chat_id,
                "text": truncate_message(markdown_to_html(markdown)),
                "parse_mode": "HTML",
                "disable_web_page_preview": True,
            })
        except RuntimeError:
            return await self.send_message(chat_id, markdown)

    async def answer_callback(self, callback_id: str, text: Optional[str] = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"callback_query_id": callback_id}
        if text:
            payload["text"] = text
        return await self._call("answerCallbackQuery", payload)

    async def answer_inline(
        self, query_id: str, results: List[Dict[str, Any]], cache_time: int = 10,
    ) -> Dict[str, Any]:
        return await self._call("answerInlineQuery", {
            "inline_query_id": query_id,
            "results": results,
            "cache_time": cache_time,
            "is_personal": True,
        })

    async def get_file(self, file_id: str) -> Optional[str]:
        data = await self._call("getFile", {"file_id": file_id})
        return (data.get("result") or {}).get("file_path")

    async def download_file(self, file_path: str) -> bytes:
        async with aiohttp.ClientSession() as session:
            async with session.get(self.file_url(file_path)) as resp:
                if resp.status != 200:
                    raise RuntimeError(f"file download failed: HTTP {resp.status}")
                return await resp.read()

    # -- webhook management --

    async def set_webhook(self, url: str, secret_token: str = "") -> Dict[str, Any]:
        payload: Dict[str, Any] = {"url": url, "allowed_updates": ALLOWED_UPDATES}
        if secret_token:
            payload["secret_token"] = secret_token
        return await self._call("setWebhook", payload)

    async def delete_webhook(self) -> Dict[str, Any]:
        return await self._call("deleteWebhook")

    async def get_webhook_info(self) -> Dict[str, Any]:
        return await self._call("getWebhookInfo")

    async def set_my_commands(self, commands: List[Dict[str, str]]) -> Dict[str, Any]:
        return await self._call("setMyCommands", {"commands": commands})
