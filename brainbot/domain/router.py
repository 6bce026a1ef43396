"""UpdateRouter — top-level entry point for inbound updates.

Classifies each update (callback press, inline query, voice, photo, text),
enforces the single allow-listed identity, and fans out to the capture
pipeline and the command/callback/inline dispatchers. ``route`` never
raises: the webhook must acknowledge every update.
"""

import sys
from datetime import date
from typing import Callable, Optional

from brainbot.domain.callbacks import CallbackDispatcher
from brainbot.domain.capture import CaptureService
from brainbot.domain.command_parser import MIN_CAPTURE_LENGTH, extract_url
from brainbot.domain.commands import CommandDispatcher
from brainbot.domain.inline import EMPTY_CACHE_SECONDS, InlineQueryHandler
from brainbot.infrastructure.rate_limit import RateLimiter
from brainbot.ports.inbound import (
    CallbackPress,
    InlineQuery,
    PhotoMessage,
    TextMessage,
    Update,
    VoiceMessage,
)
from brainbot.ports.outbound import (
    AppServicesPort,
    ChatPort,
    LanguagePort,
    RelationPort,
    StorePort,
)

UNAUTHORIZED = "Unauthorized. This bot is private."
RATE_LIMITED = "⏳ Too many requests. Try again shortly."
GENERIC_FAILURE = "Something went wrong. Please try again."


def _log(msg: str):
    print(msg, file=sys.stderr)


def chat_id_of(update: Optional[Update]) -> Optional[int]:
    """Chat to notify about a failure, if the update came from one."""
    if isinstance(update, (TextMessage, VoiceMessage, PhotoMessage, CallbackPress)):
        return update.chat_id
    return None


class UpdateRouter:
    """Stateless per-update routing over the outbound ports."""

    def __init__(
        self,
        chat: ChatPort,
        store: StorePort,
        language: LanguagePort,
        relations: Optional[RelationPort] = None,
        services: Optional[AppServicesPort] = None,
        allowed_chat_id: str = "",
        rate_limiter: Optional[RateLimiter] = None,
        today: Callable[[], date] = date.today,
    ):
        self._chat = chat
        self._language = language
        self._services = services
        self._allowed_chat_id = str(allowed_chat_id or "").strip()
        self._rate_limiter = rate_limiter
        self.capture = CaptureService(chat, store, language, relations)
        self.commands = CommandDispatcher(chat, store, self.capture, services, today=today)
        self.callbacks = CallbackDispatcher(chat, store, today=today)
        self.inline = InlineQueryHandler(chat, store)

    def is_authorized(self, identity: int) -> bool:
        # No configured identity: development mode, everyone allowed
        if not self._allowed_chat_id:
            return True
        return str(identity) == self._allowed_chat_id

    def _within_rate_limit(self, identity: int) -> bool:
        if not self._rate_limiter:
            return True
        result = self._rate_limiter.check(f"chat:{identity}")
        if not result.allowed:
            _log(f"[router] rate limited {identity}, retry in {result.reset_seconds:.0f}s")
        return result.allowed

    async def route(self, update: Optional[Update]) -> None:
        """Handle one update. Never raises."""
        try:
            await self._route(update)
        except Exception as e:
            _log(f"[router] unhandled error for {type(update).__name__}: {e}")
            chat_id = chat_id_of(update)
            if chat_id is None:
                return
            try:
                await self._chat.send_message(chat_id, GENERIC_FAILURE)
            except Exception as notify_error:
                _log(f"[router] failure notice not sent to {chat_id}: {notify_error}")

    async def _route(self, update: Optional[Update]) -> None:
        if isinstance(update, CallbackPress):
            if not self.is_authorized(update.chat_id):
                await self._chat.answer_callback(update.callback_id, "Unauthorized")
                return
            if not self._within_rate_limit(update.chat_id):
                await self._chat.answer_callback(update.callback_id, RATE_LIMITED)
                return
            await self.callbacks.dispatch(update)
            return

        if isinstance(update, InlineQuery):
            # Inline queries come from outside any chat: authorize the user
            if not self.is_authorized(update.user_id) or not self._within_rate_limit(update.user_id):
                await self._chat.answer_inline(update.query_id, [], cache_time=EMPTY_CACHE_SECONDS)
                return
            await self.inline.handle(update)
            return

        chat_id = chat_id_of(update)
        if chat_id is None:
            return

        if not self.is_authorized(chat_id):
            await self._chat.send_message(chat_id, UNAUTHORIZED)
            return
        if not self._within_rate_limit(chat_id):
            await self._chat.send_message(chat_id, RATE_LIMITED)
            return

        if isinstance(update, VoiceMessage):
            await self._handle_voice(update)
        elif isinstance(update, PhotoMessage):
            await self._handle_photo(update)
        elif isinstance(update, TextMessage):
            await self._handle_text(update)

    async def _handle_text(self, msg: TextMessage):
        if await self.commands.dispatch(msg.chat_id, msg.text):
            return
        url = extract_url(msg.text, msg.entities)
        if url and self._services:
            await self._handle_url(msg.chat_id, url)
            return
        await self.capture.capture(msg.chat_id, msg.text)

    async def _download(self, file_id: str) -> bytes:
        path = await self._chat.get_file(file_id)
        if not path:
            raise RuntimeError(f"file {file_id} has no download path")
        return await self._chat.download_file(path)

    async def _handle_voice(self, msg: VoiceMessage):
        await self._chat.send_message(msg.chat_id, "🎙️ Transcribing...")
        try:
            audio = await self._download(msg.file_id)
            text = await self._language.transcribe(audio)
        except Exception as e:
            _log(f"[router] voice transcription failed ({msg.duration}s): {e}")
            await self._chat.send_message(
                msg.chat_id, "Failed to transcribe voice message. Please try again.",
            )
            return

        text = (text or "").strip()
        if not text:
            await self._chat.send_message(msg.chat_id, "Could not understand the voice message.")
            return
        await self._chat.send_message(msg.chat_id, f"🎙️ \"{text}\"")
        await self.capture.capture(msg.chat_id, text)

    async def _handle_photo(self, msg: PhotoMessage):
        caption = (msg.caption or "").strip()
        if len(caption) >= MIN_CAPTURE_LENGTH:
            await self.capture.capture(msg.chat_id, caption)
            return
        if not msg.file_ids:
            return

        await self._chat.send_message(msg.chat_id, "🖼️ Looking at the image...")
        try:
            # Last size is the largest
            image = await self._download(msg.file_ids[-1])
            description = await self._language.describe_image(image)
        except Exception as e:
            _log(f"[router] image description failed: {e}")
            await self._chat.send_message(msg.chat_id, "Failed to process image. Please try again.")
            return

        await self.capture.quick_save(
            msg.chat_id, description, "Idea", usage="Could not describe the image.",
        )

    async def _handle_url(self, chat_id: int, url: str):
        await self._chat.send_message(chat_id, "🔗 Processing URL...")
        try:
            data = await self._services.process_url(url)
        except Exception as e:
            _log(f"[router] URL ingestion failed for {url}: {e}")
            await self._chat.send_message(chat_id, "Failed to process URL. Please try again.")
            return

        if data.get("status") == "error":
            await self._chat.send_message(chat_id, f"Error: {data.get('error', 'unknown')}")
            return

        lines = [f"💡 *{data.get('title') or 'Untitled'}*", ""]
        if data.get("one_liner"):
            lines += [data["one_liner"], ""]
        if data.get("full_summary"):
            lines += [data["full_summary"][:500], ""]
        key_points = data.get("key_points") or []
        if key_points:
            lines.append("*Key points:*")
            lines.extend(f"• {p}" for p in key_points[:5])
            lines.append("")
        lines.append(f"Saved as *{data.get('category') or 'Idea'}*")
        await self._chat.send_message(chat_id, "\n".join(lines), markdown=True)
