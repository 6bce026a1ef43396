"""Button-press dispatch — one handler per callback token verb.

Each multi-step flow is a function from the pressed token to the next
prompt plus its token set; nothing is remembered between presses, and
entries are re-read from the store whenever their current state matters.
Pure domain logic, no framework dependencies.
"""

import sys
from datetime import date, timedelta
from typing import Awaitable, Callable, Dict, Optional, Tuple

from brainbot.domain.action_token import ActionTokenError, decode, encode
from brainbot.domain.categories import (
    ALL_STATUSES,
    CATEGORIES,
    category_emoji,
    done_status,
    status_options,
)
from brainbot.domain.models import ActionToken, Button
from brainbot.ports.inbound import CallbackPress
from brainbot.ports.outbound import ChatPort, StorePort

# (label, days) offered after a snooze pick
SNOOZE_CHOICES: Tuple[Tuple[str, int], ...] = (
    ("Tomorrow", 1),
    ("3 days", 3),
    ("1 week", 7),
    ("1 month", 30),
)
SNOOZE_DAYS = frozenset(days for _, days in SNOOZE_CHOICES)

NOT_FOUND = "⚠️ Entry not found."


def _log(msg: str):
    print(msg, file=sys.stderr)


Handler = Callable[[CallbackPress, ActionToken], Awaitable[None]]


class CallbackDispatcher:
    """Decodes a pressed button's token and runs its verb's handler."""

    def __init__(
        self,
        chat: ChatPort,
        store: StorePort,
        today: Callable[[], date] = date.today,
    ):
        self._chat = chat
        self._store = store
        self._today = today
        self._handlers: Dict[str, Handler] = {
            "done": self._handle_done,
            "recat": self._handle_recategorize,
            "snzp": self._handle_snooze_pick,
            "snz": self._handle_snooze_apply,
            "edtp": self._handle_edit_pick,
            "est": self._handle_edit_apply,
        }

    async def dispatch(self, press: CallbackPress) -> None:
        try:
            token = decode(press.token)
        except ActionTokenError as e:
            _log(f"[callbacks] rejected token {press.token!r}: {e}")
            await self._ack(press, "Unknown action")
            return
        await self._handlers[token.verb](press, token)

    async def _ack(self, press: CallbackPress, text: Optional[str] = None):
        """Dismiss the client's spinner. Separate from any store mutation."""
        try:
            await self._chat.answer_callback(press.callback_id, text)
        except Exception as e:
            _log(f"[callbacks] ack failed for {press.callback_id}: {e}")

    async def _handle_done(self, press: CallbackPress, token: ActionToken):
        await self._ack(press, "Marking done...")
        entry = await self._store.get_entry(token.entry_id)
        if not entry or entry.archived:
            await self._chat.send_message(press.chat_id, NOT_FOUND)
            return
        updated = await self._store.update_entry(entry.id, status=done_status(entry.category))
        if updated is None:
            await self._chat.send_message(press.chat_id, NOT_FOUND)
            return
        await self._chat.send_message(
            press.chat_id, f"✅ Done! *{entry.title}*", markdown=True,
        )

    async def _handle_recategorize(self, press: CallbackPress, token: ActionToken):
        """Archive + recreate: content shape depends on the category."""
        target = token.param
        if target not in CATEGORIES:
            await self._ack(press, "Unknown category")
            return
        await self._ack(press, f"Moving to {target}...")

        entry = await self._store.get_entry(token.entry_id)
        if not entry or entry.archived:
            await self._chat.send_message(press.chat_id, NOT_FOUND)
            return
        await self._store.archive_entry(entry.id)
        await self._store.create_entry(
            category=target,
            title=entry.title,
            content=dict(entry.content),
            priority=entry.priority,
            due_date=entry.due_date,
        )
        await self._chat.send_message(
            press.chat_id, f"{category_emoji(target)} Moved → {target}", markdown=True,
        )

    async def _handle_snooze_pick(self, press: CallbackPress, token: ActionToken):
        await self._ack(press)
        buttons = [[
            Button(text=label, token=encode("snz", token.entry_id, str(days)))
            for label, days in SNOOZE_CHOICES
        ]]
        await self._chat.send_message(
            press.chat_id, "⏰ Snooze for how long?", buttons=buttons,
        )

    async def _handle_snooze_apply(self, press: CallbackPress, token: ActionToken):
        try:
            days = int(token.param or "")
        except ValueError:
            days = 0
        if days not in SNOOZE_DAYS:
            await self._ack(press, "Unknown duration")
            return
        await self._ack(press, "Snoozing...")

        due = self._today() + timedelta(days=days)
        updated = await self._store.update_entry(token.entry_id, due_date=due.isoformat())
        if updated is None:
            await self._chat.send_message(press.chat_id, NOT_FOUND)
            return
        await self._chat.send_message(
            press.chat_id,
            f"⏰ Snoozed until *{due.strftime('%A')}*, {due.strftime('%b')} {due.day}",
            markdown=True,
        )

    async def _handle_edit_pick(self, press: CallbackPress, token: ActionToken):
        await self._ack(press)
        entry = await self._store.get_entry(token.entry_id)
        if not entry or entry.archived:
            await self._chat.send_message(press.chat_id, NOT_FOUND)
            return
        options = status_options(entry.category)
        if not options:
            await self._chat.send_message(
                press.chat_id, f"No status options for {entry.category}.",
            )
            return
        buttons = [[
            Button(text=status, token=encode("est", entry.id, status))
            for status in options
        ]]
        current = entry.status or "none"
        await self._chat.send_message(
            press.chat_id,
            f"✏️ *{entry.title}*\nCurrent status: {current}\n\nPick a new status:",
            markdown=True,
            buttons=buttons,
        )

    async def _handle_edit_apply(self, press: CallbackPress, token: ActionToken):
        status = token.param
        if status not in ALL_STATUSES:
            await self._ack(press, "Unknown status")
            return
        entry = await self._store.get_entry(token.entry_id)
        if not entry or entry.archived:
            await self._ack(press)
            await self._chat.send_message(press.chat_id, NOT_FOUND)
            return
        # Status must belong to the entry's own category
        if status not in status_options(entry.category):
            await self._ack(press, "Unknown status")
            return
        await self._ack(press, "Updating...")
        updated = await self._store.update_entry(entry.id, status=status)
        if updated is None:
            await self._chat.send_message(press.chat_id, NOT_FOUND)
            return
        await self._chat.send_message(
            press.chat_id, f"✏️ Status → *{status}*", markdown=True,
        )
