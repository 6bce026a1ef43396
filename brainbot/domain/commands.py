"""Slash-command dispatch.

Pure domain logic, no framework dependencies.
"""

import asyncio
import sys
from datetime import date
from typing import Awaitable, Callable, Dict, List, Optional

from brainbot.domain.action_token import encode
from brainbot.domain.capture import TITLE_MAX_CHARS, CaptureService, build_content
from brainbot.domain.categories import (
    STATS_STATUSES,
    STORE_CATEGORIES,
    category_emoji,
    is_active,
)
from brainbot.domain.command_parser import MIN_CAPTURE_LENGTH, parse_command, truncate
from brainbot.domain.date_parser import parse_date_expression
from brainbot.domain.models import Button, Entry
from brainbot.ports.outbound import AppServicesPort, ChatPort, StorePort

# Results shown per search-style command
MAX_LISTED = 5
SEARCH_LIMIT = 10

DIGEST_KINDS = ("daily", "weekly")

HELP_TEXT = "\n".join([
    "*Second Brain Bot*",
    "",
    "Send any text, voice note or photo to capture it.",
    "",
    "*Capture*",
    "/capture <text> — Classify and save a thought",
    "/task <text> — Save a task (no classification)",
    "/idea <text> — Save an idea (no classification)",
    "/remind <when> <what> — Task with a due date",
    "",
    "*Manage*",
    "/done <query> — Mark an item done",
    "/snooze <query> — Push an item's due date",
    "/edit <query> — Change an item's status",
    "/search <query> — Search entries",
    "",
    "*Review*",
    "/ask <question> — Ask your brain",
    "/digest — Daily briefing",
    "/digest weekly — Weekly review",
    "/stats — Counts per category",
    "/clear — Reset conversation",
    "/help — Show this message",
    "",
    "Send a URL to save and summarize it.",
    "Type @botname <query> in any chat to search inline.",
])

REMIND_USAGE = (
    "Usage: /remind <when> <what>\n"
    "Example: /remind tomorrow Call dentist\n"
    "When: today, tomorrow, next week, monday…sunday, in N days, YYYY-MM-DD"
)


def _log(msg: str):
    print(msg, file=sys.stderr)


def session_id_for(chat_id: int) -> str:
    """Deterministic conversation-session key for a chat."""
    return f"telegram-{chat_id}"


def format_entry_line(index: int, entry: Entry) -> str:
    status = f" [{entry.status}]" if entry.status else ""
    due = f" · due {entry.due_date}" if entry.due_date else ""
    return f"{index}. {category_emoji(entry.category)} *{entry.title}*{status}{due}"


Handler = Callable[[int, str], Awaitable[None]]


class CommandDispatcher:
    """Maps ``/name`` to a handler; unknown names fall through to capture."""

    def __init__(
        self,
        chat: ChatPort,
        store: StorePort,
        capture: CaptureService,
        services: Optional[AppServicesPort] = None,
        today: Callable[[], date] = date.today,
    ):
        self._chat = chat
        self._store = store
        self._capture = capture
        self._services = services
        self._today = today
        self._handlers: Dict[str, Handler] = {
            "capture": self._handle_capture,
            "task": self._handle_task,
            "idea": self._handle_idea,
            "remind": self._handle_remind,
            "done": self._handle_done,
            "snooze": self._handle_snooze,
            "edit": self._handle_edit,
            "search": self._handle_search,
            "digest": self._handle_digest,
            "stats": self._handle_stats,
            "ask": self._handle_ask,
            "clear": self._handle_clear,
            "help": self._handle_help,
            "start": self._handle_help,
        }

    @property
    def command_names(self) -> List[str]:
        return list(self._handlers)

    async def dispatch(self, chat_id: int, text: str) -> bool:
        """Run the command in ``text``. Returns False when there is none."""
        command = parse_command(text)
        if not command:
            return False
        handler = self._handlers.get(command.name)
        if handler is None:
            # A mistyped command still carries user intent: capture it
            _log(f"[commands] unknown /{command.name}, capturing raw text")
            await self._capture.capture(chat_id, text)
            return True
        await handler(chat_id, command.args)
        return True

    # -- capture family --

    async def _handle_capture(self, chat_id: int, args: str):
        await self._capture.capture(chat_id, args)

    async def _handle_task(self, chat_id: int, args: str):
        await self._capture.quick_save(
            chat_id, args, "Admin",
            usage=f"Usage: /task <text> (at least {MIN_CAPTURE_LENGTH} characters)",
        )

    async def _handle_idea(self, chat_id: int, args: str):
        await self._capture.quick_save(
            chat_id, args, "Idea",
            usage=f"Usage: /idea <text> (at least {MIN_CAPTURE_LENGTH} characters)",
        )

    async def _handle_remind(self, chat_id: int, args: str):
        if not args:
            await self._chat.send_message(chat_id, REMIND_USAGE)
            return

        parsed = parse_date_expression(args, today=self._today())
        if parsed.date is None:
            await self._chat.send_message(
                chat_id, f"Could not parse date in \"{args}\".\n\n{REMIND_USAGE}",
            )
            return
        title = parsed.remainder.strip()
        if len(title) < MIN_CAPTURE_LENGTH:
            await self._chat.send_message(chat_id, REMIND_USAGE)
            return

        due = parsed.date.date()
        try:
            entry = await self._store.create_entry(
                category="Admin",
                title=title[:TITLE_MAX_CHARS],
                content=build_content("Admin", {}),
                priority="Medium",
                due_date=due.isoformat(),
            )
        except Exception as e:
            _log(f"[commands] /remind failed: {e}")
            await self._chat.send_message(chat_id, "Failed to set reminder. Please try again.")
            return

        await self._chat.send_message(
            chat_id,
            f"⏰ Reminder set for *{due.strftime('%A, %b')} {due.day}*\n\n\"{entry.title}\"",
            markdown=True,
        )

    # -- search family --

    async def _find_active(self, query: str) -> List[Entry]:
        results = await self._store.search_entries(query, limit=SEARCH_LIMIT)
        return [e for e in results if not e.archived and is_active(e.status)][:MAX_LISTED]

    async def _pick_list(self, chat_id: int, query: str, command: str, verb: str, prompt: str):
        """List matching active entries, one next-step button per entry."""
        if not query:
            await self._chat.send_message(chat_id, f"Usage: /{command} <query>")
            return
        try:
            items = await self._find_active(query)
        except Exception as e:
            _log(f"[commands] /{command} search failed: {e}")
            await self._chat.send_message(chat_id, "Search failed. Please try again.")
            return
        if not items:
            await self._chat.send_message(chat_id, f"No active items matching \"{query}\".")
            return

        plural = "s" if len(items) > 1 else ""
        lines = [f"Found {len(items)} item{plural} matching \"{query}\". {prompt}", ""]
        lines.extend(format_entry_line(i, e) for i, e in enumerate(items, 1))
        buttons = [
            [Button(
                text=f"{category_emoji(e.category)} {truncate(e.title, 40)}",
                token=encode(verb, e.id),
            )]
            for e in items
        ]
        await self._chat.send_message(chat_id, "\n".join(lines), markdown=True, buttons=buttons)

    async def _handle_done(self, chat_id: int, args: str):
        await self._pick_list(chat_id, args, "done", "done", "Tap to mark done:")

    async def _handle_snooze(self, chat_id: int, args: str):
        await self._pick_list(chat_id, args, "snooze", "snzp", "⏰ Select item to snooze:")

    async def _handle_edit(self, chat_id: int, args: str):
        await self._pick_list(chat_id, args, "edit", "edtp", "✏️ Select item to edit:")

    async def _handle_search(self, chat_id: int, args: str):
        if not args:
            await self._chat.send_message(chat_id, "Usage: /search <query>")
            return
        try:
            results = await self._store.search_entries(args, limit=SEARCH_LIMIT)
        except Exception as e:
            _log(f"[commands] /search failed: {e}")
            await self._chat.send_message(chat_id, "Search failed. Please try again.")
            return
        results = [e for e in results if not e.archived][:MAX_LISTED]
        if not results:
            await self._chat.send_message(chat_id, f"No results for \"{args}\".")
            return

        lines = [f"🔍 Results for \"{args}\":", ""]
        lines.extend(format_entry_line(i, e) for i, e in enumerate(results, 1))
        await self._chat.send_message(chat_id, "\n".join(lines), markdown=True)

    # -- review family --

    async def _handle_digest(self, chat_id: int, args: str):
        kind = (args or "daily").strip().lower()
        if kind not in DIGEST_KINDS:
            await self._chat.send_message(chat_id, "Usage: /digest [daily|weekly]")
            return
        if not self._services:
            await self._chat.send_message(chat_id, "Digest is not available.")
            return

        await self._chat.send_message(chat_id, f"Generating {kind} digest...")
        try:
            data = await self._services.fetch_digest(kind)
        except Exception as e:
            _log(f"[commands] /digest {kind} failed: {e}")
            await self._chat.send_message(chat_id, "Digest failed. Please try again.")
            return

        if kind == "weekly":
            header = "📊 *Weekly Review*"
        else:
            counts = data.get("counts") or {}
            parts = []
            for key, label in (("projects", "projects"), ("tasks", "tasks"), ("followups", "follow-ups")):
                if counts.get(key):
                    parts.append(f"{counts[key]} {label}")
            header = "☀️ *Daily Briefing*" + (f" ({', '.join(parts)})" if parts else "")

        summary = data.get("aiSummary") or "No data for this period."
        await self._chat.send_formatted(chat_id, f"{header}\n\n{summary}")

    async def _handle_stats(self, chat_id: int, args: str):
        """Seven independent read-only counts, run concurrently."""
        try:
            counts = await asyncio.gather(
                *(self._store.count_entries(category=c) for c in STORE_CATEGORIES),
                *(self._store.count_entries(status=s) for s in STATS_STATUSES),
            )
        except Exception as e:
            _log(f"[commands] /stats failed: {e}")
            await self._chat.send_message(chat_id, "Stats failed. Please try again.")
            return

        by_category = dict(zip(STORE_CATEGORIES, counts[:len(STORE_CATEGORIES)]))
        by_status = dict(zip(STATS_STATUSES, counts[len(STORE_CATEGORIES):]))
        total = sum(by_category.values())

        lines = ["📊 *Second Brain Stats*", ""]
        for category, count in by_category.items():
            lines.append(f"{category_emoji(category)} {category}: {count}")
        lines.append("")
        lines.append(f"Total: {total}")
        for status, count in by_status.items():
            lines.append(f"🏁 {status}: {count}")
        await self._chat.send_message(chat_id, "\n".join(lines), markdown=True)

    async def _handle_ask(self, chat_id: int, args: str):
        if not args:
            await self._chat.send_message(chat_id, "Usage: /ask <your question>")
            return
        if not self._services:
            await self._chat.send_message(chat_id, "Agent is not available.")
            return

        await self._chat.send_message(chat_id, "🤔 Thinking...")
        try:
            answer = await self._services.ask_agent(args, session_id=session_id_for(chat_id))
        except Exception as e:
            _log(f"[commands] /ask failed: {e}")
            await self._chat.send_message(chat_id, "Failed to get answer. Please try again.")
            return
        await self._chat.send_formatted(chat_id, answer or "No response from agent.")

    async def _handle_clear(self, chat_id: int, args: str):
        if not self._services:
            await self._chat.send_message(chat_id, "Failed to clear conversation.")
            return
        try:
            await self._services.delete_session(session_id_for(chat_id))
        except Exception as e:
            _log(f"[commands] /clear failed: {e}")
            await self._chat.send_message(chat_id, "Failed to clear conversation.")
            return
        await self._chat.send_message(chat_id, "🗑️ Conversation cleared.")

    async def _handle_help(self, chat_id: int, args: str):
        await self._chat.send_message(chat_id, HELP_TEXT, markdown=True)
