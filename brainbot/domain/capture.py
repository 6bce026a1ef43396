"""Capture pipeline — free text to a classified, stored entry.

Pure domain logic, no framework dependencies.
"""

import sys
from datetime import date
from typing import Any, Dict, Optional

from brainbot.domain.action_token import encode
from brainbot.domain.categories import CATEGORIES, category_emoji
from brainbot.domain.command_parser import (
    MIN_CAPTURE_LENGTH,
    confidence_bar,
    confidence_pct,
)
from brainbot.domain.models import AuditRecord, Button, ButtonRows, ClassificationResult, Entry
from brainbot.ports.outbound import ChatPort, LanguagePort, RelationPort, StorePort

TITLE_MAX_CHARS = 100

# Relation suggestions made after each capture
RELATION_LIMIT = 3
RELATION_THRESHOLD = 0.8

CAPTURE_FAILED = "Failed to capture. Please try again."


def _log(msg: str):
    print(msg, file=sys.stderr)


def derive_title(fields: Dict[str, str], text: str) -> str:
    """Richest extracted name, falling back to the raw text."""
    for key in ("name", "title", "task"):
        value = (fields.get(key) or "").strip()
        if value:
            return value
    return text.strip()[:TITLE_MAX_CHARS]


def build_content(
    category: str,
    fields: Dict[str, str],
    today: Optional[date] = None,
) -> Dict[str, Any]:
    """Category-specific structured content for a new entry."""
    today = today or date.today()
    content: Dict[str, Any] = {}
    if category == "Admin":
        content["adminCategory"] = "Home"
    elif category == "Project":
        content["area"] = "Work"
        if fields.get("next_action"):
            content["nextAction"] = fields["next_action"]
    elif category == "Idea":
        content["ideaCategory"] = "Life"
        if fields.get("raw_insight"):
            content["rawInsight"] = fields["raw_insight"]
    elif category == "People":
        content["lastContact"] = today.isoformat()
        if fields.get("company"):
            content["company"] = fields["company"]
        if fields.get("context"):
            content["context"] = fields["context"]
    return content


def default_priority(category: str, fields: Dict[str, str]) -> Optional[str]:
    if category == "Admin":
        return fields.get("priority") or "Medium"
    if category == "Project":
        return "Medium"
    return None


def recategorize_buttons(entry_id: str) -> ButtonRows:
    """One button per category, the assigned one included."""
    return [[
        Button(text=f"{category_emoji(c)} {c}", token=encode("recat", entry_id, c))
        for c in CATEGORIES
    ]]


class CaptureService:
    """Classifies captures, stores them, and replies with recategorize buttons."""

    def __init__(
        self,
        chat: ChatPort,
        store: StorePort,
        language: LanguagePort,
        relations: Optional[RelationPort] = None,
    ):
        self._chat = chat
        self._store = store
        self._language = language
        self._relations = relations

    async def capture(self, chat_id: int, text: str) -> Optional[Entry]:
        """Full pipeline: classify, store, enrich, reply."""
        text = (text or "").strip()
        if len(text) < MIN_CAPTURE_LENGTH:
            await self._chat.send_message(
                chat_id,
                f"Please provide at least {MIN_CAPTURE_LENGTH} characters to capture.",
            )
            return None

        await self._chat.send_message(chat_id, "🧠 Classifying...")

        try:
            result = await self._language.classify(text)
            title = derive_title(result.fields, text)
            entry = await self._store.create_entry(
                category=result.category,
                title=title,
                content=build_content(result.category, result.fields),
                priority=default_priority(result.category, result.fields),
            )
        except Exception as e:
            _log(f"[capture] failed for {text[:50]!r}: {e}")
            await self._chat.send_message(chat_id, CAPTURE_FAILED)
            return None

        await self._enrich(entry, text, result)

        pct = confidence_pct(result.confidence)
        reply = (
            f"{category_emoji(entry.category)} Captured as *{entry.category}*\n\n"
            f"\"{entry.title}\"\n\n"
            f"Confidence: {confidence_bar(result.confidence)} {pct}%"
        )
        await self._chat.send_message(
            chat_id, reply, markdown=True, buttons=recategorize_buttons(entry.id),
        )
        return entry

    async def quick_save(
        self,
        chat_id: int,
        text: str,
        category: str,
        usage: str,
    ) -> Optional[Entry]:
        """Save directly into ``category``; no classification call."""
        text = (text or "").strip()
        if len(text) < MIN_CAPTURE_LENGTH:
            await self._chat.send_message(chat_id, usage)
            return None

        fields = {"raw_insight": text} if category == "Idea" else {}
        # Nothing was classified; the audit log records a manual placement
        result = ClassificationResult(
            category=category, confidence=1.0, fields=fields, reasoning="manual",
        )
        try:
            entry = await self._store.create_entry(
                category=category,
                title=text[:TITLE_MAX_CHARS],
                content=build_content(category, fields),
                priority=default_priority(category, fields),
            )
        except Exception as e:
            _log(f"[capture] quick save to {category} failed: {e}")
            await self._chat.send_message(chat_id, CAPTURE_FAILED)
            return None

        await self._enrich(entry, text, result)

        label = "Task" if category == "Admin" else category
        reply = (
            f"{category_emoji(category)} {label} saved\n\n"
            f"\"{entry.title}\"\n\n"
            f"Confidence: 100% (manual)"
        )
        await self._chat.send_message(
            chat_id, reply, markdown=True, buttons=recategorize_buttons(entry.id),
        )
        return entry

    async def _enrich(self, entry: Entry, raw_input: str, result: ClassificationResult):
        """Best-effort audit record and relation links. Failures never surface."""
        try:
            await self._store.create_audit_record(AuditRecord(
                raw_input=raw_input,
                category=result.category,
                confidence=result.confidence,
                destination_id=entry.id,
                status="Processed",
            ))
        except Exception as e:
            _log(f"[capture] audit record skipped for {entry.id}: {e}")

        if not self._relations:
            return
        try:
            suggestions = await self._relations.suggest_relations(
                entry.id, limit=RELATION_LIMIT, threshold=RELATION_THRESHOLD,
            )
            for related in suggestions[:RELATION_LIMIT]:
                await self._relations.add_relation(entry.id, related.id, "related_to")
        except Exception as e:
            _log(f"[capture] relation suggestions skipped for {entry.id}: {e}")
