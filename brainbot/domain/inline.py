"""Inline search-as-you-type."""

import sys
from typing import Any, Dict, List

from brainbot.domain.categories import category_emoji
from brainbot.domain.models import Entry
from brainbot.ports.inbound import InlineQuery
from brainbot.ports.outbound import ChatPort, StorePort

MIN_QUERY_LENGTH = 2
MAX_RESULTS = 5
# Fetched before archived entries are dropped
SEARCH_LIMIT = 10

# Seconds the platform may cache an answer
EMPTY_CACHE_SECONDS = 5
RESULTS_CACHE_SECONDS = 10


def _log(msg: str):
    print(msg, file=sys.stderr)


def to_article(entry: Entry) -> Dict[str, Any]:
    """One suggestion card with a ready-to-send message body."""
    emoji = category_emoji(entry.category)
    details = [entry.category]
    if entry.status:
        details.append(entry.status)
    if entry.due_date:
        details.append(f"due {entry.due_date}")

    body = [f"{emoji} {entry.title}", " · ".join(details)]
    return {
        "type": "article",
        "id": entry.id,
        "title": f"{emoji} {entry.title}",
        "description": " · ".join(details),
        "input_message_content": {"message_text": "\n".join(body)},
    }


class InlineQueryHandler:
    def __init__(self, chat: ChatPort, store: StorePort):
        self._chat = chat
        self._store = store

    async def handle(self, query: InlineQuery) -> List[Dict[str, Any]]:
        text = (query.text or "").strip()
        if len(text) < MIN_QUERY_LENGTH:
            await self._chat.answer_inline(query.query_id, [], cache_time=EMPTY_CACHE_SECONDS)
            return []

        try:
            entries = await self._store.search_entries(text, limit=SEARCH_LIMIT)
        except Exception as e:
            _log(f"[inline] search failed for {text!r}: {e}")
            await self._chat.answer_inline(query.query_id, [], cache_time=EMPTY_CACHE_SECONDS)
            return []

        results = [to_article(e) for e in entries if not e.archived][:MAX_RESULTS]
        await self._chat.answer_inline(
            query.query_id, results, cache_time=RESULTS_CACHE_SECONDS,
        )
        return results
