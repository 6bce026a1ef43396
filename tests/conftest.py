"""Shared fakes for the outbound ports."""

import itertools
from datetime import date
from typing import Any, Dict, List, Optional

import pytest

from brainbot.domain.categories import DEFAULT_STATUS
from brainbot.domain.models import AuditRecord, ClassificationResult, Entry

# Tuesday
TODAY = date(2026, 2, 10)


class FakeChat:
    """ChatPort that records every call."""

    def __init__(self):
        self.messages: List[Dict[str, Any]] = []
        self.formatted: List[Dict[str, Any]] = []
        self.callback_answers: List[Dict[str, Any]] = []
        self.inline_answers: List[Dict[str, Any]] = []
        self.files = {"voice-1": "voice/file_1.oga", "photo-big": "photos/big.jpg"}
        self.fail_answer_callback = False

    async def send_message(self, chat_id, text, markdown=False, buttons=None):
        self.messages.append({"chat_id": chat_id, "text": text, "markdown": markdown, "buttons": buttons})
        return {"ok": True}

    async def send_formatted(self, chat_id, markdown):
        self.formatted.append({"chat_id": chat_id, "text": markdown})
        return {"ok": True}

    async def answer_callback(self, callback_id, text=None):
        if self.fail_answer_callback:
            raise RuntimeError("query is too old")
        self.callback_answers.append({"callback_id": callback_id, "text": text})
        return {"ok": True}

    async def answer_inline(self, query_id, results, cache_time=10):
        self.inline_answers.append({"query_id": query_id, "results": results, "cache_time": cache_time})
        return {"ok": True}

    async def get_file(self, file_id):
        return self.files.get(file_id)

    async def download_file(self, file_path):
        return f"bytes:{file_path}".encode()

    @property
    def texts(self) -> List[str]:
        return [m["text"] for m in self.messages]

    @property
    def last(self) -> Dict[str, Any]:
        return self.messages[-1]


class FakeStore:
    """In-memory StorePort + RelationPort."""

    def __init__(self):
        self.entries: Dict[str, Entry] = {}
        self.audit: List[AuditRecord] = []
        self.relations: List[tuple] = []
        self.suggestions: List[Entry] = []
        self.fail_create = False
        self.fail_audit = False
        self.fail_relations = False
        self.count_calls: List[Dict[str, Optional[str]]] = []
        self._ids = itertools.count(1)

    def add(self, category, title, status=None, **kwargs) -> Entry:
        entry = Entry(
            id=f"e{next(self._ids)}",
            category=category,
            title=title,
            status=status if status is not None else DEFAULT_STATUS.get(category, ""),
            **kwargs,
        )
        self.entries[entry.id] = entry
        return entry

    async def create_entry(self, category, title, content=None, priority=None, due_date=None, status=None):
        if self.fail_create:
            raise RuntimeError("database unavailable")
        return self.add(category, title, status=status, content=dict(content or {}),
                        priority=priority, due_date=due_date)

    async def update_entry(self, entry_id, **fields):
        entry = self.entries.get(entry_id)
        if entry is None or entry.archived:
            return None
        for name, value in fields.items():
            setattr(entry, name, value)
        return entry

    async def archive_entry(self, entry_id):
        self.entries[entry_id].archived = True

    async def get_entry(self, entry_id):
        return self.entries.get(entry_id)

    async def search_entries(self, query, limit=10):
        q = query.lower()
        return [e for e in self.entries.values() if q in e.title.lower()][:limit]

    async def count_entries(self, category=None, status=None):
        self.count_calls.append({"category": category, "status": status})
        return sum(
            1 for e in self.entries.values()
            if not e.archived
            and (category is None or e.category == category)
            and (status is None or e.status == status)
        )

    async def create_audit_record(self, record):
        if self.fail_audit:
            raise RuntimeError("inbox log unavailable")
        self.audit.append(record)

    async def suggest_relations(self, entry_id, limit=3, threshold=0.8):
        if self.fail_relations:
            raise RuntimeError("embeddings unavailable")
        return self.suggestions[:limit]

    async def add_relation(self, source_id, target_id, relation_type="related_to"):
        self.relations.append((source_id, target_id, relation_type))


class FakeLanguage:
    """LanguagePort with canned answers."""

    def __init__(self, result: Optional[ClassificationResult] = None):
        self.result = result or ClassificationResult(
            category="Admin", confidence=0.9, fields={"task": "Buy milk"}, reasoning="errand",
        )
        self.transcript = "Call mom tomorrow about the trip"
        self.description = "A whiteboard sketch of the release plan"
        self.classified: List[str] = []
        self.transcribed: List[bytes] = []
        self.fail_classify = False

    async def classify(self, text):
        self.classified.append(text)
        if self.fail_classify:
            raise RuntimeError("model unavailable")
        return self.result

    async def transcribe(self, audio, filename="voice.ogg"):
        self.transcribed.append(audio)
        return self.transcript

    async def describe_image(self, image):
        return self.description


class FakeServices:
    """AppServicesPort with canned answers."""

    def __init__(self):
        self.asked: List[tuple] = []
        self.deleted: List[str] = []
        self.digests: List[str] = []
        self.urls: List[str] = []
        self.fail = False
        self.digest_data: Dict[str, Any] = {"aiSummary": "All quiet.", "counts": {"tasks": 2}}
        self.url_data: Dict[str, Any] = {
            "title": "Attention Is All You Need",
            "one_liner": "Transformers replace recurrence.",
            "full_summary": "A long summary.",
            "key_points": ["Self-attention", "Parallel training"],
            "category": "Reading",
        }

    async def ask_agent(self, question, session_id):
        if self.fail:
            raise RuntimeError("agent down")
        self.asked.append((question, session_id))
        return "42"

    async def fetch_digest(self, kind):
        if self.fail:
            raise RuntimeError("digest down")
        self.digests.append(kind)
        return self.digest_data

    async def process_url(self, url):
        if self.fail:
            raise RuntimeError("ingest down")
        self.urls.append(url)
        return self.url_data

    async def delete_session(self, session_id):
        if self.fail:
            raise RuntimeError("db down")
        self.deleted.append(session_id)


@pytest.fixture
def chat():
    return FakeChat()


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def language():
    return FakeLanguage()


@pytest.fixture
def services():
    return FakeServices()
