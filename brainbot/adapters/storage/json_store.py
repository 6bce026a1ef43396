"""JSON file-based storage adapter — implements StorePort and RelationPort."""

import asyncio
import json
import math
import os
import re
import tempfile
import uuid
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from brainbot.domain.categories import DEFAULT_STATUS
from brainbot.domain.models import AuditRecord, Entry

ENTRIES_KEY = "entries"
AUDIT_KEY = "inbox_log"
RELATIONS_KEY = "relations"

UPDATABLE_FIELDS = frozenset({"title", "status", "priority", "content", "due_date", "category"})

_WORD_RE = re.compile(r"\w+", re.UNICODE)


class JsonStorage:
    """Keyed JSON lists on disk, one file per key."""

    def __init__(self, storage_dir: str = "memory"):
        self._storage_dir = Path(storage_dir)
        self._storage_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self._storage_dir / f"{key}.json"

    def load(self, key: str) -> list:
        path = self._path(key)
        if not path.exists():
            return []
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            return raw if isinstance(raw, list) else []
        except ValueError:
            return []

    def save(self, key: str, data: list) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        content = json.dumps(data, ensure_ascii=False, indent=2)
        # Atomic write
        fd, tmp_path = tempfile.mkstemp(dir=str(path.parent), suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            os.replace(tmp_path, str(path))
        except BaseException:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise


def _tokens(text: str) -> Counter:
    return Counter(w.lower() for w in _WORD_RE.findall(text or ""))


def _entry_text(entry: Entry) -> str:
    parts = [entry.title]
    parts.extend(str(v) for v in entry.content.values() if isinstance(v, (str, int, float)))
    return " ".join(parts)


def cosine_similarity(a: Counter, b: Counter) -> float:
    """Cosine of two bag-of-words vectors; 0.0 when either is empty."""
    if not a or not b:
        return 0.0
    dot = sum(count * b[word] for word, count in a.items() if word in b)
    norm = math.sqrt(sum(c * c for c in a.values())) * math.sqrt(sum(c * c for c in b.values()))
    return dot / norm if norm else 0.0


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class JsonEntryStore:
    """Entry store over JsonStorage. Writes are serialized with one lock."""

    def __init__(self, storage_dir: str = "memory"):
        self._storage = JsonStorage(storage_dir)
        self._lock = asyncio.Lock()

    def _entries(self) -> List[Entry]:
        return [Entry.from_dict(d) for d in self._storage.load(ENTRIES_KEY)]

    def _save_entries(self, entries: List[Entry]) -> None:
        self._storage.save(ENTRIES_KEY, [e.to_dict() for e in entries])

    # -- StorePort --

    async def create_entry(
        self,
        category: str,
        title: str,
        content: Optional[Dict[str, Any]] = None,
        priority: Optional[str] = None,
        due_date: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Entry:
        entry = Entry(
            id=uuid.uuid4().hex,
            category=category,
            title=title,
            status=status or DEFAULT_STATUS.get(category, ""),
            priority=priority,
            content=dict(content or {}),
            due_date=due_date,
            created_at=_now(),
        )
        async with self._lock:
            entries = self._entries()
            entries.append(entry)
            self._save_entries(entries)
        return entry

    async def update_entry(self, entry_id: str, **fields: Any) -> Optional[Entry]:
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"cannot update fields: {', '.join(sorted(unknown))}")
        async with self._lock:
            entries = self._entries()
            for entry in entries:
                if entry.id == entry_id and not entry.archived:
                    for name, value in fields.items():
                        setattr(entry, name, value)
                    self._save_entries(entries)
                    return entry
        return None

    async def archive_entry(self, entry_id: str) -> None:
        async with self._lock:
            entries = self._entries()
            for entry in entries:
                if entry.id == entry_id:
                    entry.archived = True
                    self._save_entries(entries)
                    return
        raise KeyError(entry_id)

    async def get_entry(self, entry_id: str) -> Optional[Entry]:
        for entry in self._entries():
            if entry.id == entry_id:
                return entry
        return None

    async def search_entries(self, query: str, limit: int = 10) -> List[Entry]:
        """Active entries ranked by similarity to ``query``; title substrings always match."""
        query_vec = _tokens(query)
        needle = query.strip().lower()
        scored = []
        for entry in self._entries():
            if entry.archived:
                continue
            score = cosine_similarity(query_vec, _tokens(_entry_text(entry)))
            if needle and needle in entry.title.lower():
                score = max(score, 0.5)
            if score > 0:
                entry.similarity = round(score, 4)
                scored.append(entry)
        scored.sort(key=lambda e: e.similarity, reverse=True)
        return scored[:limit]

    async def count_entries(
        self,
        category: Optional[str] = None,
        status: Optional[str] = None,
    ) -> int:
        return sum(
            1 for e in self._entries()
            if not e.archived
            and (category is None or e.category == category)
            and (status is None or e.status == status)
        )

    async def create_audit_record(self, record: AuditRecord) -> None:
        row = {
            "raw_input": record.raw_input,
            "category": record.category,
            "confidence": record.confidence,
            "destination_id": record.destination_id,
            "status": record.status,
            "created_at": _now(),
        }
        async with self._lock:
            log = self._storage.load(AUDIT_KEY)
            log.append(row)
            self._storage.save(AUDIT_KEY, log)

    # -- RelationPort --

    async def suggest_relations(
        self, entry_id: str, limit: int = 3, threshold: float = 0.8,
    ) -> List[Entry]:
        entries = self._entries()
        source = next((e for e in entries if e.id == entry_id), None)
        if source is None:
            return []
        source_vec = _tokens(_entry_text(source))
        candidates = []
        for entry in entries:
            if entry.id == entry_id or entry.archived:
                continue
            score = cosine_similarity(source_vec, _tokens(_entry_text(entry)))
            if score >= threshold:
                entry.similarity = round(score, 4)
                candidates.append(entry)
        candidates.sort(key=lambda e: e.similarity, reverse=True)
        return candidates[:limit]

    async def add_relation(
        self, source_id: str, target_id: str, relation_type: str = "related_to",
    ) -> None:
        async with self._lock:
            relations = self._storage.load(RELATIONS_KEY)
            for r in relations:
                if (r.get("source_id"), r.get("target_id"), r.get("relation_type")) == (
                    source_id, target_id, relation_type,
                ):
                    return
            relations.append({
                "source_id": source_id,
                "target_id": target_id,
                "relation_type": relation_type,
                "created_at": _now(),
            })
            self._storage.save(RELATIONS_KEY, relations)

    async def list_relations(self, entry_id: str) -> List[Dict[str, Any]]:
        return [
            r for r in self._storage.load(RELATIONS_KEY)
            if entry_id in (r.get("source_id"), r.get("target_id"))
        ]
