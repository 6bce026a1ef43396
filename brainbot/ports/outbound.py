"""Outbound ports — interfaces for external system adapters."""

from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from brainbot.domain.models import AuditRecord, ButtonRows, ClassificationResult, Entry


@runtime_checkable
class StorePort(Protocol):
    """Durable entry store with similarity search."""

    async def create_entry(
        self,
        category: str,
        title: str,
        content: Optional[Dict[str, Any]] = None,
        priority: Optional[str] = None,
        due_date: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Entry: ...

    async def update_entry(self, entry_id: str, **fields: Any) -> Optional[Entry]: ...

    async def archive_entry(self, entry_id: str) -> None: ...

    async def get_entry(self, entry_id: str) -> Optional[Entry]: ...

    async def search_entries(self, query: str, limit: int = 10) -> List[Entry]: ...

    async def count_entries(
        self,
        category: Optional[str] = None,
        status: Optional[str] = None,
    ) -> int: ...

    async def create_audit_record(self, record: AuditRecord) -> None: ...


@runtime_checkable
class RelationPort(Protocol):
    """Links between entries, suggested by similarity."""

    async def suggest_relations(
        self, entry_id: str, limit: int = 3, threshold: float = 0.8,
    ) -> List[Entry]: ...

    async def add_relation(
        self, source_id: str, target_id: str, relation_type: str = "related_to",
    ) -> None: ...


@runtime_checkable
class LanguagePort(Protocol):
    """Language-model calls. All of them may fail."""

    async def classify(self, text: str) -> ClassificationResult: ...

    async def transcribe(self, audio: bytes, filename: str = "voice.ogg") -> str: ...

    async def describe_image(self, image: bytes) -> str: ...


@runtime_checkable
class ChatPort(Protocol):
    """Chat platform client."""

    async def send_message(
        self,
        chat_id: int,
        text: str,
        markdown: bool = False,
        buttons: Optional[ButtonRows] = None,
    ) -> Dict[str, Any]: ...

    async def send_formatted(self, chat_id: int, markdown: str) -> Dict[str, Any]: ...

    async def answer_callback(
        self, callback_id: str, text: Optional[str] = None,
    ) -> Dict[str, Any]: ...

    async def answer_inline(
        self, query_id: str, results: List[Dict[str, Any]], cache_time: int = 10,
    ) -> Dict[str, Any]: ...

    async def get_file(self, file_id: str) -> Optional[str]: ...

    async def download_file(self, file_path: str) -> bytes: ...


@runtime_checkable
class AppServicesPort(Protocol):
    """Same-process HTTP collaborators: agent, digest, URL ingestion, sessions."""

    async def ask_agent(self, question: str, session_id: str) -> str: ...

    async def fetch_digest(self, kind: str) -> Dict[str, Any]: ...

    async def process_url(self, url: str) -> Dict[str, Any]: ...

    async def delete_session(self, session_id: str) -> None: ...
