"""Domain data models — pure Python dataclasses."""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass
class ParsedCommand:
    """``/name args`` split out of a message."""

    name: str
    args: str


@dataclass(frozen=True)
class ActionToken:
    """Decoded callback token."""

    verb: str  # e.g. "done", "snz"
    entry_id: str
    param: Optional[str] = None


@dataclass(frozen=True)
class ClassificationResult:
    """Classifier output for one capture. Never mutated."""

    category: str  # People | Project | Idea | Admin
    confidence: float  # 0.0-1.0
    fields: Dict[str, str] = field(default_factory=dict)
    reasoning: str = ""


@dataclass
class DateExpressionResult:
    """``date`` is None when no date expression was recognised."""

    date: Optional[datetime]
    remainder: str


@dataclass
class Button:
    """Platform-agnostic inline button: label + callback token."""

    text: str
    token: str


@dataclass
class Entry:
    """One stored item of knowledge or work."""

    id: str
    category: str
    title: str
    status: str = ""
    priority: Optional[str] = None
    content: Dict[str, Any] = field(default_factory=dict)
    due_date: Optional[str] = None  # ISO date
    archived: bool = False
    similarity: Optional[float] = None
    created_at: str = ""  # ISO datetime

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Entry":
        return cls(
            id=str(data["id"]),
            category=data.get("category", ""),
            title=data.get("title", ""),
            status=data.get("status") or "",
            priority=data.get("priority"),
            content=dict(data.get("content") or {}),
            due_date=data.get("due_date"),
            archived=bool(data.get("archived", False)),
            similarity=data.get("similarity"),
            created_at=data.get("created_at", ""),
        )


@dataclass
class AuditRecord:
    """Inbox log row written after each capture."""

    raw_input: str
    category: str
    confidence: float
    destination_id: str
    status: str = "Processed"


ButtonRows = List[List[Button]]
