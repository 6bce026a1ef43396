"""Inbound port — platform-agnostic update representation.

Exactly one variant describes each inbound update; adapters return None
when an update carries nothing we handle.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Union


@dataclass
class MessageEntity:
    type: str  # "bot_command" | "url" | "mention" | ...
    offset: int
    length: int


@dataclass
class TextMessage:
    chat_id: int
    text: str
    entities: List[MessageEntity] = field(default_factory=list)


@dataclass
class VoiceMessage:
    chat_id: int
    file_id: str
    duration: int = 0  # seconds


@dataclass
class PhotoMessage:
    chat_id: int
    file_ids: List[str]  # ascending resolution, as the platform sends them
    caption: Optional[str] = None


@dataclass
class CallbackPress:
    chat_id: int
    message_id: int
    callback_id: str
    token: str


@dataclass
class InlineQuery:
    query_id: str
    user_id: int
    text: str


Update = Union[TextMessage, VoiceMessage, PhotoMessage, CallbackPress, InlineQuery]
