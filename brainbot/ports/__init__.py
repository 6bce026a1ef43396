"""Port interfaces (Hexagonal Architecture)."""

from brainbot.ports.inbound import (
    CallbackPress,
    InlineQuery,
    MessageEntity,
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

__all__ = [
    "CallbackPress",
    "InlineQuery",
    "MessageEntity",
    "PhotoMessage",
    "TextMessage",
    "Update",
    "VoiceMessage",
    "AppServicesPort",
    "ChatPort",
    "LanguagePort",
    "RelationPort",
    "StorePort",
]
