"""Pydantic models for the Telegram webhook payload.

Only the fields the router reads are declared; everything else is ignored.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from brainbot.ports.inbound import (
    CallbackPress,
    InlineQuery,
    MessageEntity,
    PhotoMessage,
    TextMessage,
    Update,
    VoiceMessage,
)


class TgUser(BaseModel):
    id: int


class TgChat(BaseModel):
    id: int


class TgEntity(BaseModel):
    type: str
    offset: int
    length: int


class TgVoice(BaseModel):
    file_id: str
    duration: int = 0


class TgPhotoSize(BaseModel):
    file_id: str
    width: int = 0
    height: int = 0


class TgMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message_id: int
    chat: TgChat
    from_: Optional[TgUser] = Field(default=None, alias="from")
    text: Optional[str] = None
    entities: List[TgEntity] = Field(default_factory=list)
    voice: Optional[TgVoice] = None
    photo: List[TgPhotoSize] = Field(default_factory=list)
    caption: Optional[str] = None


class TgCallbackQuery(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    from_: TgUser = Field(alias="from")
    message: Optional[TgMessage] = None
    data: Optional[str] = None


class TgInlineQuery(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    from_: TgUser = Field(alias="from")
    query: str = ""


class TgUpdate(BaseModel):
    update_id: int
    message: Optional[TgMessage] = None
    callback_query: Optional[TgCallbackQuery] = None
    inline_query: Optional[TgInlineQuery] = None

    def to_domain(self) -> Optional[Update]:
        """The one Update variant this payload carries, or None."""
        if self.callback_query:
            cq = self.callback_query
            if cq.data is None:
                return None
            if cq.message:
                chat_id, message_id = cq.message.chat.id, cq.message.message_id
            else:
                # Pressed on an inline-mode message: no chat, only the user
                chat_id, message_id = cq.from_.id, 0
            return CallbackPress(
                chat_id=chat_id,
                message_id=message_id,
                callback_id=cq.id,
                token=cq.data,
            )

        if self.inline_query:
            iq = self.inline_query
            return InlineQuery(query_id=iq.id, user_id=iq.from_.id, text=iq.query)

        msg = self.message
        if not msg:
            return None
        if msg.voice:
            return VoiceMessage(
                chat_id=msg.chat.id,
                file_id=msg.voice.file_id,
                duration=msg.voice.duration,
            )
        if msg.photo:
            return PhotoMessage(
                chat_id=msg.chat.id,
                file_ids=[p.file_id for p in msg.photo],
                caption=msg.caption,
            )
        if msg.text is not None:
            return TextMessage(
                chat_id=msg.chat.id,
                text=msg.text,
                entities=[
                    MessageEntity(type=e.type, offset=e.offset, length=e.length)
                    for e in msg.entities
                ],
            )
        return None
