from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.conversation import DEFAULT_CONVERSATION_TITLE


class CreateConversationRequest(BaseModel):
    title: str = Field(default=DEFAULT_CONVERSATION_TITLE, min_length=1, max_length=255)
    model: Optional[str] = Field(default=None, max_length=255)
    persona_id: Optional[str] = None


class ConversationListItem(BaseModel):
    id: str
    title: str
    model: Optional[str] = None
    persona_id: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class MessageResponse(BaseModel):
    id: str
    conversation_id: str
    role: str
    content: str
    model: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ConversationDetail(ConversationListItem):
    messages: list[MessageResponse]
