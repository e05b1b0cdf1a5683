from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class ChatRequest(BaseModel):
    """Body of a relay call, in the camelCase shape the web client sends."""

    message: str = Field(..., description="New user message")
    conversation_id: str = Field(..., alias="conversationId", description="Conversation to continue")
    model: Optional[str] = Field(default=None, description="Provider model id; server default when empty")
    persona_id: Optional[str] = Field(default=None, alias="personaId", description="Persona whose instructions become the system prompt")

    model_config = ConfigDict(populate_by_name=True)


class ChatResponse(BaseModel):
    message: str = Field(..., description="Assistant reply")


class ChatErrorResponse(BaseModel):
    error: str = Field(..., description="Failure message")
