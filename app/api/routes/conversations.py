from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from app.api.dependencies import get_db
from app.api.security import get_current_user_id
from app.schemas.conversation_schema import (
    ConversationDetail,
    ConversationListItem,
    CreateConversationRequest,
    MessageResponse,
)
from app.services.chat_store import ChatStore


router = APIRouter()


@router.get("/", response_model=list[ConversationListItem])
def list_conversations(
    q: Optional[str] = Query(default=None, description="Case-insensitive title filter"),
    limit: Optional[int] = Query(default=None, ge=1, le=500),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return ChatStore(db, user_id).list_conversations(search=q, limit=limit)


@router.post("/", response_model=ConversationListItem)
def create_conversation(
    request: CreateConversationRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    store = ChatStore(db, user_id)
    if request.persona_id and not store.get_persona(request.persona_id):
        raise HTTPException(status_code=404, detail="Persona not found")
    return store.create_conversation(
        title=request.title,
        model=request.model,
        persona_id=request.persona_id,
    )


@router.get("/{conversation_id}", response_model=ConversationDetail)
def get_conversation(
    conversation_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    store = ChatStore(db, user_id)
    conv = store.get_conversation(conversation_id)
    if not conv:
        raise HTTPException(status_code=404, detail="Conversation not found")

    messages = store.list_messages(conv.id)
    return ConversationDetail(
        id=conv.id,
        title=conv.title,
        model=conv.model,
        persona_id=conv.persona_id,
        created_at=conv.created_at,
        updated_at=conv.updated_at,
        messages=[MessageResponse.model_validate(m) for m in messages],
    )


@router.delete("/{conversation_id}", status_code=204)
def delete_conversation(
    conversation_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    if not ChatStore(db, user_id).delete_conversation(conversation_id):
        raise HTTPException(status_code=404, detail="Conversation not found")
    return Response(status_code=204)
