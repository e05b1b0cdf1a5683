"""Identity-scoped access to conversations, messages and personas.

A ``ChatStore`` is bound to one caller. Reads never return rows owned by
another user and writes against a conversation the caller cannot see fail,
which is the only ownership check the relay relies on.
"""
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.errors import PersistenceError
from app.models.conversation import Conversation
from app.models.message import Message
from app.models.persona import Persona


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ChatStore:
    def __init__(self, db: Session, user_id: str):
        self.db = db
        self.user_id = user_id

    # ── conversations ────────────────────────────────────────────────────────

    def _conversations(self):
        return self.db.query(Conversation).filter(Conversation.user_id == self.user_id)

    def get_conversation(self, conversation_id: str) -> Optional[Conversation]:
        return self._conversations().filter(Conversation.id == conversation_id).first()

    def list_conversations(self, search: Optional[str] = None, limit: Optional[int] = None) -> list[Conversation]:
        q = self._conversations()
        if search:
            q = q.filter(Conversation.title.ilike(f"%{search}%"))
        q = q.order_by(func.coalesce(Conversation.updated_at, Conversation.created_at).desc())
        if limit:
            q = q.limit(limit)
        return q.all()

    def create_conversation(
        self,
        *,
        title: Optional[str] = None,
        model: Optional[str] = None,
        persona_id: Optional[str] = None,
    ) -> Conversation:
        conv = Conversation(user_id=self.user_id, model=model, persona_id=persona_id)
        if title:
            conv.title = title
        self.db.add(conv)
        self.db.commit()
        self.db.refresh(conv)
        return conv

    def delete_conversation(self, conversation_id: str) -> bool:
        conv = self.get_conversation(conversation_id)
        if not conv:
            return False
        self.db.delete(conv)
        self.db.commit()
        return True

    def touch_conversation(
        self,
        conversation_id: str,
        *,
        title: Optional[str] = None,
        model: Optional[str] = None,
    ) -> None:
        """Bump ``updated_at`` and optionally overwrite title / last model.

        A conversation the caller cannot see is left alone, mirroring an
        update filtered out by row-level policy.
        """
        conv = self.get_conversation(conversation_id)
        if not conv:
            return
        if title:
            conv.title = title
        if model:
            conv.model = model
        conv.updated_at = _utcnow()
        self.db.commit()

    # ── messages ─────────────────────────────────────────────────────────────

    def _messages(self, conversation_id: str):
        return (
            self.db.query(Message)
            .join(Conversation, Message.conversation_id == Conversation.id)
            .filter(Conversation.user_id == self.user_id, Message.conversation_id == conversation_id)
        )

    def list_messages(self, conversation_id: str) -> list[Message]:
        return (
            self._messages(conversation_id)
            .order_by(Message.created_at.asc(), Message.seq.asc())
            .all()
        )

    def history(self, conversation_id: str) -> list[dict]:
        """Role/content pairs in creation order, ready to send to the provider."""
        return [{"role": m.role, "content": m.content} for m in self.list_messages(conversation_id)]

    def count_messages(self, conversation_id: str) -> int:
        return self._messages(conversation_id).count()

    def insert_message(
        self,
        conversation_id: str,
        *,
        role: str,
        content: str,
        model: Optional[str] = None,
    ) -> Message:
        if not self.get_conversation(conversation_id):
            raise PersistenceError(f"Conversation {conversation_id} not found")

        last_seq = (
            self.db.query(func.max(Message.seq))
            .filter(Message.conversation_id == conversation_id)
            .scalar()
        )
        msg = Message(
            conversation_id=conversation_id,
            role=role,
            content=content,
            model=model,
            seq=(last_seq or 0) + 1,
        )
        self.db.add(msg)
        self.db.commit()
        self.db.refresh(msg)
        return msg

    # ── personas ─────────────────────────────────────────────────────────────

    def _personas(self):
        return self.db.query(Persona).filter(Persona.user_id == self.user_id)

    def get_persona(self, persona_id: str) -> Optional[Persona]:
        return self._personas().filter(Persona.id == persona_id).first()

    def persona_instructions(self, persona_id: str) -> Optional[str]:
        persona = self.get_persona(persona_id)
        return persona.instructions if persona else None

    def list_personas(self, search: Optional[str] = None) -> list[Persona]:
        q = self._personas()
        if search:
            q = q.filter(Persona.name.ilike(f"%{search}%"))
        return q.order_by(func.coalesce(Persona.updated_at, Persona.created_at).desc()).all()

    def create_persona(self, *, name: str, instructions: str) -> Persona:
        persona = Persona(user_id=self.user_id, name=name, instructions=instructions)
        self.db.add(persona)
        self.db.commit()
        self.db.refresh(persona)
        return persona

    def update_persona(self, persona_id: str, *, name: str, instructions: str) -> Optional[Persona]:
        persona = self.get_persona(persona_id)
        if not persona:
            return None
        persona.name = name
        persona.instructions = instructions
        persona.updated_at = _utcnow()
        self.db.commit()
        self.db.refresh(persona)
        return persona

    def delete_persona(self, persona_id: str) -> bool:
        persona = self.get_persona(persona_id)
        if not persona:
            return False
        # SQLite does not enforce ON DELETE SET NULL without the foreign_keys pragma.
        self.db.query(Conversation).filter(Conversation.persona_id == persona_id).update(
            {Conversation.persona_id: None}, synchronize_session=False
        )
        self.db.delete(persona)
        self.db.commit()
        return True
