import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from app.core.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Message(Base):
    __tablename__ = "messages"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    conversation_id = Column(
        String(36), ForeignKey("conversations.id", ondelete="CASCADE"), index=True, nullable=False
    )

    # "user" | "assistant" | "system"
    role = Column(String(32), nullable=False)
    content = Column(Text, nullable=False)
    # only set on assistant rows
    model = Column(String(255), nullable=True)

    # Client-side default keeps microseconds, which orders the user/assistant
    # pair of one exchange; server_default=func.now() is second-resolution on SQLite.
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False, index=True)
    # Per-conversation insertion counter; breaks created_at ties.
    seq = Column(Integer, nullable=False, default=0)

    conversation = relationship("Conversation", back_populates="messages")
